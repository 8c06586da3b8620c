"""
Listing Endpoints
=================

- POST /api/v1/travelers/listings   - create traveler listing, then match it
- GET  /api/v1/travelers/my-listings
- POST /api/v1/senders/listings     - create sender listing, then match it
- GET  /api/v1/senders/my-listings
- GET  /api/v1/listings/search      - public; hides the caller's own listings

Matching runs right after the listing is stored. A matching failure is
logged and never fails the request: the listing already exists.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from bagshare.dependencies import get_channel, get_store, get_worker
from bagshare.matching.engine import match_from_sender_listing, match_from_traveler_listing
from bagshare.notifications import NotificationChannel, NotificationWorker
from bagshare.shared.auth import Principal, optional_principal, require_principal
from bagshare.shared.errors import ValidationFailed
from bagshare.store.base import MarketStore
from bagshare.store.models import User
from .models import (
    ListingOwner,
    ListingSearchResponse,
    SenderListingCreate,
    SenderListingCreated,
    SenderListingList,
    SenderListingResult,
    TravelerListingCreate,
    TravelerListingCreated,
    TravelerListingList,
    TravelerListingResult,
)
from .validate import build_sender_listing, build_traveler_listing

logger = logging.getLogger(__name__)
router = APIRouter(tags=["listings"])


def _owner(user: Optional[User]) -> Optional[ListingOwner]:
    return ListingOwner(id=user.id, name=user.name) if user else None


@router.post("/api/v1/travelers/listings", response_model=TravelerListingCreated, status_code=201)
def create_traveler_listing(
    request: TravelerListingCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
    channel: NotificationChannel = Depends(get_channel),
    worker: NotificationWorker = Depends(get_worker),
):
    """Offer spare baggage capacity on a flight at least 24 hours away."""
    listing = store.add_traveler_listing(build_traveler_listing(request, principal.user_id))

    matches_created = 0
    try:
        matches_created = len(match_from_traveler_listing(store, listing.id, channel=channel))
    except Exception:
        logger.exception(f"Matching failed for traveler listing {listing.id} (non-fatal)")

    if matches_created:
        background_tasks.add_task(worker.run_pending)
    return TravelerListingCreated(listing=listing, matches_created=matches_created)


@router.get("/api/v1/travelers/my-listings", response_model=TravelerListingList)
def my_traveler_listings(
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    return TravelerListingList(listings=store.list_traveler_listings_for_user(principal.user_id))


@router.post("/api/v1/senders/listings", response_model=SenderListingCreated, status_code=201)
def create_sender_listing(
    request: SenderListingCreate,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
    channel: NotificationChannel = Depends(get_channel),
    worker: NotificationWorker = Depends(get_worker),
):
    """Post a package. The receiver must already have an account."""
    listing = store.add_sender_listing(build_sender_listing(store, request, principal.user_id))

    matches_created = 0
    try:
        matches_created = len(match_from_sender_listing(store, listing.id, channel=channel))
    except Exception:
        logger.exception(f"Matching failed for sender listing {listing.id} (non-fatal)")

    if matches_created:
        background_tasks.add_task(worker.run_pending)
    return SenderListingCreated(listing=listing, matches_created=matches_created)


@router.get("/api/v1/senders/my-listings", response_model=SenderListingList)
def my_sender_listings(
    principal: Principal = Depends(require_principal),
    store: MarketStore = Depends(get_store),
):
    return SenderListingList(listings=store.list_sender_listings_for_user(principal.user_id))


@router.get("/api/v1/listings/search", response_model=ListingSearchResponse)
def search_listings(
    type: Optional[str] = Query(None, description="traveler or sender"),
    origin_airport: Optional[str] = None,
    destination_airport: Optional[str] = None,
    origin: Optional[str] = Query(None, description="Legacy alias of origin_airport"),
    destination: Optional[str] = Query(None, description="Legacy alias of destination_airport"),
    principal: Optional[Principal] = Depends(optional_principal),
    store: MarketStore = Depends(get_store),
):
    """
    Search active listings by route.

    Does not require authentication. With a valid token the caller's own
    listings are left out.
    """
    origin_code = (origin_airport or origin or "").strip().upper() or None
    destination_code = (destination_airport or destination or "").strip().upper() or None
    exclude_user_id = principal.user_id if principal else None

    if type == "traveler":
        traveler_listings = store.find_traveler_listings(
            origin_airport=origin_code,
            destination_airport=destination_code,
            exclude_user_id=exclude_user_id,
        )
        results: List = [
            TravelerListingResult(**l.model_dump(), user=_owner(store.get_user(l.user_id)))
            for l in traveler_listings
        ]
    elif type == "sender":
        sender_listings = store.find_sender_listings(
            origin_airport=origin_code,
            destination_airport=destination_code,
            exclude_user_id=exclude_user_id,
        )
        results = [
            SenderListingResult(**l.model_dump(), user=_owner(store.get_user(l.user_id)))
            for l in sender_listings
        ]
    else:
        raise ValidationFailed("Invalid type parameter")

    return ListingSearchResponse(type=type, listings=results)
