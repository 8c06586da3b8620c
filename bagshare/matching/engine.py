"""
Matching Engine

Runs once per newly created listing and pairs it with every compatible
listing of the opposite kind. There is no periodic sweep: a listing keeps
producing matches as long as new counterparts are posted.

Compatibility (both paths):
- same origin and destination airport (exact uppercase IATA codes)
- package_weight <= available_weight
- different owners
- lead time, which differs by path:
    sender-triggered:   traveler departure_time >= now + 24h
    traveler-triggered: sender created_at <= departure_time - 24h

Creation is idempotent per (traveler_listing_id, sender_listing_id); the
store's uniqueness guarantee closes the race between two concurrent runs.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from bagshare import config
from bagshare.notifications import (
    MatchNotification,
    NotificationChannel,
    format_match_notification,
    format_traveler_notification,
)
from bagshare.shared.errors import DuplicateMatch
from bagshare.store.base import MarketStore
from bagshare.store.models import Match, SenderListing, TravelerListing

logger = logging.getLogger(__name__)


def lead_time() -> timedelta:
    return timedelta(hours=config.MATCH_LEAD_TIME_HOURS)


def create_match_for_pair(
    store: MarketStore,
    traveler_listing: TravelerListing,
    sender_listing: SenderListing,
) -> Optional[Match]:
    """
    Create the match for one listing pair unless it already exists.

    Returns the new match, or None when the pair is already matched or the
    sender listing has no receiver.
    """
    if store.get_match_for_pair(traveler_listing.id, sender_listing.id):
        return None

    if not sender_listing.receiver_id:
        logger.error(
            f"Sender listing {sender_listing.id} has no receiver_id. "
            f"Skipping match with traveler listing {traveler_listing.id}."
        )
        return None

    try:
        match = store.insert_match(Match(
            traveler_listing_id=traveler_listing.id,
            sender_listing_id=sender_listing.id,
            traveler_id=traveler_listing.user_id,
            sender_id=sender_listing.user_id,
            receiver_id=sender_listing.receiver_id,
        ))
    except DuplicateMatch:
        # Lost the race to a concurrent matching run for the same pair
        logger.info(
            f"Match for traveler listing {traveler_listing.id} and "
            f"sender listing {sender_listing.id} created concurrently"
        )
        return None

    logger.info(
        f"Created match {match.id}: traveler listing {traveler_listing.id} "
        f"<-> sender listing {sender_listing.id} "
        f"({sender_listing.origin_airport}->{sender_listing.destination_airport})"
    )
    return match


def publish_match_notifications(
    store: MarketStore,
    channel: Optional[NotificationChannel],
    match: Match,
    traveler_listing: TravelerListing,
    sender_listing: SenderListing,
) -> None:
    """Queue the sender and traveler notifications for a new match. Never raises."""
    if channel is None:
        return
    try:
        sender = store.get_user(match.sender_id)
        traveler = store.get_user(match.traveler_id)
        origin = sender_listing.origin_airport
        destination = sender_listing.destination_airport

        channel.publish(MatchNotification(
            match_id=match.id,
            recipient_id=match.sender_id,
            recipient_phone=sender.phone if sender else None,
            message=format_match_notification(origin, destination),
        ))
        channel.publish(MatchNotification(
            match_id=match.id,
            recipient_id=match.traveler_id,
            recipient_phone=traveler.phone if traveler else None,
            message=format_traveler_notification(
                sender.name if sender else "A sender", origin, destination
            ),
        ))
    except Exception:
        logger.exception(f"Failed to queue notifications for match {match.id} (non-fatal)")


def match_from_sender_listing(
    store: MarketStore,
    sender_listing_id: str,
    channel: Optional[NotificationChannel] = None,
    now: Optional[datetime] = None,
) -> List[Match]:
    """
    Match a newly created sender listing against active traveler listings.

    Returns the matches created by this call.
    """
    sender_listing = store.get_sender_listing(sender_listing_id)
    if sender_listing is None:
        logger.warning(f"Sender listing {sender_listing_id} not found, nothing to match")
        return []

    current = now or datetime.now(timezone.utc)
    candidates = store.find_traveler_listings(
        origin_airport=sender_listing.origin_airport,
        destination_airport=sender_listing.destination_airport,
        min_available_weight=sender_listing.package_weight,
        exclude_user_id=sender_listing.user_id,
        departs_on_or_after=current + lead_time(),
        active_only=True,
    )

    created: List[Match] = []
    for traveler_listing in candidates:
        match = create_match_for_pair(store, traveler_listing, sender_listing)
        if match is None:
            continue
        created.append(match)
        publish_match_notifications(store, channel, match, traveler_listing, sender_listing)

    logger.info(
        f"Sender listing {sender_listing_id}: {len(candidates)} candidate(s), "
        f"{len(created)} new match(es)"
    )
    return created


def match_from_traveler_listing(
    store: MarketStore,
    traveler_listing_id: str,
    channel: Optional[NotificationChannel] = None,
) -> List[Match]:
    """
    Match a newly created traveler listing against active sender listings.

    Only sender listings posted at least the lead time before departure
    qualify, giving senders time to prepare the package.

    Returns the matches created by this call.
    """
    traveler_listing = store.get_traveler_listing(traveler_listing_id)
    if traveler_listing is None:
        logger.warning(f"Traveler listing {traveler_listing_id} not found, nothing to match")
        return []

    candidates = store.find_sender_listings(
        origin_airport=traveler_listing.origin_airport,
        destination_airport=traveler_listing.destination_airport,
        max_package_weight=traveler_listing.available_weight,
        exclude_user_id=traveler_listing.user_id,
        created_on_or_before=traveler_listing.departure_time - lead_time(),
        active_only=True,
    )

    created: List[Match] = []
    for sender_listing in candidates:
        match = create_match_for_pair(store, traveler_listing, sender_listing)
        if match is None:
            continue
        created.append(match)
        publish_match_notifications(store, channel, match, traveler_listing, sender_listing)

    logger.info(
        f"Traveler listing {traveler_listing_id}: {len(candidates)} candidate(s), "
        f"{len(created)} new match(es)"
    )
    return created
