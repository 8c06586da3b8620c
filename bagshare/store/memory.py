"""
In-memory MarketStore.

Single process only. One lock serializes every write, which gives the
pair-uniqueness and compare-and-set guarantees the interface promises.
"""

from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

from bagshare.shared.errors import DuplicateMatch, ValidationFailed
from .base import MarketStore, check_match_fields
from .models import IssueReport, Match, SenderListing, TravelerListing, User, utcnow


class InMemoryStore(MarketStore):

    def __init__(self):
        self._lock = Lock()
        self._users: Dict[str, User] = {}
        self._traveler_listings: Dict[str, TravelerListing] = {}
        self._sender_listings: Dict[str, SenderListing] = {}
        self._matches: Dict[str, Match] = {}
        self._match_pairs: Dict[Tuple[str, str], str] = {}
        self._issue_reports: List[IssueReport] = []

    # ----- users -----

    def add_user(self, user: User) -> User:
        with self._lock:
            user = user.model_copy(update={"email": user.email.strip().lower()})
            if any(u.email == user.email for u in self._users.values()):
                raise ValidationFailed("User already exists")
            self._users[user.id] = user
            return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    # ----- traveler listings -----

    def add_traveler_listing(self, listing: TravelerListing) -> TravelerListing:
        with self._lock:
            self._traveler_listings[listing.id] = listing
            return listing

    def get_traveler_listing(self, listing_id: str) -> Optional[TravelerListing]:
        return self._traveler_listings.get(listing_id)

    def list_traveler_listings_for_user(self, user_id: str) -> List[TravelerListing]:
        listings = [l for l in self._traveler_listings.values() if l.user_id == user_id]
        return sorted(listings, key=lambda l: l.departure_time)

    def find_traveler_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        min_available_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        departs_on_or_after: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[TravelerListing]:
        results = []
        for listing in self._traveler_listings.values():
            if active_only and not listing.is_active:
                continue
            if origin_airport and listing.origin_airport != origin_airport:
                continue
            if destination_airport and listing.destination_airport != destination_airport:
                continue
            if min_available_weight is not None and listing.available_weight < min_available_weight:
                continue
            if exclude_user_id and listing.user_id == exclude_user_id:
                continue
            if departs_on_or_after is not None and listing.departure_time < departs_on_or_after:
                continue
            results.append(listing)
        return sorted(results, key=lambda l: l.departure_time)

    # ----- sender listings -----

    def add_sender_listing(self, listing: SenderListing) -> SenderListing:
        with self._lock:
            self._sender_listings[listing.id] = listing
            return listing

    def get_sender_listing(self, listing_id: str) -> Optional[SenderListing]:
        return self._sender_listings.get(listing_id)

    def list_sender_listings_for_user(self, user_id: str) -> List[SenderListing]:
        listings = [l for l in self._sender_listings.values() if l.user_id == user_id]
        return sorted(listings, key=lambda l: l.created_at, reverse=True)

    def find_sender_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        max_package_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        created_on_or_before: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[SenderListing]:
        results = []
        for listing in self._sender_listings.values():
            if active_only and not listing.is_active:
                continue
            if origin_airport and listing.origin_airport != origin_airport:
                continue
            if destination_airport and listing.destination_airport != destination_airport:
                continue
            if max_package_weight is not None and listing.package_weight > max_package_weight:
                continue
            if exclude_user_id and listing.user_id == exclude_user_id:
                continue
            if created_on_or_before is not None and listing.created_at > created_on_or_before:
                continue
            results.append(listing)
        return sorted(results, key=lambda l: l.created_at, reverse=True)

    # ----- matches -----

    def insert_match(self, match: Match) -> Match:
        pair = (match.traveler_listing_id, match.sender_listing_id)
        with self._lock:
            if pair in self._match_pairs:
                raise DuplicateMatch(
                    f"Match already exists for traveler listing {pair[0]} "
                    f"and sender listing {pair[1]}"
                )
            self._matches[match.id] = match
            self._match_pairs[pair] = match.id
            return match

    def get_match(self, match_id: str) -> Optional[Match]:
        return self._matches.get(match_id)

    def get_match_for_pair(
        self, traveler_listing_id: str, sender_listing_id: str
    ) -> Optional[Match]:
        match_id = self._match_pairs.get((traveler_listing_id, sender_listing_id))
        return self._matches.get(match_id) if match_id else None

    def list_matches_for_user(
        self, user_id: str, include_completed: bool = False
    ) -> List[Match]:
        results = [
            m for m in self._matches.values()
            if user_id in (m.traveler_id, m.sender_id, m.receiver_id)
            and (include_completed or m.status != "completed")
        ]
        return sorted(results, key=lambda m: m.created_at, reverse=True)

    def update_match_if(
        self,
        match_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Optional[Match]:
        check_match_fields(expected)
        check_match_fields(changes)
        with self._lock:
            current = self._matches.get(match_id)
            if current is None:
                return None
            for column, value in expected.items():
                if getattr(current, column) != value:
                    return None
            updated = current.model_copy(update={**changes, "updated_at": utcnow()})
            self._matches[match_id] = updated
            return updated

    # ----- issue reports -----

    def add_issue_report(self, report: IssueReport) -> IssueReport:
        with self._lock:
            self._issue_reports.append(report)
            return report

    def list_issue_reports(self, match_id: str) -> List[IssueReport]:
        reports = [r for r in self._issue_reports if r.match_id == match_id]
        return sorted(reports, key=lambda r: r.created_at)
