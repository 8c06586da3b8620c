"""
Marketplace Store Interface

The repository every handler, the matching engine and the lifecycle state
machine receive by injection. Two implementations ship:

- InMemoryStore  (tests, local development)
- PostgresStore  (production, psycopg2)

Both must guarantee:
- at most one Match per (traveler_listing_id, sender_listing_id), enforced
  inside the store (insert_match raises DuplicateMatch)
- update_match_if is an atomic compare-and-set on one match row
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import IssueReport, Match, SenderListing, TravelerListing, User

# Columns the lifecycle state machine may read in expectations and write
MATCH_MUTABLE_FIELDS = frozenset({
    "status",
    "drop_off_completed",
    "pick_up_completed",
    "destination_drop_off_completed",
    "destination_pick_up_completed",
})


def check_match_fields(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - MATCH_MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Not a mutable match field: {sorted(unknown)}")


class MarketStore(ABC):
    """Repository over users, listings, matches and issue reports."""

    # ----- users -----

    @abstractmethod
    def add_user(self, user: User) -> User:
        """Insert a user. Emails are unique (case-insensitive)."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""

    # ----- traveler listings -----

    @abstractmethod
    def add_traveler_listing(self, listing: TravelerListing) -> TravelerListing:
        ...

    @abstractmethod
    def get_traveler_listing(self, listing_id: str) -> Optional[TravelerListing]:
        ...

    @abstractmethod
    def list_traveler_listings_for_user(self, user_id: str) -> List[TravelerListing]:
        """Owner's listings ordered by departure_time ascending."""

    @abstractmethod
    def find_traveler_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        min_available_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        departs_on_or_after: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[TravelerListing]:
        """Filtered traveler listings ordered by departure_time ascending."""

    # ----- sender listings -----

    @abstractmethod
    def add_sender_listing(self, listing: SenderListing) -> SenderListing:
        ...

    @abstractmethod
    def get_sender_listing(self, listing_id: str) -> Optional[SenderListing]:
        ...

    @abstractmethod
    def list_sender_listings_for_user(self, user_id: str) -> List[SenderListing]:
        """Owner's listings ordered by created_at descending."""

    @abstractmethod
    def find_sender_listings(
        self,
        origin_airport: Optional[str] = None,
        destination_airport: Optional[str] = None,
        max_package_weight: Optional[float] = None,
        exclude_user_id: Optional[str] = None,
        created_on_or_before: Optional[datetime] = None,
        active_only: bool = True,
    ) -> List[SenderListing]:
        """Filtered sender listings ordered by created_at descending."""

    # ----- matches -----

    @abstractmethod
    def insert_match(self, match: Match) -> Match:
        """
        Insert a new match.

        Raises:
            DuplicateMatch: a match already exists for the listing pair
        """

    @abstractmethod
    def get_match(self, match_id: str) -> Optional[Match]:
        ...

    @abstractmethod
    def get_match_for_pair(
        self, traveler_listing_id: str, sender_listing_id: str
    ) -> Optional[Match]:
        ...

    @abstractmethod
    def list_matches_for_user(
        self, user_id: str, include_completed: bool = False
    ) -> List[Match]:
        """Matches where the user is traveler, sender or receiver, newest first."""

    @abstractmethod
    def update_match_if(
        self,
        match_id: str,
        expected: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Optional[Match]:
        """
        Atomically apply ``changes`` if every ``expected`` column still holds.

        Returns the updated match, or None when the match is missing or any
        expectation no longer holds.
        """

    # ----- issue reports -----

    @abstractmethod
    def add_issue_report(self, report: IssueReport) -> IssueReport:
        ...

    @abstractmethod
    def list_issue_reports(self, match_id: str) -> List[IssueReport]:
        """Reports for a match, oldest first."""

    # ----- health -----

    def ping(self) -> bool:
        return True
