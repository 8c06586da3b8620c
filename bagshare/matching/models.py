"""
Matching Layer Models

Transition vocabulary for the match lifecycle, viewer-facing match payloads
and request/response bodies for the match endpoints.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from bagshare.store.models import (
    IssueReport,
    Match,
    MatchStatus,
    SenderListing,
    TravelerListing,
)


class MatchRole(str, Enum):
    """Role a participant holds on a match."""
    TRAVELER = "traveler"
    SENDER = "sender"
    RECEIVER = "receiver"


class MatchTransition(str, Enum):
    """Every state change a match can undergo after creation."""
    ACCEPT = "accept"
    REJECT = "reject"
    DROP_OFF = "drop_off"
    PICK_UP = "pick_up"
    DESTINATION_DROP_OFF = "destination_drop_off"
    DESTINATION_PICK_UP = "destination_pick_up"


# Anonymized traveler identity shown to senders and receivers
ANONYMOUS_TRAVELER_NAME = "Anonymous Traveler"
ANONYMOUS_TRAVELER_EMAIL = "hidden@example.com"
ANONYMOUS_TRAVELER_PHONE = "***-***-****"


class UserSummary(BaseModel):
    """Public identity of a match participant."""
    id: str
    name: str
    email: str
    phone: str


class MatchView(BaseModel):
    """A match as returned to one viewer."""
    id: str
    status: MatchStatus
    traveler_listing_id: str
    sender_listing_id: str
    traveler_id: str
    sender_id: str
    receiver_id: str
    drop_off_completed: bool
    pick_up_completed: bool
    destination_drop_off_completed: bool
    destination_pick_up_completed: bool
    created_at: datetime
    updated_at: datetime
    traveler: Optional[UserSummary] = None
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
    traveler_listing: Optional[TravelerListing] = None
    sender_listing: Optional[SenderListing] = None


# Request models

class StatusUpdateRequest(BaseModel):
    status: str = Field(
        description="Target status: pending, accepted, rejected or completed"
    )


class IssueReportRequest(BaseModel):
    description: str = Field(default="", description="What went wrong with the package")


# Response models

class MatchResponse(BaseModel):
    match: Match


class MatchViewResponse(BaseModel):
    match: MatchView


class MatchListResponse(BaseModel):
    matches: List[MatchView]


class IssueReportResponse(BaseModel):
    issue_report: IssueReport


class IssueReportListResponse(BaseModel):
    issue_reports: List[IssueReport]
