"""
Persisted Records

Pydantic models for every row the marketplace stores. Stores hand these
out as values; callers never mutate them in place (use ``model_copy``).
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class PackageType(str, Enum):
    CARRY_ON = "carry-on"
    CHECKED = "checked"
    EITHER = "either"


class MatchStatus(str, Enum):
    """Lifecycle status of a match. REJECTED and COMPLETED are terminal."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class User(BaseModel):
    id: str = Field(default_factory=new_id)
    email: str
    name: str
    phone: str
    password_hash: str = ""


class TravelerListing(BaseModel):
    """Spare baggage capacity on one flight."""
    id: str = Field(default_factory=new_id)
    user_id: str
    origin_airport: str
    destination_airport: str
    flight_number: Optional[str] = None
    departure_time: datetime
    arrival_time: datetime
    available_weight: float
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class SenderListing(BaseModel):
    """A package waiting for a traveler."""
    id: str = Field(default_factory=new_id)
    user_id: str
    receiver_id: Optional[str] = None
    receiver_email: str
    origin_airport: str
    destination_airport: str
    package_weight: float
    package_type: PackageType
    description: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class Match(BaseModel):
    """
    Pairing of one traveler listing with one sender listing.

    The four checkpoint flags only ever move False -> True, in declaration
    order, while the match is ACCEPTED.
    """
    id: str = Field(default_factory=new_id)
    traveler_listing_id: str
    sender_listing_id: str
    traveler_id: str
    sender_id: str
    receiver_id: str
    status: MatchStatus = MatchStatus.PENDING
    drop_off_completed: bool = False
    pick_up_completed: bool = False
    destination_drop_off_completed: bool = False
    destination_pick_up_completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class IssueReport(BaseModel):
    """Append-only custody issue raised by the traveler."""
    id: str = Field(default_factory=new_id)
    match_id: str
    reported_by_id: str
    description: str
    created_at: datetime = Field(default_factory=utcnow)
