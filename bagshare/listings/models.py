"""
Listing Request/Response Models

Request bodies are deliberately permissive (every field optional) so that
validate.py can report exactly which rule a listing breaks.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from bagshare.store.models import SenderListing, TravelerListing


class TravelerListingCreate(BaseModel):
    origin_airport: Optional[str] = Field(default=None, description="3-letter IATA code")
    destination_airport: Optional[str] = Field(default=None, description="3-letter IATA code")
    flight_number: Optional[str] = None
    departure_time: Optional[datetime] = Field(
        default=None,
        description="At least 24 hours from now; naive values are read as UTC"
    )
    arrival_time: Optional[datetime] = None
    available_weight: Optional[float] = Field(default=None, description="Spare capacity in kg")


class SenderListingCreate(BaseModel):
    origin_airport: Optional[str] = None
    destination_airport: Optional[str] = None
    package_weight: Optional[float] = Field(default=None, description="Package weight in kg")
    package_type: Optional[str] = Field(default=None, description="carry-on, checked or either")
    description: Optional[str] = None
    receiver_email: Optional[str] = Field(
        default=None,
        description="Must belong to an existing user other than the sender"
    )


class ListingOwner(BaseModel):
    """Public owner info attached to search results."""
    id: str
    name: str


class TravelerListingResult(TravelerListing):
    user: Optional[ListingOwner] = None


class SenderListingResult(SenderListing):
    user: Optional[ListingOwner] = None


# Response models

class TravelerListingCreated(BaseModel):
    listing: TravelerListing
    matches_created: int = 0


class SenderListingCreated(BaseModel):
    listing: SenderListing
    matches_created: int = 0


class TravelerListingList(BaseModel):
    listings: List[TravelerListing]


class SenderListingList(BaseModel):
    listings: List[SenderListing]


class ListingSearchResponse(BaseModel):
    type: str
    listings: List[Union[TravelerListingResult, SenderListingResult]]
