"""
Bagshare Listings Layer

Traveler capacity and sender package listings: validation rules, creation
endpoints (which trigger the matching engine) and public route search.
"""

from .models import SenderListingCreate, TravelerListingCreate
from .validate import build_sender_listing, build_traveler_listing, normalize_airport_code

__all__ = [
    "SenderListingCreate",
    "TravelerListingCreate",
    "build_sender_listing",
    "build_traveler_listing",
    "normalize_airport_code",
]
