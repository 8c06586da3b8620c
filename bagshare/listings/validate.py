"""
Listing Validation

Every rule runs before anything is written. A listing that fails raises
ValidationFailed and leaves the store untouched.

Traveler listing:
- all of origin, destination, departure, arrival, weight present
- airport codes trimmed + uppercased, exactly 3 letters
- available_weight > 0
- departure_time >= now + 24h
- arrival_time > departure_time

Sender listing:
- all fields present, description non-empty after trimming
- airport codes as above, package_weight > 0, package_type in enum
- receiver_email well formed and belongs to an existing user who is not
  the sender
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from bagshare import config
from bagshare.shared.errors import ValidationFailed
from bagshare.store.base import MarketStore
from bagshare.store.models import PackageType, SenderListing, TravelerListing
from .models import SenderListingCreate, TravelerListingCreate

IATA_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_airport_code(value: str, label: str) -> str:
    code = value.strip().upper()
    if not IATA_CODE_PATTERN.match(code):
        raise ValidationFailed(f"{label} airport must be a valid 3-letter IATA code")
    return code


def _require_positive(value: float, message: str) -> float:
    if value is None or not value > 0:
        raise ValidationFailed(message)
    return float(value)


def build_traveler_listing(
    request: TravelerListingCreate,
    user_id: str,
    now: Optional[datetime] = None,
) -> TravelerListing:
    """Validate a traveler listing request and build the record to store."""
    missing = {
        "origin_airport": not request.origin_airport,
        "destination_airport": not request.destination_airport,
        "departure_time": request.departure_time is None,
        "arrival_time": request.arrival_time is None,
        "available_weight": request.available_weight is None,
    }
    if any(missing.values()):
        raise ValidationFailed("Missing required fields", details={"missing": missing})

    departure = as_utc(request.departure_time)
    arrival = as_utc(request.arrival_time)
    current = now or datetime.now(timezone.utc)

    if departure < current + timedelta(hours=config.MATCH_LEAD_TIME_HOURS):
        raise ValidationFailed(
            f"Departure time must be at least {config.MATCH_LEAD_TIME_HOURS} hours from now"
        )
    if arrival <= departure:
        raise ValidationFailed("Arrival time must be after departure time")

    weight = _require_positive(
        request.available_weight, "Invalid weight. Must be a positive number"
    )
    origin = normalize_airport_code(request.origin_airport, "Origin")
    destination = normalize_airport_code(request.destination_airport, "Destination")

    flight_number = (request.flight_number or "").strip().upper() or None

    return TravelerListing(
        user_id=user_id,
        origin_airport=origin,
        destination_airport=destination,
        flight_number=flight_number,
        departure_time=departure,
        arrival_time=arrival,
        available_weight=weight,
        created_at=current,
    )


def build_sender_listing(
    store: MarketStore,
    request: SenderListingCreate,
    user_id: str,
    now: Optional[datetime] = None,
) -> SenderListing:
    """Validate a sender listing request, resolve the receiver and build the record."""
    required = (
        request.origin_airport,
        request.destination_airport,
        request.package_weight,
        request.package_type,
        request.description,
        request.receiver_email,
    )
    if any(value is None or value == "" for value in required):
        raise ValidationFailed("Missing required fields")

    description = request.description.strip()
    if not description:
        raise ValidationFailed("Description is required and cannot be empty")

    receiver_email = request.receiver_email.strip()
    if not receiver_email:
        raise ValidationFailed("Receiver email is required")
    if not EMAIL_PATTERN.match(receiver_email):
        raise ValidationFailed("Invalid receiver email format")

    try:
        package_type = PackageType(request.package_type)
    except ValueError:
        raise ValidationFailed(
            "Invalid package type. Must be carry-on, checked, or either"
        )

    weight = _require_positive(
        request.package_weight, "Invalid weight. Must be a positive number"
    )
    origin = normalize_airport_code(request.origin_airport, "Origin")
    destination = normalize_airport_code(request.destination_airport, "Destination")

    receiver = store.get_user_by_email(receiver_email.lower())
    if receiver is None:
        raise ValidationFailed("Receiver email must belong to an existing user account")
    if receiver.id == user_id:
        raise ValidationFailed("Receiver must be a different user than the sender")

    return SenderListing(
        user_id=user_id,
        receiver_id=receiver.id,
        receiver_email=receiver_email,
        origin_airport=origin,
        destination_airport=destination,
        package_weight=weight,
        package_type=package_type,
        description=description,
        created_at=now or datetime.now(timezone.utc),
    )
