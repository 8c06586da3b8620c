"""
Airport & Flight Lookup Endpoints

GET /api/v1/airports/search?q=   - autocomplete over the static airport list
GET /api/v1/flights/lookup       - estimated arrival for a flight

Neither requires authentication.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from bagshare.shared.errors import ValidationFailed
from .data import Airport
from .lookup import estimate_arrival, search_airports

router = APIRouter(tags=["airports"])


class AirportSearchResponse(BaseModel):
    airports: List[Airport]


class FlightEstimate(BaseModel):
    flight_number: str
    origin_airport: str
    destination_airport: str
    departure_time: datetime
    arrival_time: datetime
    duration: float
    status: str = "scheduled"


@router.get("/api/v1/airports/search", response_model=AirportSearchResponse)
def airport_search(q: str = Query("", description="Code, name or city fragment")):
    return AirportSearchResponse(airports=search_airports(q))


@router.get("/api/v1/flights/lookup", response_model=FlightEstimate)
def flight_lookup(
    flight_number: Optional[str] = None,
    origin_airport: Optional[str] = None,
    destination_airport: Optional[str] = None,
    departure_date: Optional[datetime] = None,
):
    """Estimate arrival from typical route durations (4h when the route is unknown)."""
    if not flight_number or not origin_airport or not destination_airport:
        raise ValidationFailed("Missing required parameters")

    departure, arrival, hours = estimate_arrival(origin_airport, destination_airport, departure_date)
    return FlightEstimate(
        flight_number=flight_number.strip().upper(),
        origin_airport=origin_airport.strip().upper(),
        destination_airport=destination_airport.strip().upper(),
        departure_time=departure,
        arrival_time=arrival,
        duration=hours,
    )
