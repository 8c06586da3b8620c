"""Airport search and flight-time estimates over the static reference data."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .data import AIRPORTS, DEFAULT_FLIGHT_HOURS, FLIGHT_DURATIONS, MAX_SEARCH_RESULTS, Airport


def search_airports(query: str) -> List[Airport]:
    """Match code, name or city (case-insensitive). Empty query returns the first 20."""
    needle = (query or "").strip().lower()
    if not needle:
        return AIRPORTS[:MAX_SEARCH_RESULTS]
    return [
        airport for airport in AIRPORTS
        if needle in airport.code.lower()
        or needle in airport.name.lower()
        or needle in airport.city.lower()
    ][:MAX_SEARCH_RESULTS]


def get_airport(code: str) -> Optional[Airport]:
    wanted = code.strip().upper()
    for airport in AIRPORTS:
        if airport.code == wanted:
            return airport
    return None


def estimate_flight_hours(origin: str, destination: str) -> float:
    route = f"{origin.strip().upper()}-{destination.strip().upper()}"
    return FLIGHT_DURATIONS.get(route, DEFAULT_FLIGHT_HOURS)


def estimate_arrival(origin: str, destination: str, departure: Optional[datetime] = None):
    """Returns (departure, arrival, duration_hours)."""
    departure = departure or datetime.now(timezone.utc)
    hours = estimate_flight_hours(origin, destination)
    return departure, departure + timedelta(hours=hours), hours
