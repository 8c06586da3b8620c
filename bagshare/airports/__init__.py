"""Static airport lookup and flight-time estimates."""

from .data import Airport
from .lookup import estimate_arrival, estimate_flight_hours, get_airport, search_airports

__all__ = [
    "Airport",
    "estimate_arrival",
    "estimate_flight_hours",
    "get_airport",
    "search_airports",
]
