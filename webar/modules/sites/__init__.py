"""Historical site lookups."""

from .service import HISTORICAL_SITES, HistoricalSite, find_nearby, haversine_distance

__all__ = [
    "HISTORICAL_SITES",
    "HistoricalSite",
    "find_nearby",
    "haversine_distance",
]
