"""Historical reference sites and geofence distance lookups."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class HistoricalSite:
    id: str
    name: str
    lat: float
    lng: float
    radius: float


HISTORICAL_SITES: tuple[HistoricalSite, ...] = (
    HistoricalSite("rach-gam", "Rạch Gầm - Xoài Mút", 10.35, 106.52, 2000),
    HistoricalSite("bach-dang", "Sông Bạch Đằng", 20.93, 106.73, 2000),
    HistoricalSite("chi-lang", "Ải Chi Lăng", 21.58, 106.57, 2000),
    HistoricalSite("dong-da", "Gò Đống Đa", 21.01, 105.83, 1000),
    HistoricalSite("nhu-nguyet", "Sông Như Nguyệt", 21.22, 106.07, 2000),
    HistoricalSite("van-kiep", "Vạn Kiếp", 21.1, 106.48, 2000),
    HistoricalSite("lam-son", "Lam Sơn", 20.02, 105.62, 2000),
    HistoricalSite("hoa-lu", "Cố đô Hoa Lư", 20.28, 105.92, 1500),
)


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in metres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def find_nearby(lat: float, lng: float, sites: Iterable[HistoricalSite] = HISTORICAL_SITES) -> List[Dict[str, Any]]:
    results = []
    for site in sites:
        distance = haversine_distance(lat, lng, site.lat, site.lng)
        results.append(
            {
                "id": site.id,
                "name": site.name,
                "lat": site.lat,
                "lng": site.lng,
                "radius": site.radius,
                "distance": round(distance),
                "isNear": distance <= site.radius,
            }
        )
    results.sort(key=lambda item: item["distance"])
    return results
