"""Location lookup against the fixed historical sites."""
from __future__ import annotations

import math
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from webar.modules.sites import find_nearby
from webar.schemas import ErrorResponse, NearbySite

router = APIRouter(tags=["sites"])


def _coordinate(value: Optional[str]) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="lat and lng must be numbers") from None
    if not math.isfinite(number):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="lat and lng must be numbers")
    return number


@router.get(
    "/nearby",
    response_model=list[NearbySite],
    summary="Sites sorted by distance from a coordinate",
    responses={400: {"model": ErrorResponse}},
)
async def nearby_sites(
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
) -> list[NearbySite]:
    if not lat or not lng:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="lat and lng required")
    return [NearbySite(**site) for site in find_nearby(_coordinate(lat), _coordinate(lng))]
