"""Uploaded file delivery with optimized-variant selection and Range support."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from webar.api.deps import get_delivery
from webar.modules.delivery import AssetDelivery, DeliveryError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


@router.api_route("/uploads/{file_name:path}", methods=["GET", "HEAD"], summary="Download an uploaded file")
async def serve_upload(
    file_name: str,
    request: Request,
    delivery: AssetDelivery = Depends(get_delivery),
) -> Response:
    try:
        return await delivery.respond(file_name, request)
    except DeliveryError as exc:
        logger.error("Cannot deliver %s: %s", file_name, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="File could not be read",
        ) from exc
