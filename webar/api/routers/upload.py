"""Route for uploading a model with its companion files."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from webar.api.deps import get_asset_service
from webar.modules.assets import (
    AssetService,
    AssetStoreError,
    InvalidUploadError,
    UploadMetadata,
    UploadTooLargeError,
)
from webar.schemas import ErrorResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload a model and optional companion assets",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_asset(
    request: Request,
    model: Optional[UploadFile] = File(None),
    audio: Optional[UploadFile] = File(None),
    groundImage: Optional[UploadFile] = File(None),
    envImage: Optional[UploadFile] = File(None),
    props: Optional[list[UploadFile]] = File(None),
    service: AssetService = Depends(get_asset_service),
) -> UploadResponse:
    form = await request.form()
    metadata = UploadMetadata.from_form(form)
    try:
        record = await service.create_asset(
            model=model,
            metadata=metadata,
            audio=audio,
            ground_image=groundImage,
            env_image=envImage,
            props=props or [],
        )
    except InvalidUploadError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UploadTooLargeError as exc:
        logger.info("Rejected upload: %s", exc)
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except AssetStoreError as exc:
        logger.error("Could not save uploaded asset: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Upload failed") from exc
    url = request.url_for("view_asset", asset_id=record.id)
    return UploadResponse(id=record.id, url=str(url))
