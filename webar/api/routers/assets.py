"""Read-only endpoints over stored asset records."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, status

from webar.api.deps import get_asset_service, get_resolver
from webar.modules.assets import AssetNotFoundError, AssetRecord, AssetService, AssetStoreError
from webar.modules.delivery import VariantResolver
from webar.schemas import AssetDetail, AssetSummary, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assets"])


def _to_detail(record: AssetRecord, resolver: VariantResolver) -> AssetDetail:
    selected = resolver.resolve(record.model_file_name)
    model_size: Optional[int] = None
    if selected is not None:
        try:
            model_size = selected.path.stat().st_size
        except OSError as exc:
            logger.warning("Cannot stat model for asset %s: %s", record.id, exc)
    return AssetDetail(
        **record.to_mapping(),
        modelSize=model_size,
        optimized=selected.optimized if selected is not None else False,
    )


@router.get(
    "/asset/{asset_id}",
    response_model=AssetDetail,
    summary="Get an asset record",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_asset(
    asset_id: str = Path(..., description="Asset id"),
    service: AssetService = Depends(get_asset_service),
    resolver: VariantResolver = Depends(get_resolver),
) -> AssetDetail:
    try:
        record = service.get_asset(asset_id)
    except AssetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from exc
    except AssetStoreError as exc:
        logger.error("Cannot read asset store: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Asset store unavailable") from exc
    return _to_detail(record, resolver)


@router.get("/assets", response_model=list[AssetSummary], summary="List uploaded assets")
async def list_assets(service: AssetService = Depends(get_asset_service)) -> list[AssetSummary]:
    try:
        records = service.list_assets()
    except AssetStoreError as exc:
        logger.error("Cannot read asset store: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Asset store unavailable") from exc
    return [AssetSummary(**record.to_summary()) for record in records]
