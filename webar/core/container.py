"""Simple dependency container for wiring core services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi.staticfiles import StaticFiles

from webar.core.config import Settings
from webar.modules.assets import AssetService, JsonAssetStore
from webar.modules.delivery import AssetDelivery, VariantResolver
from webar.modules.optimizer import ModelOptimizer, OptimizationQueue

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    store: JsonAssetStore
    resolver: VariantResolver
    delivery: AssetDelivery
    assets: AssetService
    optimizer_queue: Optional[OptimizationQueue] = field(default=None)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationContainer":
        store = JsonAssetStore(settings.data_file)
        resolver = VariantResolver(
            settings.upload_root,
            settings.optimized_root,
            settings.delivery.extensions,
        )
        delivery = AssetDelivery(
            resolver,
            StaticFiles(directory=str(settings.upload_root), check_dir=False),
            cache_max_age=settings.delivery.cache_max_age,
            chunk_size=settings.delivery.chunk_size,
        )

        optimizer_queue = None
        if settings.optimizer_enabled:
            optimizer = ModelOptimizer(
                command=list(settings.optimizer.command),
                optimized_root=settings.optimized_root,
                timeout=settings.optimizer.timeout,
                extensions=frozenset(ext.lower() for ext in settings.optimizer.extensions),
                staging_root=settings.staging_root,
            )
            optimizer_queue = OptimizationQueue(optimizer, settings.optimizer.max_concurrency)

        assets = AssetService(
            store=store,
            upload_root=settings.upload_root,
            max_file_size=settings.upload.max_file_size,
            max_props=settings.upload.max_props,
            chunk_size=settings.upload.chunk_size,
            optimizer=optimizer_queue,
        )
        return cls(
            settings=settings,
            store=store,
            resolver=resolver,
            delivery=delivery,
            assets=assets,
            optimizer_queue=optimizer_queue,
        )

    def init_infrastructure(self) -> None:
        """Ensure storage directories and the metadata document exist."""
        self.settings.upload_root.mkdir(parents=True, exist_ok=True)
        self.settings.optimized_root.mkdir(parents=True, exist_ok=True)
        self.store.ensure_storage()
        if self.optimizer_queue is None:
            logger.info("Model optimizer disabled; originals are served as uploaded")

    async def shutdown(self) -> None:
        if self.optimizer_queue is not None:
            await self.optimizer_queue.shutdown()


__all__ = ["ApplicationContainer"]
