"""Asset service handling upload storage and record creation."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from fastapi import UploadFile

from .exceptions import AssetNotFoundError, InvalidUploadError, UploadTooLargeError
from .forms import UploadMetadata
from .models import AssetRecord
from .repository import JsonAssetStore

if TYPE_CHECKING:
    from webar.modules.optimizer import OptimizationQueue

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"


@dataclass(slots=True)
class AssetService:
    store: JsonAssetStore
    upload_root: Path
    max_file_size: int
    max_props: int = 20
    chunk_size: int = 1024 * 1024
    optimizer: Optional["OptimizationQueue"] = None

    def get_asset(self, asset_id: str) -> AssetRecord:
        record = self.store.get(asset_id)
        if record is None:
            raise AssetNotFoundError(f"asset {asset_id} not found")
        return record

    def list_assets(self) -> List[AssetRecord]:
        return self.store.list()

    async def create_asset(
        self,
        *,
        model: Optional[UploadFile],
        metadata: UploadMetadata,
        audio: Optional[UploadFile] = None,
        ground_image: Optional[UploadFile] = None,
        env_image: Optional[UploadFile] = None,
        props: Sequence[UploadFile] = (),
    ) -> AssetRecord:
        if not _has_file(model):
            raise InvalidUploadError("Model file is required (glb/gltf).")
        props = [item for item in props if _has_file(item)]
        if len(props) > self.max_props:
            raise InvalidUploadError(f"At most {self.max_props} prop files are allowed.")

        asset_id = self._new_id()
        self.upload_root.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []

        try:
            model_name = await self._store_file(model, asset_id, "model", written)
            if model_name is None:
                raise InvalidUploadError("Model file is empty.")
            audio_name = await self._store_file(audio, asset_id, "audio", written)
            ground_name = await self._store_file(ground_image, asset_id, "groundImage", written)
            env_name = await self._store_file(env_image, asset_id, "envImage", written)
            prop_names = []
            for index, prop in enumerate(props):
                name = await self._store_file(prop, asset_id, f"props-{index}", written)
                if name is not None:
                    prop_names.append(name)

            record = AssetRecord(
                id=asset_id,
                model=_public_path(model_name),
                audio=_public_path(audio_name),
                ground_image=_public_path(ground_name),
                env_image=_public_path(env_name),
                props=[UPLOAD_URL_PREFIX + name for name in prop_names],
                model_y=metadata.model_y,
                caption=metadata.caption,
                character_name=metadata.character_name,
                character_era=metadata.character_era,
                character_bio=metadata.character_bio,
                character_height=metadata.character_height,
                character_stats=metadata.character_stats,
                animations=list(metadata.animations),
                effects=list(metadata.effects),
                created_at=AssetRecord.now_millis(),
            )
            self.store.put(record)
        except Exception:
            for path in written:
                path.unlink(missing_ok=True)
            raise

        logger.info("Stored asset %s with %d file(s)", asset_id, len(written))
        if self.optimizer is not None:
            self.optimizer.submit(self.upload_root / model_name)
        return record

    def _new_id(self) -> str:
        while True:
            candidate = secrets.token_urlsafe(6)
            if not self.store.contains(candidate):
                return candidate

    async def _store_file(
        self,
        upload: Optional[UploadFile],
        asset_id: str,
        field_name: str,
        written: List[Path],
    ) -> Optional[str]:
        if not _has_file(upload):
            return None
        if upload.size is not None and upload.size > self.max_file_size:
            raise UploadTooLargeError(f"{field_name} exceeds the {self.max_file_size} byte limit")

        file_name = f"{asset_id}-{field_name}{_safe_suffix(upload.filename)}"
        target_path = self.upload_root / file_name
        written.append(target_path)

        total_size = 0
        try:
            with target_path.open("wb") as buffer:
                while True:
                    chunk = await upload.read(self.chunk_size)
                    if not chunk:
                        break
                    total_size += len(chunk)
                    if total_size > self.max_file_size:
                        raise UploadTooLargeError(f"{field_name} exceeds the {self.max_file_size} byte limit")
                    buffer.write(chunk)
        finally:
            await upload.close()

        if total_size == 0:
            target_path.unlink(missing_ok=True)
            written.remove(target_path)
            return None
        return file_name


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


def _safe_suffix(filename: Optional[str]) -> str:
    suffix = Path(Path(filename or "").name).suffix.lower()
    cleaned = "".join(ch for ch in suffix[1:] if ch.isalnum())
    return f".{cleaned}" if cleaned else ""


def _public_path(file_name: Optional[str]) -> Optional[str]:
    if file_name is None:
        return None
    return UPLOAD_URL_PREFIX + file_name
