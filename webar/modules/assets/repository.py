"""Loads and persists asset records in a single JSON document."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import AssetStoreError
from .models import AssetRecord

logger = logging.getLogger(__name__)


class JsonAssetStore:
    """Cache-aside store keyed by asset id.

    Reads are served from an in-memory mirror that is loaded lazily from
    ``data_file``. ``put`` is the only mutator: it writes the whole document
    to a temporary sibling, moves it into place and only then swaps the
    mirror, so a failed write leaves both copies untouched.
    """

    def __init__(self, data_file: Path):
        self._data_file = data_file
        self._records: Optional[Dict[str, AssetRecord]] = None
        self._lock = threading.Lock()

    @property
    def data_file(self) -> Path:
        return self._data_file

    def ensure_storage(self) -> None:
        """Create the data directory and an empty document if missing."""
        self._data_file.parent.mkdir(parents=True, exist_ok=True)
        if not self._data_file.exists():
            self._write_document({})

    def _read_document(self) -> Dict[str, AssetRecord]:
        if not self._data_file.exists():
            return {}
        try:
            payload = json.loads(self._data_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise AssetStoreError(f"cannot read asset store {self._data_file}") from exc
        if not isinstance(payload, dict):
            raise AssetStoreError("asset store document must be a JSON object")

        records: Dict[str, AssetRecord] = {}
        for key, entry in payload.items():
            if not isinstance(entry, dict):
                logger.warning("Skipping malformed asset entry %s", key)
                continue
            try:
                record = AssetRecord.from_mapping(entry)
            except AssetStoreError:
                logger.warning("Skipping asset entry %s without id/model", key)
                continue
            records[record.id] = record
        return records

    def _write_document(self, records: Dict[str, Any]) -> None:
        document = {key: value.to_mapping() if isinstance(value, AssetRecord) else value for key, value in records.items()}
        temp_path = self._data_file.with_name(self._data_file.name + ".tmp")
        try:
            temp_path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(temp_path, self._data_file)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise AssetStoreError(f"failed to write asset store {self._data_file}") from exc

    def _mirror(self) -> Dict[str, AssetRecord]:
        if self._records is None:
            self._records = self._read_document()
        return self._records

    def get(self, asset_id: str) -> Optional[AssetRecord]:
        return self._mirror().get(asset_id)

    def contains(self, asset_id: str) -> bool:
        return asset_id in self._mirror()

    def list(self) -> List[AssetRecord]:
        return list(self._mirror().values())

    def put(self, record: AssetRecord) -> None:
        with self._lock:
            updated = dict(self._mirror())
            updated[record.id] = record
            self._write_document(updated)
            self._records = updated
        logger.debug("Saved asset %s (%d records)", record.id, len(updated))

    def reload(self) -> None:
        """Drop the mirror so the next read goes back to disk."""
        with self._lock:
            self._records = None
