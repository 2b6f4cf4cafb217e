"""Asset domain exports."""

from .exceptions import (
    AssetError,
    AssetNotFoundError,
    AssetStoreError,
    InvalidUploadError,
    UploadTooLargeError,
)
from .forms import UploadMetadata
from .models import AssetRecord, CharacterStats
from .repository import JsonAssetStore
from .service import AssetService

__all__ = [
    "AssetError",
    "AssetNotFoundError",
    "AssetRecord",
    "AssetService",
    "AssetStoreError",
    "CharacterStats",
    "InvalidUploadError",
    "JsonAssetStore",
    "UploadMetadata",
    "UploadTooLargeError",
]
