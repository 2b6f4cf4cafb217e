"""Asset domain specific exceptions."""


class AssetError(Exception):
    """Base class for asset related domain errors."""


class AssetNotFoundError(AssetError):
    """Raised when the requested asset record does not exist."""


class AssetStoreError(AssetError):
    """Raised when the metadata document cannot be read or written."""


class InvalidUploadError(AssetError):
    """Raised when an upload request is missing required parts or is malformed."""


class UploadTooLargeError(AssetError):
    """Raised when an uploaded file exceeds the configured size ceiling."""
