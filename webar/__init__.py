"""WebAR share server: model uploads, metadata records and range-aware delivery."""

__version__ = "1.2.0"
