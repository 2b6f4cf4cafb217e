"""Feature modules and shared exports."""

from . import assets, delivery, optimizer, sites

__all__ = [
    "assets",
    "delivery",
    "optimizer",
    "sites",
]
