"""Asset delivery exports."""

from .exceptions import DeliveryError, RangeNotSatisfiableError
from .ranges import ByteRange, parse_range
from .service import OPTIMIZED_HEADER, AssetDelivery, iter_file_range
from .variants import SelectedFile, VariantResolver, content_type_for, is_safe_name

__all__ = [
    "AssetDelivery",
    "ByteRange",
    "DeliveryError",
    "OPTIMIZED_HEADER",
    "RangeNotSatisfiableError",
    "SelectedFile",
    "VariantResolver",
    "content_type_for",
    "is_safe_name",
    "iter_file_range",
    "parse_range",
]
