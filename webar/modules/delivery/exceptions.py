"""Delivery specific exceptions."""


class DeliveryError(Exception):
    """Raised when a selected file cannot be inspected or opened."""


class RangeNotSatisfiableError(DeliveryError):
    """Raised when a byte range lies outside the selected file."""

    def __init__(self, size: int) -> None:
        super().__init__(f"requested range not satisfiable for {size} byte file")
        self.size = size
