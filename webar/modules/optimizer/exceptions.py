"""Optimizer specific exceptions."""


class OptimizerError(Exception):
    """Raised when an optimization run fails."""


class OptimizerTimeoutError(OptimizerError):
    """Raised when the external optimizer exceeds its time budget."""
