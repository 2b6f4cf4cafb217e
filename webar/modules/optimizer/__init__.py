"""Model optimizer exports."""

from .exceptions import OptimizerError, OptimizerTimeoutError
from .queue import OptimizationQueue
from .service import ModelOptimizer, format_size

__all__ = [
    "ModelOptimizer",
    "OptimizationQueue",
    "OptimizerError",
    "OptimizerTimeoutError",
    "format_size",
]
