"""Options normalizer, resize plan and the operation planner."""

from .normalizer import apply_defaults, clamp_to_source, normalize_operation
from .plan import ResizePlan, plan_resize, shrink_on_load_factor
from .processor import Processor

__all__ = [
    "apply_defaults",
    "clamp_to_source",
    "normalize_operation",
    "ResizePlan",
    "plan_resize",
    "shrink_on_load_factor",
    "Processor",
]
