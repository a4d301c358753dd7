"""Pure geometry: scale factors, crop offsets, orientation and watermark placement."""

from .crop import calculate_crop
from .orientation import (
    EXIF_ORIENTATIONS,
    Orientation,
    calculate_rotation_and_flip,
    exif_orientation,
    resolve_orientation,
)
from .scale import (
    ScaleResult,
    calculate_residual,
    calculate_shrink,
    enlargement_guarded,
    round_half_away,
    scale_factor,
    shrink_for_factor,
)
from .watermark import watermark_position, watermark_size

__all__ = [
    "calculate_crop",
    "EXIF_ORIENTATIONS",
    "Orientation",
    "calculate_rotation_and_flip",
    "exif_orientation",
    "resolve_orientation",
    "ScaleResult",
    "calculate_residual",
    "calculate_shrink",
    "enlargement_guarded",
    "round_half_away",
    "scale_factor",
    "shrink_for_factor",
    "watermark_position",
    "watermark_size",
]
