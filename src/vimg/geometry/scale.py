"""Scale factor, integral shrink and residual calculations.

All functions are pure: they read the live input dimensions and the
options, and return values instead of mutating anything. Where a
dimension is left unconstrained (0) the resolved value is returned in
ScaleResult alongside the factor.
"""

import math
from typing import NamedTuple

from ..common.schemas import TransformOptions


class ScaleResult(NamedTuple):
    """Scale factor plus the target box it was computed for."""

    factor: float
    width: int
    height: int


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return int(math.ceil(value - 0.5))
    return int(math.floor(value + 0.5))


def enlargement_guarded(in_width: int, in_height: int, options: TransformOptions) -> bool:
    """True when the source already fits inside the box and may not be enlarged."""
    return (
        not options.enlarge
        and not options.force
        and in_width < options.width
        and in_height < options.height
    )


def scale_factor(in_width: int, in_height: int, options: TransformOptions) -> ScaleResult:
    """How many source pixels map onto one output pixel.

    - both dimensions: min of the axis ratios under crop (the image
      overflows the box), max otherwise (the image fits inside it)
    - one dimension: ratio along that axis, the other one is derived
    - none: identity, the box becomes the source size
    """
    width, height = options.width, options.height

    if enlargement_guarded(in_width, in_height, options):
        return ScaleResult(1.0, width, height)

    if width > 0 and height > 0:
        xfactor = in_width / width
        yfactor = in_height / height
        factor = min(xfactor, yfactor) if options.crop else max(xfactor, yfactor)
        return ScaleResult(factor, width, height)

    if width > 0:
        factor = in_width / width
        return ScaleResult(factor, width, round_half_away(in_height / factor))

    if height > 0:
        factor = in_height / height
        return ScaleResult(factor, round_half_away(in_width / factor), height)

    return ScaleResult(1.0, in_width, in_height)


def shrink_for_factor(factor: float, window_size: float) -> int:
    """Integral pre-shrink for a scale factor.

    Interpolators with a window wider than 3 taps (bicubic, nohalo) get
    less integral shrink and more affine work, which keeps quality up.
    """
    if factor >= 2 and window_size > 3:
        shrink = math.floor(factor * 3.0 / window_size)
    else:
        shrink = math.floor(factor)
    return max(int(shrink), 1)


def calculate_shrink(
    in_width: int, in_height: int, options: TransformOptions, window_size: float
) -> int:
    if enlargement_guarded(in_width, in_height, options):
        return 1
    factor = scale_factor(in_width, in_height, options).factor
    return shrink_for_factor(factor, window_size)


def calculate_residual(
    in_width: int, in_height: int, options: TransformOptions, window_size: float
) -> float:
    """shrink / factor, or 0 when no resize is needed at all."""
    if enlargement_guarded(in_width, in_height, options):
        return 0.0
    factor = scale_factor(in_width, in_height, options).factor
    return shrink_for_factor(factor, window_size) / factor
