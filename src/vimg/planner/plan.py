"""Immutable resize plan computed once per run."""

import math
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from ..common.schemas import TransformOptions
from ..common.types import ImageType
from ..geometry.scale import calculate_residual, calculate_shrink, scale_factor

# First engine version able to shrink WebP while decoding
WEBP_SHRINK_ON_LOAD_VERSION = (8, 3)


class ResizePlan(BaseModel):
    """Resolved target box and the shrink/affine split to reach it.

    Attributes:
        width: Target width, resolved when only height was requested
        height: Target height, resolved when only width was requested
        force: Resize to exactly width x height, ignoring aspect ratio
        crop: Frame the result with a gravity crop (never set with force)
        embed: Frame the result on a canvas (never set with force)
        factor: Source pixels per output pixel
        shrink: Integral pre-shrink, at least 1
        residual: Affine scale left after the integral shrink, 0 = none
    """

    width: int
    height: int
    force: bool = False
    crop: bool = False
    embed: bool = False
    factor: float = 1.0
    shrink: int = 1
    residual: float = 0.0

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def after_shrink_on_load(self, factor: float) -> "ResizePlan":
        """Re-split the remaining factor once the decoder has already shrunk."""
        factor = max(factor, 1.0)
        shrink = math.floor(factor)
        return self.model_copy(update={"factor": factor, "shrink": shrink, "residual": shrink / factor})


def plan_resize(options: TransformOptions, in_width: int, in_height: int, window_size: float) -> ResizePlan:
    # force wins over crop and embed, the factor must not see them
    if options.force:
        options = options.update(crop=False, embed=False)

    scale = scale_factor(in_width, in_height, options)
    return ResizePlan(
        width=scale.width,
        height=scale.height,
        force=options.force,
        crop=options.crop,
        embed=options.embed,
        factor=scale.factor,
        shrink=calculate_shrink(in_width, in_height, options, window_size),
        residual=calculate_residual(in_width, in_height, options, window_size),
    )


def shrink_on_load_factor(image_type: ImageType, shrink: int, engine_version: tuple[int, int]) -> int:
    """How much the decoder itself should shrink, 1 when it cannot help.

    JPEG decoders only scale by 1/2, 1/4 or 1/8; WebP takes any integer.
    """
    if shrink < 2:
        return 1
    if image_type == ImageType.JPEG:
        for candidate in (8, 4, 2):
            if shrink >= candidate:
                return candidate
    if image_type == ImageType.WEBP and engine_version >= WEBP_SHRINK_ON_LOAD_VERSION:
        return shrink
    return 1
