"""vimg - planning image transformations on top of an image engine."""

from .common import (
    Angle,
    BlendMode,
    Color,
    EngineConfig,
    ExtractArea,
    GaussianBlur,
    Gravity,
    ImageType,
    Interpolator,
    Interpretation,
    Sharpen,
    TransformOptions,
    VimgError,
    Watermark,
    WatermarkImage,
)
from .engine import EngineContext, ImageEngine, ImageHandle, PillowEngine, get_default_context
from .image import Image
from .planner import Processor

__version__ = "0.1.0"

__all__ = [
    "Angle",
    "BlendMode",
    "Color",
    "EngineConfig",
    "ExtractArea",
    "GaussianBlur",
    "Gravity",
    "ImageType",
    "Interpolator",
    "Interpretation",
    "Sharpen",
    "TransformOptions",
    "VimgError",
    "Watermark",
    "WatermarkImage",
    "EngineContext",
    "ImageEngine",
    "ImageHandle",
    "PillowEngine",
    "get_default_context",
    "Image",
    "Processor",
]
