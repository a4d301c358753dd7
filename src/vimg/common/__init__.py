"""Common module - errors, enumerations, option schemas and configuration."""

from .config import EngineConfig
from .errors import (
    EmptyInputError,
    EngineFailureError,
    InvalidHandleError,
    MissingParameterError,
    SizeLimitExceededError,
    UnsupportedFormatError,
    VimgError,
)
from .metadata import ExifData, ImageMetadata, ImageSize
from .schemas import (
    BLACK,
    WHITE,
    Color,
    ExtractArea,
    GaussianBlur,
    SaveOptions,
    Sharpen,
    TransformOptions,
    Watermark,
    WatermarkImage,
    WatermarkPlacement,
)
from .types import (
    Angle,
    BlendMode,
    Direction,
    Extend,
    Gravity,
    HorizontalAlign,
    ImageType,
    Interpolator,
    Interpretation,
    VerticalAlign,
)

__all__ = [
    "EngineConfig",
    "VimgError",
    "InvalidHandleError",
    "UnsupportedFormatError",
    "SizeLimitExceededError",
    "MissingParameterError",
    "EngineFailureError",
    "EmptyInputError",
    "ExifData",
    "ImageMetadata",
    "ImageSize",
    "BLACK",
    "WHITE",
    "Color",
    "ExtractArea",
    "GaussianBlur",
    "SaveOptions",
    "Sharpen",
    "TransformOptions",
    "Watermark",
    "WatermarkImage",
    "WatermarkPlacement",
    "Angle",
    "BlendMode",
    "Direction",
    "Extend",
    "Gravity",
    "HorizontalAlign",
    "ImageType",
    "Interpolator",
    "Interpretation",
    "VerticalAlign",
]
