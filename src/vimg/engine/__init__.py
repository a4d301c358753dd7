"""Image engine boundary and its Pillow implementation."""

from .base import ImageEngine, ImageHandle, TrimBox
from .context import EngineContext, get_default_context
from .detect import detect_image_type, is_binary, is_svg_image
from .pillow_engine import PillowEngine
from .registry import CapabilityRegistry, SupportedImageType, image_type_name

__all__ = [
    "ImageEngine",
    "ImageHandle",
    "TrimBox",
    "EngineContext",
    "get_default_context",
    "detect_image_type",
    "is_binary",
    "is_svg_image",
    "PillowEngine",
    "CapabilityRegistry",
    "SupportedImageType",
    "image_type_name",
]
