"""Image format detection from byte signatures."""

import re

from ..common.types import ImageType
from .registry import CapabilityRegistry

_HTML_COMMENT = re.compile(rb"(?i)<!--([\s\S]*?)-->")
_SVG = re.compile(
    rb"(?i)^\s*(?:<\?xml[^>]*>\s*)?(?:<!doctype svg[^>]*>\s*)?<svg[^>]*>[^*]*</svg>\s*$"
)

MIN_SIGNATURE_LENGTH = 12


def is_binary(buf: bytes) -> bool:
    """Heuristic: control bytes or invalid UTF-8 in the first 24 bytes."""
    if len(buf) < 24:
        return False
    head = buf[:24]
    if any(byte <= 8 for byte in head):
        return True
    try:
        head.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False


def is_svg_image(buf: bytes) -> bool:
    return not is_binary(buf) and _SVG.match(_HTML_COMMENT.sub(b"", buf)) is not None


def detect_image_type(buf: bytes, registry: CapabilityRegistry) -> ImageType:
    """Determine the format of `buf` from its leading bytes.

    Optional formats are only reported when the engine can load them.
    """
    if len(buf) < MIN_SIGNATURE_LENGTH:
        return ImageType.UNKNOWN

    if buf[:3] == b"\xff\xd8\xff":
        return ImageType.JPEG
    if registry.is_type_supported(ImageType.GIF) and buf[:3] == b"GIF":
        return ImageType.GIF
    if buf[:4] == b"\x89PNG":
        return ImageType.PNG
    if registry.is_type_supported(ImageType.TIFF) and buf[:4] in (b"II*\x00", b"MM\x00*"):
        return ImageType.TIFF
    if registry.is_type_supported(ImageType.PDF) and buf[:4] == b"%PDF":
        return ImageType.PDF
    if registry.is_type_supported(ImageType.WEBP) and buf[8:12] == b"WEBP":
        return ImageType.WEBP
    if registry.is_type_supported(ImageType.SVG) and is_svg_image(buf):
        return ImageType.SVG

    return ImageType.UNKNOWN
