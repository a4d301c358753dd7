"""Enumerations shared by options, geometry and the engine."""

from enum import IntEnum, StrEnum


class ImageType(StrEnum):
    UNKNOWN = "unknown"
    JPEG = "jpeg"
    WEBP = "webp"
    PNG = "png"
    TIFF = "tiff"
    GIF = "gif"
    PDF = "pdf"
    SVG = "svg"

    @classmethod
    def from_name(cls, name: str) -> "ImageType":
        """Map a declared type token ("jpeg", "JPG", "tif", ...) to an ImageType."""
        token = name.strip().lower()
        aliases = {"jpg": "jpeg", "tif": "tiff"}
        token = aliases.get(token, token)
        try:
            return cls(token)
        except ValueError:
            return cls.UNKNOWN


class Gravity(StrEnum):
    CENTRE = "centre"
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    SMART = "smart"


class Angle(IntEnum):
    D0 = 0
    D90 = 90
    D180 = 180
    D270 = 270

    @classmethod
    def normalize(cls, degrees: int) -> "Angle":
        """Wrap any multiple-of-90 rotation into one of the four cardinal angles."""
        degrees %= 360
        return cls(degrees - degrees % 90)


class Direction(StrEnum):
    # mirror left <-> right, i.e. about the vertical axis
    HORIZONTAL = "horizontal"
    # mirror top <-> bottom, i.e. about the horizontal axis
    VERTICAL = "vertical"


class Interpolator(StrEnum):
    BICUBIC = "bicubic"
    BILINEAR = "bilinear"
    NOHALO = "nohalo"
    NEAREST = "nearest"


class Extend(StrEnum):
    BLACK = "black"
    COPY = "copy"
    REPEAT = "repeat"
    MIRROR = "mirror"
    WHITE = "white"
    BACKGROUND = "background"


class Interpretation(StrEnum):
    SRGB = "srgb"
    MULTIBAND = "multiband"
    BW = "bw"
    CMYK = "cmyk"
    RGB = "rgb"
    RGB16 = "rgb16"
    GREY16 = "grey16"
    SCRGB = "scrgb"
    LAB = "lab"
    XYZ = "xyz"


class BlendMode(StrEnum):
    CLEAR = "clear"
    SOURCE = "source"
    OVER = "over"
    IN = "in"
    OUT = "out"
    ATOP = "atop"
    DEST = "dest"
    DEST_OVER = "dest_over"
    DEST_IN = "dest_in"
    DEST_OUT = "dest_out"
    DEST_ATOP = "dest_atop"
    XOR = "xor"
    ADD = "add"
    SATURATE = "saturate"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"
    DODGE = "dodge"
    BURN = "burn"
    HARD = "hard"
    SOFT = "soft"
    DIFFERENCE = "difference"
    EXCLUSION = "exclusion"


class HorizontalAlign(StrEnum):
    LEFT = "left"
    CENTRE = "centre"
    RIGHT = "right"


class VerticalAlign(StrEnum):
    TOP = "top"
    CENTRE = "centre"
    BOTTOM = "bottom"
