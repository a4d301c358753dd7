"""Pydantic schemas for transformation options."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import (
    Angle,
    BlendMode,
    Extend,
    Gravity,
    HorizontalAlign,
    ImageType,
    Interpolator,
    Interpretation,
    VerticalAlign,
)

# ─────────────────────────────────────────────────────────────
# Building blocks
# ─────────────────────────────────────────────────────────────


class Color(BaseModel):
    """RGBA colour, 8 bits per channel."""

    r: int = Field(default=0, ge=0, le=255)
    g: int = Field(default=0, ge=0, le=255)
    b: int = Field(default=0, ge=0, le=255)
    a: int = Field(default=255, ge=0, le=255)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def rgba(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def is_black(self) -> bool:
        return self.rgb() == (0, 0, 0)


BLACK = Color()
WHITE = Color(r=255, g=255, b=255)


class ExtractArea(BaseModel):
    """Region to extract.

    With `relative=True` every value is a percentage of the live source
    dimensions at the moment the extract runs.
    """

    left: float = Field(default=0.0, ge=0.0)
    top: float = Field(default=0.0, ge=0.0)
    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)
    relative: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    def resolve(self, src_width: int, src_height: int) -> tuple[int, int, int, int]:
        """Return (left, top, width, height) in absolute pixels."""
        if not self.relative:
            return (int(self.left), int(self.top), int(self.width), int(self.height))
        return (
            int(self.left * src_width / 100.0),
            int(self.top * src_height / 100.0),
            int(self.width * src_width / 100.0),
            int(self.height * src_height / 100.0),
        )


class GaussianBlur(BaseModel):
    sigma: float = Field(default=0.0, ge=0.0)
    min_ampl: float = Field(default=0.0, ge=0.0, lt=1.0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class Sharpen(BaseModel):
    """Unsharp-mask style sharpening parameters.

    Attributes:
        sigma: Gaussian sigma of the mask; 0 disables sharpening
        x1: flat/jaggy threshold
        y2: maximum brightening
        y3: maximum darkening
        m1: slope for flat areas
        m2: slope for jaggy areas
    """

    sigma: float = Field(default=0.0, ge=0.0)
    x1: float = 2.0
    y2: float = Field(default=10.0, ge=0.0)
    y3: float = Field(default=20.0, ge=0.0)
    m1: float = 0.0
    m2: float = 3.0

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class WatermarkPlacement(BaseModel):
    """Alignment and offsets shared by text and image watermarks."""

    h_align: HorizontalAlign = HorizontalAlign.LEFT
    v_align: VerticalAlign = VerticalAlign.TOP
    h_offset: float = 0.0
    v_offset: float = 0.0
    relative: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class Watermark(WatermarkPlacement):
    """Text watermark. Zero values are filled in by the planner."""

    text: str = ""
    font: str = ""
    width: int = Field(default=0, ge=0)
    dpi: int = Field(default=0, ge=0)
    margin: int = Field(default=0, ge=0)
    opacity: float = Field(default=0.0, ge=0.0, le=1.0)
    no_replicate: bool = False
    background: Color = WHITE


class WatermarkImage(WatermarkPlacement):
    """Image watermark.

    `width`/`height` are the size the watermark is scaled to before
    compositing (0 = unconstrained). With `relative=True` they are
    percentages of the source width/height, like the offsets.
    """

    buf: bytes = b""
    width: float = Field(default=0.0, ge=0.0)
    height: float = Field(default=0.0, ge=0.0)
    opacity: float = Field(default=0.0, ge=0.0, le=1.0)
    blend_mode: BlendMode = BlendMode.OVER


# ─────────────────────────────────────────────────────────────
# Transformation options
# ─────────────────────────────────────────────────────────────


class TransformOptions(BaseModel):
    """User intent for one processing call.

    Instances are immutable; normalisation steps return updated copies.
    Zero means "unset" for the numeric fields, as the planner relies on it.
    """

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)

    crop: bool = False
    embed: bool = False
    force: bool = False
    enlarge: bool = False
    maintain_aspect: bool = False
    smart_crop: bool = False
    trim: bool = False

    gravity: Gravity = Gravity.CENTRE
    extend: Extend = Extend.BLACK
    extract: ExtractArea | None = None

    rotate: Angle = Angle.D0
    flip: bool = False
    flop: bool = False
    no_auto_rotate: bool = False
    zoom: int = Field(default=0, ge=0)

    watermark: Watermark = Field(default_factory=Watermark)
    watermark_image: WatermarkImage = Field(default_factory=WatermarkImage)

    background: Color = BLACK
    threshold: float = Field(default=10.0, ge=0.0)

    gaussian_blur: GaussianBlur = Field(default_factory=GaussianBlur)
    sharpen: Sharpen = Field(default_factory=Sharpen)
    gamma: float = Field(default=0.0, ge=0.0)
    interpolator: Interpolator = Interpolator.BICUBIC

    type: ImageType = ImageType.UNKNOWN
    quality: int = Field(default=0, ge=0, le=100)
    compression: int = Field(default=0, ge=0, le=9)
    interlace: bool = False
    lossless: bool = False
    strip_metadata: bool = False
    no_profile: bool = False
    interpretation: Interpretation | None = None
    output_icc: str = ""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_extract(self) -> "TransformOptions":
        """Relative extract values are percentages and cannot exceed 100."""
        area = self.extract
        if area is not None and area.relative:
            if max(area.left, area.top, area.width, area.height) > 100:
                raise ValueError("Relative extract values must be percentages (0-100)")
        return self

    def update(self, **changes: object) -> "TransformOptions":
        """Return a copy with `changes` applied."""
        return self.model_copy(update=changes)


class SaveOptions(BaseModel):
    """Encoder parameters derived from TransformOptions after defaults."""

    type: ImageType
    quality: int
    compression: int
    interlace: bool = False
    lossless: bool = False
    strip_metadata: bool = False
    no_profile: bool = False
    interpretation: Interpretation = Interpretation.SRGB
    output_icc: str = ""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @classmethod
    def from_options(cls, options: TransformOptions) -> "SaveOptions":
        return cls(
            type=options.type,
            quality=options.quality,
            compression=options.compression,
            interlace=options.interlace,
            lossless=options.lossless,
            strip_metadata=options.strip_metadata,
            no_profile=options.no_profile,
            interpretation=options.interpretation or Interpretation.SRGB,
            output_icc=options.output_icc,
        )
