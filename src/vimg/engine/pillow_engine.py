"""Pillow + numpy implementation of ImageEngine."""

import io
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar, override

import numpy as np
import PIL
from loguru import logger
from PIL import ExifTags, Image, ImageCms, ImageDraw, ImageFont, TiffImagePlugin, features

from ..common.errors import EmptyInputError, EngineFailureError, UnsupportedFormatError, VimgError
from ..common.metadata import ExifData, ImageMetadata, ImageSize
from ..common.schemas import Color, GaussianBlur, SaveOptions, Sharpen, Watermark
from ..common.types import Angle, BlendMode, Direction, Extend, ImageType, Interpolator, Interpretation
from ..geometry.scale import round_half_away
from ..geometry.watermark import watermark_position
from . import pixel_ops
from .base import ImageEngine, ImageHandle, TrimBox

P = ParamSpec("P")
R = TypeVar("R")

ORIENTATION_TAG = 0x0112

PIL_FORMATS: dict[ImageType, str] = {
    ImageType.JPEG: "JPEG",
    ImageType.PNG: "PNG",
    ImageType.WEBP: "WEBP",
    ImageType.TIFF: "TIFF",
    ImageType.GIF: "GIF",
    ImageType.PDF: "PDF",
}

RESAMPLING: dict[Interpolator, Image.Resampling] = {
    Interpolator.BICUBIC: Image.Resampling.BICUBIC,
    Interpolator.BILINEAR: Image.Resampling.BILINEAR,
    Interpolator.NOHALO: Image.Resampling.LANCZOS,
    Interpolator.NEAREST: Image.Resampling.NEAREST,
}

WINDOW_SIZES: dict[Interpolator, float] = {
    Interpolator.BICUBIC: 4,
    Interpolator.BILINEAR: 2,
    Interpolator.NOHALO: 4,
    Interpolator.NEAREST: 1,
}

ROTATIONS: dict[Angle, Image.Transpose] = {
    Angle.D90: Image.Transpose.ROTATE_270,
    Angle.D180: Image.Transpose.ROTATE_180,
    Angle.D270: Image.Transpose.ROTATE_90,
}

FLIPS: dict[Direction, Image.Transpose] = {
    Direction.HORIZONTAL: Image.Transpose.FLIP_LEFT_RIGHT,
    Direction.VERTICAL: Image.Transpose.FLIP_TOP_BOTTOM,
}

INTERPRETATIONS: dict[str, Interpretation] = {
    "RGB": Interpretation.SRGB,
    "RGBA": Interpretation.SRGB,
    "L": Interpretation.BW,
    "LA": Interpretation.BW,
    "CMYK": Interpretation.CMYK,
    "LAB": Interpretation.LAB,
    "I;16": Interpretation.GREY16,
}

TARGET_MODES: dict[Interpretation, str] = {
    Interpretation.SRGB: "RGB",
    Interpretation.RGB: "RGB",
    Interpretation.RGB16: "RGB",
    Interpretation.BW: "L",
    Interpretation.GREY16: "L",
    Interpretation.CMYK: "CMYK",
}

ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")
WORKING_MODES = ("L", "LA", "RGB", "RGBA")


def engine_call(func: Callable[P, R]) -> Callable[P, R]:
    """Translate Pillow/numpy exceptions into EngineFailureError.

    The original message is kept verbatim and the exception chained.
    With tracing enabled every call is logged at DEBUG level.
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        engine = args[0]
        if isinstance(engine, PillowEngine) and engine.trace:
            logger.debug(f"[TRACE] {engine.name}.{func.__name__}")
        try:
            return func(*args, **kwargs)
        except VimgError:
            raise
        except (
            OSError,
            ValueError,
            SyntaxError,
            MemoryError,
            Image.DecompressionBombError,
            ImageCms.PyCMSError,
        ) as exc:
            raise EngineFailureError(str(exc)) from exc

    return wrapper


# ─────────────────────────────────────────────────────────────
# Encoders
# ─────────────────────────────────────────────────────────────


def _save_jpeg(image: Image.Image, out: io.BytesIO, options: SaveOptions, extra: dict[str, Any]) -> None:
    # JPEG does not support alpha channel
    if image.mode not in ("RGB", "L", "CMYK"):
        image = image.convert("L" if image.mode == "LA" else "RGB")
    image.save(out, "JPEG", quality=options.quality, progressive=options.interlace, **extra)


def _save_png(image: Image.Image, out: io.BytesIO, options: SaveOptions, extra: dict[str, Any]) -> None:
    if image.mode == "CMYK":
        image = image.convert("RGB")
    image.save(out, "PNG", compress_level=options.compression, **extra)


def _save_webp(image: Image.Image, out: io.BytesIO, options: SaveOptions, extra: dict[str, Any]) -> None:
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA" if image.mode in ALPHA_MODES else "RGB")
    image.save(out, "WEBP", quality=options.quality, lossless=options.lossless, **extra)


def _save_tiff(image: Image.Image, out: io.BytesIO, options: SaveOptions, extra: dict[str, Any]) -> None:
    image.save(out, "TIFF", **extra)


ENCODERS: dict[ImageType, Callable[[Image.Image, io.BytesIO, SaveOptions, dict[str, Any]], None]] = {
    ImageType.JPEG: _save_jpeg,
    ImageType.PNG: _save_png,
    ImageType.WEBP: _save_webp,
    ImageType.TIFF: _save_tiff,
}


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────


def _normalize_mode(image: Image.Image) -> Image.Image:
    """Expand palette and bilevel images so every operation sees plain bands."""
    if image.mode == "1":
        target = "L"
    elif image.mode == "P":
        target = "RGBA" if "transparency" in image.info else "RGB"
    elif image.mode == "PA":
        target = "RGBA"
    else:
        return image

    converted = image.convert(target)
    converted.info.pop("transparency", None)
    image.close()
    return converted


def _working(image: Image.Image) -> Image.Image:
    """Image in one of L, LA, RGB, RGBA."""
    if image.mode in WORKING_MODES:
        return image
    return image.convert("RGBA" if image.mode in ALPHA_MODES else "RGB")


def _to_array(image: Image.Image) -> np.ndarray:
    data = np.asarray(image)
    if data.ndim == 2:
        data = data[..., np.newaxis]
    return data


def _from_array(data: np.ndarray, like: Image.Image) -> Image.Image:
    if data.shape[2] == 1:
        data = data[..., 0]
    image = Image.fromarray(np.ascontiguousarray(data))
    image.info = like.info.copy()
    return image


def _luminance(color: Color) -> int:
    return int(round(0.299 * color.r + 0.587 * color.g + 0.114 * color.b))


def _fill_for(mode: str, extend: Extend, background: Color) -> tuple[int, ...]:
    """Per-band canvas value for an embed in `mode`."""
    bands = len(mode)
    if extend == Extend.WHITE:
        return (255,) * bands
    if extend == Extend.BACKGROUND:
        grey = mode in ("L", "LA")
        colour: tuple[int, ...] = (_luminance(background),) if grey else background.rgb()
        return colour + (background.a,) if mode in ALPHA_MODES else colour
    return (0,) * bands


def _reset_orientation(image: Image.Image) -> None:
    """Mark the pixels as upright once a rotate or flip has been applied."""
    exif = image.getexif()
    if exif.get(ORIENTATION_TAG, 1) != 1:
        exif[ORIENTATION_TAG] = 1
        image.info["exif"] = exif.tobytes()


def _load_font(description: str, dpi: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Resolve a "family size" font description at the given DPI."""
    family, _, size = description.rpartition(" ")
    if not family or not size.isdigit():
        family, size = description, "10"
    pixels = max(1, round(int(size) * dpi / 72))

    for candidate in (family, f"{family}.ttf", "DejaVuSans.ttf"):
        try:
            return ImageFont.truetype(candidate, pixels)
        except OSError:
            continue

    logger.debug(f"Font '{description}' not found, using Pillow default font")
    return ImageFont.load_default(pixels)


def _wrap_text(
    text: str,
    font: ImageFont.FreeTypeFont | ImageFont.ImageFont,
    width: int,
    draw: ImageDraw.ImageDraw,
) -> str:
    """Greedy word wrap so no line is wider than `width` pixels (0 = no wrap)."""
    if width <= 0:
        return text

    lines: list[str] = []
    for paragraph in text.split("\n"):
        line = ""
        for word in paragraph.split(" "):
            candidate = f"{line} {word}" if line else word
            if line and draw.textlength(candidate, font=font) > width:
                lines.append(line)
                line = word
            else:
                line = candidate
        lines.append(line)
    return "\n".join(lines)


def _plain(value: Any) -> Any:
    if isinstance(value, TiffImagePlugin.IFDRational):
        return float(value) if value.denominator else None
    if isinstance(value, tuple):
        return tuple(_plain(v) for v in value)
    if isinstance(value, bytes):
        return value.decode(errors="replace").rstrip("\x00")
    return value


def _close_image(handle: ImageHandle) -> None:
    handle.image.close()


# ─────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────


class PillowEngine(ImageEngine):
    """Image engine built on Pillow, with numpy for pixel arithmetic.

    Every operation returns a fresh handle; input handles stay valid
    and keep ownership of their Pillow image.
    """

    def __init__(self, trace: bool = False):
        self.trace: bool = trace

    @property
    @override
    def name(self) -> str:
        return "pillow"

    @property
    @override
    def version(self) -> tuple[int, int]:
        major, minor = PIL.__version__.split(".")[:2]
        return int(major), int(minor)

    @override
    def configure(self, max_image_pixels: int | None = None, trace: bool = False) -> None:
        # Pillow keeps this limit process wide
        if max_image_pixels is not None:
            Image.MAX_IMAGE_PIXELS = max_image_pixels
        self.trace = trace
        logger.debug(f"Configured {self.name} {self.version}: max_image_pixels={Image.MAX_IMAGE_PIXELS}")

    def _wrap(self, image: Image.Image, image_type: ImageType, buffer: bytes) -> ImageHandle:
        return ImageHandle(image, image_type, buffer, on_release=_close_image)

    def _derive(self, image: Image.Image, source: ImageHandle) -> ImageHandle:
        return self._wrap(image, source.image_type, source.buffer)

    # ── capabilities ─────────────────────────────────────────

    @override
    def type_supported(self, image_type: ImageType, save: bool = False) -> bool:
        pil_format = PIL_FORMATS.get(image_type)
        if pil_format is None:
            return False
        if image_type == ImageType.WEBP and not features.check("webp"):
            return False

        Image.init()
        if save:
            return image_type in ENCODERS and pil_format in Image.SAVE
        return pil_format in Image.OPEN

    @override
    def interpolator_window_size(self, interpolator: Interpolator) -> float:
        return WINDOW_SIZES[interpolator]

    # ── load / save ──────────────────────────────────────────

    @override
    @engine_call
    def decode(self, buf: bytes, image_type: ImageType) -> ImageHandle:
        if not buf:
            raise EmptyInputError("Image buffer is empty")
        image = Image.open(io.BytesIO(buf))
        image.load()
        return self._wrap(_normalize_mode(image), image_type, buf)

    @override
    @engine_call
    def load_shrunk(self, buf: bytes, image_type: ImageType, shrink: int) -> ImageHandle:
        image = Image.open(io.BytesIO(buf))
        jpeg = image.format == "JPEG"
        if jpeg and shrink > 1:
            # draft() picks the largest DCT scale not exceeding the request
            image.draft(None, (max(1, image.width // shrink), max(1, image.height // shrink)))
        image.load()
        image = _normalize_mode(image)

        if not jpeg and shrink > 1:
            reduced = image.reduce(shrink)
            image.close()
            image = reduced
        return self._wrap(image, image_type, buf)

    @override
    @engine_call
    def encode(self, handle: ImageHandle, options: SaveOptions) -> bytes:
        encoder = ENCODERS.get(options.type)
        if encoder is None:
            raise UnsupportedFormatError(f"Saving {options.type} images is not supported")

        image: Image.Image = handle.image
        extra: dict[str, Any] = {}
        if not options.strip_metadata:
            exif = image.info.get("exif")
            if exif:
                extra["exif"] = exif
            icc = image.info.get("icc_profile")
            if icc and not options.no_profile:
                extra["icc_profile"] = icc

        out = io.BytesIO()
        encoder(image, out, options, extra)
        return out.getvalue()

    @override
    def encode_buffer(self, handle: ImageHandle) -> bytes:
        """Re-encode in the handle's own type; formats without an encoder become PNG."""
        image_type = handle.image_type if handle.image_type in ENCODERS else ImageType.PNG
        options = SaveOptions(
            type=image_type,
            quality=100,
            compression=6,
            lossless=image_type == ImageType.WEBP,
        )
        return self.encode(handle, options)

    # ── geometry ─────────────────────────────────────────────

    @override
    @engine_call
    def affine_resize(
        self,
        handle: ImageHandle,
        scale: float,
        interpolator: Interpolator,
        vscale: float | None = None,
    ) -> ImageHandle:
        image: Image.Image = handle.image
        vscale = scale if vscale is None else vscale
        size = (
            max(1, round_half_away(image.width * scale)),
            max(1, round_half_away(image.height * vscale)),
        )
        if size == image.size:
            return self._derive(image.copy(), handle)
        return self._derive(image.resize(size, RESAMPLING[interpolator]), handle)

    @override
    @engine_call
    def integral_shrink(self, handle: ImageHandle, xshrink: int, yshrink: int) -> ImageHandle:
        image: Image.Image = handle.image
        if xshrink <= 1 and yshrink <= 1:
            return self._derive(image.copy(), handle)
        return self._derive(image.reduce((max(1, xshrink), max(1, yshrink))), handle)

    @override
    @engine_call
    def zoom(self, handle: ImageHandle, xfactor: int, yfactor: int) -> ImageHandle:
        image: Image.Image = handle.image
        size = (image.width * xfactor, image.height * yfactor)
        return self._derive(image.resize(size, Image.Resampling.NEAREST), handle)

    @override
    @engine_call
    def rotate(self, handle: ImageHandle, angle: Angle) -> ImageHandle:
        image: Image.Image = handle.image
        transpose = ROTATIONS.get(angle)
        rotated = image.copy() if transpose is None else image.transpose(transpose)
        _reset_orientation(rotated)
        return self._derive(rotated, handle)

    @override
    @engine_call
    def flip(self, handle: ImageHandle, direction: Direction) -> ImageHandle:
        flipped = handle.image.transpose(FLIPS[direction])
        _reset_orientation(flipped)
        return self._derive(flipped, handle)

    @override
    @engine_call
    def extract(self, handle: ImageHandle, left: int, top: int, width: int, height: int) -> ImageHandle:
        image: Image.Image = handle.image
        if (
            left < 0
            or top < 0
            or width <= 0
            or height <= 0
            or left + width > image.width
            or top + height > image.height
        ):
            raise EngineFailureError(
                f"extract_area: bad extract area {left},{top} {width}x{height} of {image.width}x{image.height}"
            )
        return self._derive(image.crop((left, top, left + width, top + height)), handle)

    @override
    @engine_call
    def embed(
        self,
        handle: ImageHandle,
        left: int,
        top: int,
        width: int,
        height: int,
        extend: Extend,
        background: Color,
    ) -> ImageHandle:
        image = _working(handle.image)
        data = pixel_ops.embed(
            _to_array(image), left, top, width, height, extend, _fill_for(image.mode, extend, background)
        )
        return self._derive(_from_array(data, image), handle)

    @override
    @engine_call
    def smart_crop(self, handle: ImageHandle, width: int, height: int) -> ImageHandle:
        image: Image.Image = handle.image
        width, height = min(width, image.width), min(height, image.height)
        grey = np.asarray(image.convert("L"), dtype=np.float64)
        left, top = pixel_ops.smart_crop_window(grey, width, height)
        return self._derive(image.crop((left, top, left + width, top + height)), handle)

    @override
    @engine_call
    def find_trim(self, handle: ImageHandle, background: Color, threshold: float) -> TrimBox:
        image: Image.Image = handle.image
        rgba = image.convert("RGBA")
        if self.has_alpha(handle):
            canvas = Image.new("RGBA", image.size, (*background.rgb(), 255))
            canvas.alpha_composite(rgba)
            rgba = canvas

        box = pixel_ops.trim_box(np.asarray(rgba), background.rgb(), threshold)
        if box is None:
            return TrimBox(0, 0, image.width, image.height)
        return TrimBox(*box)

    # ── effects ──────────────────────────────────────────────

    @override
    @engine_call
    def gaussian_blur(self, handle: ImageHandle, blur: GaussianBlur) -> ImageHandle:
        image = _working(handle.image)
        if blur.sigma <= 0:
            return self._derive(image.copy(), handle)
        data = pixel_ops.gaussian_blur(_to_array(image), blur.sigma, blur.min_ampl)
        return self._derive(_from_array(data, image), handle)

    @override
    @engine_call
    def sharpen(self, handle: ImageHandle, sharpen: Sharpen) -> ImageHandle:
        image = _working(handle.image)
        bands = image.split()

        def sharpened(channel: Image.Image) -> Image.Image:
            data = pixel_ops.sharpen_lightness(
                np.asarray(channel),
                sharpen.sigma,
                sharpen.x1,
                sharpen.y2,
                sharpen.y3,
                sharpen.m1,
                sharpen.m2,
            )
            return Image.fromarray(data)

        if image.mode in ("RGB", "RGBA"):
            y, cb, cr = image.convert("RGB").convert("YCbCr").split()
            out = Image.merge("YCbCr", (sharpened(y), cb, cr)).convert("RGB")
            if image.mode == "RGBA":
                out.putalpha(bands[3])
        else:
            out = sharpened(bands[0])
            if image.mode == "LA":
                out = Image.merge("LA", (out, bands[1]))

        out.info = image.info.copy()
        return self._derive(out, handle)

    @override
    @engine_call
    def flatten(self, handle: ImageHandle, background: Color) -> ImageHandle:
        image: Image.Image = handle.image
        if not self.has_alpha(handle):
            return self._derive(image.copy(), handle)

        canvas = Image.new("RGBA", image.size, (*background.rgb(), 255))
        canvas.alpha_composite(image.convert("RGBA"))
        flat = canvas.convert("L" if image.mode in ("L", "LA") else "RGB")
        flat.info = image.info.copy()
        flat.info.pop("transparency", None)
        return self._derive(flat, handle)

    @override
    @engine_call
    def gamma(self, handle: ImageHandle, exponent: float) -> ImageHandle:
        image = _working(handle.image)
        lut = pixel_ops.gamma_lut(exponent)
        colour_bands = len(image.mode) - (1 if image.mode in ALPHA_MODES else 0)
        table = lut * colour_bands
        if image.mode in ALPHA_MODES:
            table += list(range(256))
        return self._derive(image.point(table), handle)

    @override
    @engine_call
    def colourspace(self, handle: ImageHandle, interpretation: Interpretation) -> ImageHandle:
        image: Image.Image = handle.image
        target = TARGET_MODES.get(interpretation)
        if target is None:
            logger.warning(f"{self.name} cannot convert to {interpretation}, keeping {image.mode}")
            return self._derive(image.copy(), handle)

        if self.has_alpha(handle) and target in ("RGB", "L"):
            target += "A"
        if image.mode == target:
            return self._derive(image.copy(), handle)

        if target == "CMYK" and image.mode != "RGB":
            image = image.convert("RGB")
        return self._derive(image.convert(target), handle)

    @override
    @engine_call
    def icc_transform(self, handle: ImageHandle, output_icc: str) -> ImageHandle:
        image: Image.Image = handle.image
        embedded = image.info.get("icc_profile")
        if embedded:
            source = ImageCms.ImageCmsProfile(io.BytesIO(embedded))
        else:
            source = ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB"))
        target = ImageCms.ImageCmsProfile(output_icc)

        mode = image.mode if image.mode in ("RGB", "RGBA", "CMYK", "L") else "RGB"
        working = image if mode == image.mode else image.convert(mode)
        transformed = ImageCms.profileToProfile(working, source, target, outputMode=mode)
        if transformed is None:
            raise EngineFailureError(f"ICC transform to {output_icc} produced no image")

        transformed.info = image.info.copy()
        transformed.info["icc_profile"] = target.tobytes()
        return self._derive(transformed, handle)

    # ── watermarks ───────────────────────────────────────────

    @override
    @engine_call
    def watermark_text(self, handle: ImageHandle, watermark: Watermark) -> ImageHandle:
        image: Image.Image = handle.image
        font = _load_font(watermark.font, watermark.dpi)

        probe = ImageDraw.Draw(Image.new("L", (1, 1)))
        text = _wrap_text(watermark.text, font, watermark.width, probe)
        left, top, right, bottom = probe.multiline_textbbox((0, 0), text, font=font)
        block_width, block_height = max(1, int(right - left)), max(1, int(bottom - top))

        fill = (*watermark.background.rgb(), int(round(255 * watermark.opacity)))
        layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)

        if watermark.no_replicate:
            x, y = watermark_position(image.width, image.height, block_width, block_height, watermark)
            draw.multiline_text((x - left, y - top), text, font=font, fill=fill)
        else:
            for y in range(0, image.height, block_height + watermark.margin):
                for x in range(0, image.width, block_width + watermark.margin):
                    draw.multiline_text((x - left, y - top), text, font=font, fill=fill)

        base = image.convert("RGBA")
        base.alpha_composite(layer)
        if not self.has_alpha(handle):
            base = base.convert("L" if image.mode == "L" else "RGB")
        base.info = image.info.copy()
        return self._derive(base, handle)

    @override
    @engine_call
    def watermark_image(
        self,
        handle: ImageHandle,
        watermark: ImageHandle,
        left: int,
        top: int,
        opacity: float,
        blend_mode: BlendMode,
    ) -> ImageHandle:
        image: Image.Image = handle.image
        data = pixel_ops.composite(
            np.asarray(image.convert("RGBA")),
            np.asarray(watermark.image.convert("RGBA")),
            left,
            top,
            opacity,
            blend_mode,
        )
        out = Image.fromarray(data)
        if not self.has_alpha(handle):
            out = out.convert("L" if image.mode == "L" else "RGB")
        out.info = image.info.copy()
        return self._derive(out, handle)

    # ── introspection ────────────────────────────────────────

    @override
    @engine_call
    def exif_orientation(self, handle: ImageHandle) -> int:
        value = handle.image.getexif().get(ORIENTATION_TAG, 0)
        try:
            orientation = int(value)
        except (TypeError, ValueError):
            return 0
        return orientation if 1 <= orientation <= 8 else 0

    @override
    @engine_call
    def has_alpha(self, handle: ImageHandle) -> bool:
        image: Image.Image = handle.image
        return image.mode in ALPHA_MODES or "transparency" in image.info

    @override
    @engine_call
    def has_profile(self, handle: ImageHandle) -> bool:
        return bool(handle.image.info.get("icc_profile"))

    @override
    @engine_call
    def icc_profile(self, handle: ImageHandle) -> bytes | None:
        return handle.image.info.get("icc_profile") or None

    @override
    @engine_call
    def interpretation(self, handle: ImageHandle) -> Interpretation | None:
        return INTERPRETATIONS.get(handle.image.mode)

    @override
    @engine_call
    def metadata(self, handle: ImageHandle) -> ImageMetadata:
        image: Image.Image = handle.image
        exif = image.getexif()

        raw: dict[str, Any] = {}
        for tag, value in exif.items():
            raw[ExifTags.TAGS.get(tag, str(tag))] = _plain(value)
        for tag, value in exif.get_ifd(ExifTags.IFD.Exif).items():
            raw[ExifTags.TAGS.get(tag, str(tag))] = _plain(value)

        interpretation = self.interpretation(handle)
        return ImageMetadata(
            size=ImageSize(width=image.width, height=image.height),
            channels=len(image.getbands()),
            alpha=self.has_alpha(handle),
            profile=self.has_profile(handle),
            orientation=self.exif_orientation(handle),
            type=handle.image_type.value,
            space=interpretation.value if interpretation else image.mode.lower(),
            exif=ExifData.from_raw_metadata(raw),
        )
