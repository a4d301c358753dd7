"""Tests for the Pillow engine and its numpy pixel helpers.

Uses small synthetic images built in memory; no media files needed.
"""

from collections.abc import Callable

import numpy as np
import pytest
from PIL import Image, ImageDraw

from vimg.common.errors import EmptyInputError, EngineFailureError, UnsupportedFormatError
from vimg.common.schemas import (
    BLACK,
    WHITE,
    Color,
    GaussianBlur,
    SaveOptions,
    Sharpen,
    TransformOptions,
    Watermark,
    WatermarkImage,
)
from vimg.common.types import Angle, BlendMode, Direction, Extend, ImageType, Interpolator, Interpretation
from vimg.engine import pixel_ops
from vimg.engine.base import ImageHandle, TrimBox
from vimg.engine.pillow_engine import PillowEngine
from vimg.planner.processor import Processor

ImageFactory = Callable[..., bytes]
Decoder = Callable[[bytes], Image.Image]


def pixel(handle: ImageHandle, x: int, y: int) -> tuple[int, ...]:
    value = handle.image.getpixel((x, y))
    return value if isinstance(value, tuple) else (value,)


# ============================================================================
# PIXEL HELPERS
# ============================================================================


def test_gaussian_kernel_is_normalised_and_symmetric():
    """Test the kernel sums to one and mirrors around its centre."""
    kernel = pixel_ops.gaussian_kernel(1.5)

    assert kernel.sum() == pytest.approx(1.0)
    assert np.allclose(kernel, kernel[::-1])
    assert len(kernel) % 2 == 1


def test_gaussian_kernel_radius_follows_min_ampl():
    """Test a smaller minimum amplitude gives a wider kernel."""
    assert len(pixel_ops.gaussian_kernel(2.0, 0.01)) > len(pixel_ops.gaussian_kernel(2.0, 0.5))


def test_convolve_separable_spreads_an_impulse_by_the_kernel():
    """Test an impulse comes back as the outer product of the kernel with itself."""
    kernel = pixel_ops.gaussian_kernel(1.0, 0.1)
    size = len(kernel) + 4
    data = np.zeros((size, size), dtype=np.float64)
    data[size // 2, size // 2] = 1.0

    out = pixel_ops.convolve_separable(data, kernel)

    radius = len(kernel) // 2
    centre = slice(size // 2 - radius, size // 2 + radius + 1)
    assert np.allclose(out[centre, centre], np.outer(kernel, kernel))
    assert out.sum() == pytest.approx(1.0)


def test_convolve_separable_replicates_edges():
    """Test pixels past the border repeat the edge value."""
    data = np.zeros((5, 5, 1), dtype=np.float64)
    data[:, 0] = 100.0

    out = pixel_ops.convolve_separable(data, pixel_ops.gaussian_kernel(1.0))

    assert out[2, 0, 0] > out[2, 1, 0] > out[2, 2, 0]
    assert np.allclose(out[0], out[4])


def test_gaussian_blur_keeps_flat_images_flat():
    """Test blurring a uniform image changes nothing."""
    data = np.full((10, 12, 3), 77, dtype=np.uint8)

    assert np.array_equal(pixel_ops.gaussian_blur(data, 2.0, 0.2), data)


def test_gamma_lut():
    """Test the 8-bit gamma curve."""
    lut = pixel_ops.gamma_lut(2.0)

    assert lut[0] == 0
    assert lut[255] == 255
    assert lut[64] == 128


def test_trim_box():
    """Test the box around non-background pixels."""
    data = np.full((40, 50, 3), 255, dtype=np.uint8)
    data[15:25, 20:30] = 0

    assert pixel_ops.trim_box(data, (255, 255, 255), 10) == (20, 15, 10, 10)
    assert pixel_ops.trim_box(np.full((5, 5, 3), 250, dtype=np.uint8), (255, 255, 255), 10) is None


def test_smart_crop_window_prefers_detail():
    """Test the window moves towards the region with edges."""
    grey = np.zeros((40, 100), dtype=np.float64)
    grey[10:30, 75:95:2] = 255.0

    left, top = pixel_ops.smart_crop_window(grey, 40, 40)

    assert left >= 55
    assert top == 0


def test_smart_crop_window_centres_flat_images():
    """Test a flat image falls back to a centred window."""
    assert pixel_ops.smart_crop_window(np.zeros((40, 100)), 40, 40) == (30, 0)


def test_embed_fill_and_copy():
    """Test constant fill and edge replication."""
    data = np.full((2, 2, 1), 9, dtype=np.uint8)

    filled = pixel_ops.embed(data, 1, 1, 4, 4, Extend.BLACK, (0,))
    copied = pixel_ops.embed(data, 1, 1, 4, 4, Extend.COPY, (0,))

    assert filled[0, 0, 0] == 0
    assert filled[1, 1, 0] == 9
    assert np.all(copied == 9)


def test_embed_negative_offset_crops_source():
    """Test a canvas smaller than the source shows its middle."""
    data = np.arange(16, dtype=np.uint8).reshape(4, 4, 1)

    out = pixel_ops.embed(data, -1, -1, 2, 2, Extend.BLACK, (0,))

    assert out[..., 0].tolist() == [[5, 6], [9, 10]]


@pytest.mark.parametrize(
    "mode,expected",
    [
        (BlendMode.OVER, (255, 0, 0, 255)),
        (BlendMode.DEST, (0, 0, 255, 255)),
        (BlendMode.CLEAR, (0, 0, 0, 0)),
        (BlendMode.MULTIPLY, (0, 0, 0, 255)),
        (BlendMode.SCREEN, (255, 0, 255, 255)),
        (BlendMode.LIGHTEN, (255, 0, 255, 255)),
        (BlendMode.DIFFERENCE, (255, 0, 255, 255)),
    ],
)
def test_composite_blend_modes(mode: BlendMode, expected: tuple[int, int, int, int]):
    """Test opaque red composited over opaque blue."""
    base = np.zeros((4, 4, 4), dtype=np.uint8)
    base[...] = (0, 0, 255, 255)
    mark = np.zeros((2, 2, 4), dtype=np.uint8)
    mark[...] = (255, 0, 0, 255)

    out = pixel_ops.composite(base, mark, 1, 1, 1.0, mode)

    assert tuple(out[1, 1]) == expected
    assert tuple(out[0, 0]) == (0, 0, 255, 255)


def test_composite_clips_outside_marks():
    """Test a watermark entirely outside the image leaves it untouched."""
    base = np.zeros((4, 4, 4), dtype=np.uint8)
    mark = np.full((2, 2, 4), 255, dtype=np.uint8)

    assert np.array_equal(pixel_ops.composite(base, mark, 10, 10, 1.0, BlendMode.OVER), base)


def test_composite_opacity():
    """Test half opacity mixes the colours."""
    base = np.zeros((2, 2, 4), dtype=np.uint8)
    base[..., 3] = 255
    mark = np.zeros((2, 2, 4), dtype=np.uint8)
    mark[...] = (255, 0, 0, 255)

    out = pixel_ops.composite(base, mark, 0, 0, 0.5, BlendMode.OVER)

    assert abs(int(out[0, 0, 0]) - 128) <= 1
    assert out[0, 0, 3] == 255


# ============================================================================
# CAPABILITIES AND CODECS
# ============================================================================


def test_type_support(pillow_engine: PillowEngine):
    """Test the load/save capabilities reported by Pillow."""
    assert pillow_engine.type_supported(ImageType.JPEG)
    assert pillow_engine.type_supported(ImageType.JPEG, save=True)
    assert pillow_engine.type_supported(ImageType.PNG, save=True)
    assert pillow_engine.type_supported(ImageType.GIF)
    assert not pillow_engine.type_supported(ImageType.GIF, save=True)
    assert not pillow_engine.type_supported(ImageType.SVG)
    assert pillow_engine.interpolator_window_size(Interpolator.BICUBIC) == 4


def test_decode(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test decoding keeps the source buffer and the live size."""
    data = image_bytes((64, 48))

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        assert (handle.width, handle.height) == (64, 48)
        assert handle.buffer == data
        assert handle.image_type == ImageType.PNG


def test_decode_errors(pillow_engine: PillowEngine):
    """Test empty and corrupt buffers."""
    with pytest.raises(EmptyInputError):
        _ = pillow_engine.decode(b"", ImageType.PNG)
    with pytest.raises(EngineFailureError):
        _ = pillow_engine.decode(b"\x89PNG\r\n\x1a\n garbage", ImageType.PNG)


def test_decode_expands_palette_images(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test palette images are decoded to plain RGB bands."""
    data = image_bytes((16, 16), mode="P", color=3)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        assert handle.image.mode == "RGB"


def test_load_shrunk_jpeg_uses_dct_scaling(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test JPEG shrink-on-load decodes at 1/4 scale."""
    data = image_bytes((400, 300), "JPEG")

    with pillow_engine.load_shrunk(data, ImageType.JPEG, 4) as handle:
        assert (handle.width, handle.height) == (100, 75)


def test_load_shrunk_other_formats_reduce(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test formats without DCT scaling are reduced after decoding."""
    with pillow_engine.load_shrunk(image_bytes((64, 48)), ImageType.PNG, 2) as handle:
        assert (handle.width, handle.height) == (32, 24)


def test_encode_formats(pillow_engine: PillowEngine, image_bytes: ImageFactory, decode_bytes: Decoder):
    """Test encoding to each supported output type."""
    with pillow_engine.decode(image_bytes((20, 10), mode="RGBA", color=(1, 2, 3, 128)), ImageType.PNG) as handle:
        for image_type, pil_format in ((ImageType.JPEG, "JPEG"), (ImageType.PNG, "PNG"), (ImageType.TIFF, "TIFF")):
            out = decode_bytes(pillow_engine.encode(handle, SaveOptions(type=image_type, quality=80, compression=6)))
            assert out.format == pil_format
            assert out.size == (20, 10)


def test_encode_unsupported_type(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test GIF output is refused."""
    with pillow_engine.decode(image_bytes(), ImageType.PNG) as handle:
        with pytest.raises(UnsupportedFormatError):
            _ = pillow_engine.encode(handle, SaveOptions(type=ImageType.GIF, quality=80, compression=6))


def test_encode_strip_metadata(pillow_engine: PillowEngine, image_bytes: ImageFactory, decode_bytes: Decoder):
    """Test EXIF survives encoding unless stripped."""
    data = image_bytes((40, 20), "JPEG", orientation=3)

    with pillow_engine.decode(data, ImageType.JPEG) as handle:
        kept = pillow_engine.encode(handle, SaveOptions(type=ImageType.JPEG, quality=90, compression=6))
        stripped = pillow_engine.encode(
            handle, SaveOptions(type=ImageType.JPEG, quality=90, compression=6, strip_metadata=True)
        )

    assert decode_bytes(kept).getexif().get(0x0112) == 3
    assert 0x0112 not in decode_bytes(stripped).getexif()


# ============================================================================
# GEOMETRY
# ============================================================================


def marked(img: Image.Image) -> None:
    """Put a white pixel in the top-left corner."""
    img.putpixel((0, 0), (255, 255, 255))


def test_resize_and_shrink(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test affine resize, anisotropic resize and integral shrink sizes."""
    with pillow_engine.decode(image_bytes((64, 48)), ImageType.PNG) as handle:
        with pillow_engine.affine_resize(handle, 0.5, Interpolator.BICUBIC) as half:
            assert (half.width, half.height) == (32, 24)
        with pillow_engine.affine_resize(handle, 0.5, Interpolator.BILINEAR, vscale=2.0) as stretched:
            assert (stretched.width, stretched.height) == (32, 96)
        with pillow_engine.integral_shrink(handle, 4, 4) as shrunk:
            assert (shrunk.width, shrunk.height) == (16, 12)
        with pillow_engine.zoom(handle, 2, 3) as zoomed:
            assert (zoomed.width, zoomed.height) == (128, 144)
        assert not handle.released


def test_rotate_clockwise(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test 90 degrees moves the top-left corner to the top-right."""
    data = image_bytes((40, 20), color=(0, 0, 0), draw=marked)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        with pillow_engine.rotate(handle, Angle.D90) as rotated:
            assert (rotated.width, rotated.height) == (20, 40)
            assert pixel(rotated, 19, 0) == (255, 255, 255)
        with pillow_engine.rotate(handle, Angle.D270) as rotated:
            assert pixel(rotated, 0, 39) == (255, 255, 255)


def test_flip_directions(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test horizontal mirrors left/right and vertical mirrors top/bottom."""
    data = image_bytes((40, 20), color=(0, 0, 0), draw=marked)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        with pillow_engine.flip(handle, Direction.HORIZONTAL) as flipped:
            assert pixel(flipped, 39, 0) == (255, 255, 255)
        with pillow_engine.flip(handle, Direction.VERTICAL) as flopped:
            assert pixel(flopped, 0, 19) == (255, 255, 255)


def test_rotate_resets_exif_orientation(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test the orientation tag is cleared once the pixels are upright."""
    data = image_bytes((40, 20), "JPEG", orientation=6)

    with pillow_engine.decode(data, ImageType.JPEG) as handle:
        assert pillow_engine.exif_orientation(handle) == 6
        with pillow_engine.rotate(handle, Angle.D90) as rotated:
            assert pillow_engine.exif_orientation(rotated) == 1


def test_extract_bounds(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test extract inside the image and the bad area error."""
    with pillow_engine.decode(image_bytes((64, 48)), ImageType.PNG) as handle:
        with pillow_engine.extract(handle, 10, 5, 20, 15) as area:
            assert (area.width, area.height) == (20, 15)
        with pytest.raises(EngineFailureError, match="bad extract area"):
            _ = pillow_engine.extract(handle, 50, 0, 20, 10)


@pytest.mark.parametrize(
    "extend,corner",
    [
        (Extend.BLACK, (0, 0, 0)),
        (Extend.WHITE, (255, 255, 255)),
        (Extend.COPY, (200, 30, 30)),
        (Extend.BACKGROUND, (0, 128, 0)),
    ],
)
def test_embed_extend(pillow_engine: PillowEngine, image_bytes: ImageFactory, extend: Extend, corner: tuple[int, ...]):
    """Test the canvas around an embedded image follows the extend mode."""
    with pillow_engine.decode(image_bytes((20, 10)), ImageType.PNG) as handle:
        with pillow_engine.embed(handle, 0, 5, 20, 20, extend, Color(g=128)) as embedded:
            assert (embedded.width, embedded.height) == (20, 20)
            assert pixel(embedded, 0, 0) == corner
            assert pixel(embedded, 0, 10) == (200, 30, 30)


def test_smart_crop_follows_detail(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test smart crop keeps the detailed half of the image."""

    def stripes(img: Image.Image) -> None:
        draw = ImageDraw.Draw(img)
        for x in range(70, 100, 2):
            draw.line([(x, 0), (x, 39)], fill=(255, 255, 255))

    data = image_bytes((100, 40), color=(0, 0, 0), draw=stripes)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        with pillow_engine.smart_crop(handle, 40, 40) as cropped:
            assert (cropped.width, cropped.height) == (40, 40)
            assert np.asarray(cropped.image).max() == 255


def test_find_trim(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test the content box on a white background."""

    def square(img: Image.Image) -> None:
        ImageDraw.Draw(img).rectangle([20, 15, 29, 24], fill=(0, 0, 0))

    data = image_bytes((50, 40), color=(255, 255, 255), draw=square)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        assert pillow_engine.find_trim(handle, WHITE, 10) == TrimBox(20, 15, 10, 10)
        # everything is content against a black background
        assert pillow_engine.find_trim(handle, BLACK, 10) == TrimBox(0, 0, 50, 40)


def test_find_trim_all_background(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test an empty image keeps its full frame."""
    with pillow_engine.decode(image_bytes((30, 20), color=(0, 0, 0)), ImageType.PNG) as handle:
        assert pillow_engine.find_trim(handle, BLACK, 10) == TrimBox(0, 0, 30, 20)


# ============================================================================
# EFFECTS AND COLOUR
# ============================================================================


def test_blur_and_sharpen_keep_size_and_mode(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test effects return a new image of the same geometry."""
    with pillow_engine.decode(image_bytes((32, 24), mode="RGBA", color=(10, 20, 30, 200)), ImageType.PNG) as handle:
        with pillow_engine.gaussian_blur(handle, GaussianBlur(sigma=1.5)) as blurred:
            assert blurred.image.size == (32, 24)
            assert blurred.image.mode == "RGBA"
        with pillow_engine.sharpen(handle, Sharpen(sigma=1.0)) as sharpened:
            assert sharpened.image.size == (32, 24)
            assert sharpened.image.mode == "RGBA"


def test_sharpen_increases_edge_contrast(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test the bright side of an edge gets brighter."""

    def half(img: Image.Image) -> None:
        ImageDraw.Draw(img).rectangle([16, 0, 31, 15], fill=128)

    data = image_bytes((32, 16), mode="L", color=64, draw=half)

    with pillow_engine.decode(data, ImageType.PNG) as handle:
        with pillow_engine.sharpen(handle, Sharpen(sigma=1.0, m2=3.0)) as sharpened:
            assert pixel(sharpened, 16, 8)[0] > 128
            assert pixel(sharpened, 15, 8)[0] < 64


def test_gamma(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test gamma 2 lifts mid-dark values."""
    with pillow_engine.decode(image_bytes((4, 4), color=(64, 64, 64)), ImageType.PNG) as handle:
        with pillow_engine.gamma(handle, 2.0) as corrected:
            assert pixel(corrected, 0, 0) == (128, 128, 128)


def test_flatten(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test transparent pixels take the background colour."""
    with pillow_engine.decode(image_bytes((8, 8), mode="RGBA", color=(0, 0, 0, 0)), ImageType.PNG) as handle:
        assert pillow_engine.has_alpha(handle)
        with pillow_engine.flatten(handle, WHITE) as flat:
            assert flat.image.mode == "RGB"
            assert pixel(flat, 3, 3) == (255, 255, 255)


def test_colourspace(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test conversion to black and white and back."""
    with pillow_engine.decode(image_bytes((8, 8)), ImageType.PNG) as handle:
        assert pillow_engine.interpretation(handle) == Interpretation.SRGB
        with pillow_engine.colourspace(handle, Interpretation.BW) as grey:
            assert grey.image.mode == "L"
            assert pillow_engine.interpretation(grey) == Interpretation.BW
        with pillow_engine.colourspace(handle, Interpretation.LAB) as unchanged:
            assert unchanged.image.mode == "RGB"


# ============================================================================
# WATERMARKS
# ============================================================================


def test_watermark_text_draws(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test tiled text lightens a black image somewhere."""
    mark = Watermark(text="vimg", font="sans 10", width=40, dpi=72, margin=10, opacity=0.5)

    with pillow_engine.decode(image_bytes((120, 80), color=(0, 0, 0)), ImageType.PNG) as handle:
        with pillow_engine.watermark_text(handle, mark) as marked_handle:
            assert marked_handle.image.size == (120, 80)
            assert marked_handle.image.mode == "RGB"
            assert np.asarray(marked_handle.image).max() > 0


def test_watermark_image_over(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test an opaque watermark replaces the pixels it covers."""
    base = image_bytes((20, 20), color=(0, 0, 0))
    mark = image_bytes((10, 10), mode="RGBA", color=(255, 0, 0, 255))

    with pillow_engine.decode(base, ImageType.PNG) as handle, pillow_engine.decode(mark, ImageType.PNG) as mark_handle:
        with pillow_engine.watermark_image(handle, mark_handle, 5, 5, 1.0, BlendMode.OVER) as out:
            assert out.image.mode == "RGB"
            assert pixel(out, 5, 5) == (255, 0, 0)
            assert pixel(out, 0, 0) == (0, 0, 0)


# ============================================================================
# METADATA
# ============================================================================


def test_metadata(pillow_engine: PillowEngine, image_bytes: ImageFactory):
    """Test size, bands and orientation are reported."""
    with pillow_engine.decode(image_bytes((40, 30), "JPEG", orientation=8), ImageType.JPEG) as handle:
        metadata = pillow_engine.metadata(handle)

    assert (metadata.size.width, metadata.size.height) == (40, 30)
    assert metadata.channels == 3
    assert metadata.alpha is False
    assert metadata.orientation == 8
    assert metadata.type == "jpeg"
    assert metadata.space == "srgb"
    assert metadata.exif.orientation == 8


def test_corrupt_exif_surfaces_as_engine_failure(
    pillow_engine: PillowEngine, image_bytes: ImageFactory, monkeypatch: pytest.MonkeyPatch
):
    """Test an unreadable EXIF block raises EngineFailureError, not a Pillow error."""

    def broken_exif() -> Image.Exif:
        raise SyntaxError("not a TIFF file")

    with pillow_engine.decode(image_bytes((40, 30), "JPEG", orientation=6), ImageType.JPEG) as handle:
        monkeypatch.setattr(handle.image, "getexif", broken_exif)

        with pytest.raises(EngineFailureError, match="not a TIFF file") as exc_info:
            _ = pillow_engine.exif_orientation(handle)
        assert isinstance(exc_info.value.__cause__, SyntaxError)

        with pytest.raises(EngineFailureError):
            _ = pillow_engine.metadata(handle)


# ============================================================================
# PLANNER ON PILLOW
# ============================================================================


def test_exif_rotated_jpeg_force_resize(
    pillow_processor: Processor, pillow_engine: PillowEngine, image_bytes: ImageFactory, decode_bytes: Decoder
):
    """Test a 400x200 JPEG tagged EXIF 6 force-resized to 300x100."""
    handle = pillow_engine.decode(image_bytes((400, 200), "JPEG", orientation=6), ImageType.JPEG)
    options = TransformOptions(width=300, height=100)

    with pillow_processor.process(handle, options) as result:
        data = pillow_processor.save(result, options)

    out = decode_bytes(data)
    assert out.format == "JPEG"
    assert out.size == (300, 100)


def test_crop_and_convert(
    pillow_processor: Processor, pillow_engine: PillowEngine, image_bytes: ImageFactory, decode_bytes: Decoder
):
    """Test a gravity crop encoded to another format."""
    handle = pillow_engine.decode(image_bytes((1000, 800)), ImageType.PNG)
    options = TransformOptions(width=500, height=300, crop=True, type=ImageType.JPEG, quality=70)

    with pillow_processor.process(handle, options) as result:
        data = pillow_processor.save(result, options)

    out = decode_bytes(data)
    assert out.format == "JPEG"
    assert out.size == (500, 300)


def test_image_watermark_through_planner(
    pillow_processor: Processor, pillow_engine: PillowEngine, image_bytes: ImageFactory
):
    """Test a PNG watermark is scaled and blended onto the image."""
    handle = pillow_engine.decode(image_bytes((200, 100), color=(0, 0, 0)), ImageType.PNG)
    mark = WatermarkImage(
        buf=image_bytes((100, 100), mode="RGBA", color=(255, 255, 255, 255)),
        width=20,
        height=20,
        h_offset=10,
        v_offset=10,
    )

    with pillow_processor.process(handle, TransformOptions(watermark_image=mark)) as result:
        assert (result.width, result.height) == (200, 100)
        assert pixel(result, 15, 15) == (255, 255, 255)
        assert pixel(result, 35, 35) == (0, 0, 0)
