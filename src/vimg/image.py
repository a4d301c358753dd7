"""Convenience facade with a method DSL over the planner."""

from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from .common.errors import EmptyInputError, InvalidHandleError, UnsupportedFormatError
from .common.metadata import ImageMetadata, ImageSize
from .common.schemas import ExtractArea, TransformOptions, Watermark, WatermarkImage
from .common.types import Angle, Gravity, ImageType, Interpretation
from .engine.base import ImageHandle
from .engine.context import EngineContext, get_default_context
from .engine.detect import detect_image_type
from .engine.registry import image_type_name
from .planner.processor import Processor

THUMBNAIL_QUALITY = 95


class Image:
    """An encoded image plus the operations that can be applied to it.

    Every operation decodes the current buffer, runs the planner with
    the base options updated for that operation, and stores the encoded
    result as the new current buffer, which is also returned.

    Example:
        image = Image(data, TransformOptions(type=ImageType.WEBP))
        image.resize_and_crop(300, 200)
        thumbnail = image.thumbnail(64)
    """

    def __init__(
        self,
        buf: bytes,
        options: TransformOptions | None = None,
        context: EngineContext | None = None,
    ):
        if not buf:
            raise EmptyInputError("Image buffer is empty")

        self.context: EngineContext = context or get_default_context()
        self.processor: Processor = Processor(self.context)
        self.options: TransformOptions = options or TransformOptions()

        image_type = detect_image_type(buf, self.context.registry)
        if image_type == ImageType.UNKNOWN:
            raise UnsupportedFormatError("Unsupported image format")

        self._buffer: bytes | None = buf
        self._type: ImageType = image_type

    # ── lifecycle ────────────────────────────────────────────

    def close(self) -> None:
        """Drop the buffer; any further use raises InvalidHandleError."""
        self._buffer = None

    def __enter__(self) -> "Image":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def buffer(self) -> bytes:
        if self._buffer is None:
            raise InvalidHandleError("Image has been closed")
        return self._buffer

    @contextmanager
    def _decoded(self) -> Iterator[ImageHandle]:
        with self.context.engine.decode(self.buffer, self._type) as handle:
            yield handle

    # ── processing ───────────────────────────────────────────

    def process(self, options: TransformOptions | None = None) -> bytes:
        """Run the planner with `options` (default: the base options)."""
        options = options or self.options
        with self.context.limit():
            handle = self.context.engine.decode(self.buffer, self._type)

        with self.processor.process(handle, options) as result:
            output = self.processor.save(result, options)

        detected = detect_image_type(output, self.context.registry)
        if detected != ImageType.UNKNOWN:
            self._type = detected
        self._buffer = output
        return output

    def _apply(self, **changes: object) -> bytes:
        return self.process(self.options.update(**changes))

    def save(self) -> bytes:
        """Encode the current image with the base output controls only."""
        with self._decoded() as handle:
            return self.processor.save(handle, self.options)

    # ── method DSL ───────────────────────────────────────────

    def resize(self, width: int, height: int) -> bytes:
        """Fit inside width x height, embedding on a canvas of that size."""
        return self._apply(width=width, height=height, embed=True)

    def force_resize(self, width: int, height: int) -> bytes:
        """Resize to exactly width x height; the aspect ratio is not kept."""
        return self._apply(width=width, height=height, force=True)

    def resize_and_crop(self, width: int, height: int) -> bytes:
        return self._apply(width=width, height=height, embed=True, crop=True)

    def smart_crop(self, width: int, height: int) -> bytes:
        """Crop around the most interesting region."""
        return self._apply(width=width, height=height, gravity=Gravity.SMART, crop=True)

    def extract(self, top: int, left: int, width: int, height: int) -> bytes:
        area = ExtractArea(left=left, top=top, width=width, height=height)
        return self._apply(extract=area)

    def enlarge(self, width: int, height: int) -> bytes:
        return self._apply(width=width, height=height, enlarge=True)

    def enlarge_and_crop(self, width: int, height: int) -> bytes:
        return self._apply(width=width, height=height, enlarge=True, crop=True)

    def crop(self, width: int, height: int, gravity: Gravity = Gravity.CENTRE) -> bytes:
        return self._apply(width=width, height=height, crop=True, gravity=gravity)

    def crop_by_width(self, width: int) -> bytes:
        return self._apply(width=width, crop=True)

    def crop_by_height(self, height: int) -> bytes:
        return self._apply(height=height, crop=True)

    def thumbnail(self, pixels: int) -> bytes:
        """Square crop of pixels x pixels, encoded at high quality."""
        return self._apply(width=pixels, height=pixels, crop=True, quality=THUMBNAIL_QUALITY)

    def watermark(self, watermark: Watermark) -> bytes:
        return self._apply(watermark=watermark)

    def watermark_image(self, watermark: WatermarkImage) -> bytes:
        return self._apply(watermark_image=watermark)

    def zoom(self, factor: int) -> bytes:
        return self._apply(zoom=factor)

    def rotate(self, angle: Angle | int) -> bytes:
        return self._apply(rotate=Angle.normalize(int(angle)))

    def flip(self) -> bytes:
        """Mirror left to right."""
        return self._apply(flip=True)

    def flop(self) -> bytes:
        """Mirror top to bottom."""
        return self._apply(flop=True)

    def convert(self, image_type: ImageType) -> bytes:
        return self._apply(type=image_type)

    def colourspace(self, interpretation: Interpretation) -> bytes:
        return self._apply(interpretation=interpretation)

    def trim(self) -> bytes:
        return self._apply(trim=True)

    def gamma(self, exponent: float) -> bytes:
        return self._apply(gamma=exponent)

    # ── introspection ────────────────────────────────────────

    def metadata(self) -> ImageMetadata:
        with self._decoded() as handle:
            return self.context.engine.metadata(handle)

    def size(self) -> ImageSize:
        with self._decoded() as handle:
            return ImageSize(width=handle.width, height=handle.height)

    def type(self) -> str:
        return image_type_name(self._type)

    def length(self) -> int:
        return len(self.buffer)

    def image(self) -> bytes:
        return self.buffer

    def icc_profile(self) -> bytes | None:
        with self._decoded() as handle:
            return self.context.engine.icc_profile(handle)

    def interpretation(self) -> Interpretation | None:
        with self._decoded() as handle:
            return self.context.engine.interpretation(handle)
