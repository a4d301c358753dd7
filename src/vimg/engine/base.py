"""Abstract image engine interface and the uniquely-owned image handle."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType
from typing import Any, NamedTuple, Protocol

from ..common.errors import InvalidHandleError
from ..common.metadata import ImageMetadata
from ..common.schemas import Color, GaussianBlur, SaveOptions, Sharpen, Watermark
from ..common.types import Angle, BlendMode, Direction, Extend, ImageType, Interpolator, Interpretation


class Raster(Protocol):
    """Anything an engine keeps inside a handle; only its size is needed here."""

    @property
    def size(self) -> tuple[int, int]: ...


class TrimBox(NamedTuple):
    """Bounding box of the non-background content."""

    left: int
    top: int
    width: int
    height: int


class ImageHandle:
    """Uniquely owned reference to an engine image.

    Carries the engine image, the bytes it was decoded from and the
    detected type. Dimensions are always read from the live image.
    A handle is released exactly once; using it afterwards, or releasing
    it again, raises InvalidHandleError.

    Example:
        with engine.decode(buf) as handle:
            print(handle.width, handle.height)
    """

    __slots__ = ("_image", "image_type", "buffer", "_on_release")

    def __init__(
        self,
        image: Raster,
        image_type: ImageType,
        buffer: bytes = b"",
        on_release: Callable[["ImageHandle"], None] | None = None,
    ):
        self._image: Raster | None = image
        self.image_type: ImageType = image_type
        self.buffer: bytes = buffer
        self._on_release: Callable[[ImageHandle], None] | None = on_release

    @property
    def image(self) -> Any:
        if self._image is None:
            raise InvalidHandleError("Image handle has already been released")
        return self._image

    @property
    def released(self) -> bool:
        return self._image is None

    @property
    def width(self) -> int:
        return self.image.size[0]

    @property
    def height(self) -> int:
        return self.image.size[1]

    def release(self) -> None:
        if self._image is None:
            raise InvalidHandleError("Image handle released twice")
        if self._on_release is not None:
            self._on_release(self)
        self._image = None

    def __enter__(self) -> "ImageHandle":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._image is not None:
            self.release()

    def __repr__(self) -> str:
        if self._image is None:
            return f"<ImageHandle {self.image_type} released>"
        return f"<ImageHandle {self.image_type} {self.width}x{self.height}>"


class ImageEngine(ABC):
    """Pixel-level collaborator driven by the planner.

    Every operation that produces an image returns a NEW handle and
    leaves its input untouched; releasing superseded handles is the
    caller's job. Failures are raised as EngineFailureError.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def version(self) -> tuple[int, int]:
        """(major, minor) of the underlying library."""
        ...

    def configure(self, max_image_pixels: int | None = None, trace: bool = False) -> None:
        """Apply process level settings. Optional."""
        pass

    # ── capabilities ─────────────────────────────────────────

    @abstractmethod
    def type_supported(self, image_type: ImageType, save: bool = False) -> bool: ...

    @abstractmethod
    def interpolator_window_size(self, interpolator: Interpolator) -> float: ...

    # ── load / save ──────────────────────────────────────────

    @abstractmethod
    def decode(self, buf: bytes, image_type: ImageType) -> ImageHandle: ...

    @abstractmethod
    def load_shrunk(self, buf: bytes, image_type: ImageType, shrink: int) -> ImageHandle:
        """Decode `buf` asking the decoder to downsample by `shrink`."""
        ...

    @abstractmethod
    def encode(self, handle: ImageHandle, options: SaveOptions) -> bytes: ...

    @abstractmethod
    def encode_buffer(self, handle: ImageHandle) -> bytes:
        """Re-encode in the handle's own type at maximum quality."""
        ...

    # ── geometry ─────────────────────────────────────────────

    @abstractmethod
    def affine_resize(
        self,
        handle: ImageHandle,
        scale: float,
        interpolator: Interpolator,
        vscale: float | None = None,
    ) -> ImageHandle: ...

    @abstractmethod
    def integral_shrink(self, handle: ImageHandle, xshrink: int, yshrink: int) -> ImageHandle: ...

    @abstractmethod
    def zoom(self, handle: ImageHandle, xfactor: int, yfactor: int) -> ImageHandle: ...

    @abstractmethod
    def rotate(self, handle: ImageHandle, angle: Angle) -> ImageHandle: ...

    @abstractmethod
    def flip(self, handle: ImageHandle, direction: Direction) -> ImageHandle: ...

    @abstractmethod
    def extract(self, handle: ImageHandle, left: int, top: int, width: int, height: int) -> ImageHandle: ...

    @abstractmethod
    def embed(
        self,
        handle: ImageHandle,
        left: int,
        top: int,
        width: int,
        height: int,
        extend: Extend,
        background: Color,
    ) -> ImageHandle: ...

    @abstractmethod
    def smart_crop(self, handle: ImageHandle, width: int, height: int) -> ImageHandle: ...

    @abstractmethod
    def find_trim(self, handle: ImageHandle, background: Color, threshold: float) -> TrimBox: ...

    # ── effects ──────────────────────────────────────────────

    @abstractmethod
    def gaussian_blur(self, handle: ImageHandle, blur: GaussianBlur) -> ImageHandle: ...

    @abstractmethod
    def sharpen(self, handle: ImageHandle, sharpen: Sharpen) -> ImageHandle: ...

    @abstractmethod
    def flatten(self, handle: ImageHandle, background: Color) -> ImageHandle: ...

    @abstractmethod
    def gamma(self, handle: ImageHandle, exponent: float) -> ImageHandle: ...

    @abstractmethod
    def colourspace(self, handle: ImageHandle, interpretation: Interpretation) -> ImageHandle: ...

    @abstractmethod
    def icc_transform(self, handle: ImageHandle, output_icc: str) -> ImageHandle: ...

    # ── watermarks ───────────────────────────────────────────

    @abstractmethod
    def watermark_text(self, handle: ImageHandle, watermark: Watermark) -> ImageHandle: ...

    @abstractmethod
    def watermark_image(
        self,
        handle: ImageHandle,
        watermark: ImageHandle,
        left: int,
        top: int,
        opacity: float,
        blend_mode: BlendMode,
    ) -> ImageHandle: ...

    # ── introspection ────────────────────────────────────────

    @abstractmethod
    def exif_orientation(self, handle: ImageHandle) -> int: ...

    @abstractmethod
    def has_alpha(self, handle: ImageHandle) -> bool: ...

    @abstractmethod
    def has_profile(self, handle: ImageHandle) -> bool: ...

    @abstractmethod
    def icc_profile(self, handle: ImageHandle) -> bytes | None: ...

    @abstractmethod
    def interpretation(self, handle: ImageHandle) -> Interpretation | None: ...

    @abstractmethod
    def metadata(self, handle: ImageHandle) -> ImageMetadata: ...

