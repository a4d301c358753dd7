"""Test configuration and fixtures for vimg.

This module provides:
- Contexts and processors wired to the instrumented FakeEngine
- Contexts and processors wired to the Pillow engine
- Factories for small synthetic images encoded with Pillow
"""

import io
from collections.abc import Callable

import pytest
from fakes import FakeEngine
from PIL import Image

from vimg.common.config import EngineConfig
from vimg.engine.context import EngineContext
from vimg.engine.pillow_engine import PillowEngine
from vimg.planner.processor import Processor

# ============================================================================
# Fixtures - planner with the fake engine
# ============================================================================


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_context(fake_engine: FakeEngine) -> EngineContext:
    """Context with default config (environment ignored) around the fake engine."""
    return EngineContext(EngineConfig(), engine=fake_engine).initialize()


@pytest.fixture
def processor(fake_context: EngineContext) -> Processor:
    return Processor(fake_context)


# ============================================================================
# Fixtures - Pillow engine and synthetic images
# ============================================================================


@pytest.fixture
def pillow_engine() -> PillowEngine:
    return PillowEngine()


@pytest.fixture
def pillow_context(pillow_engine: PillowEngine) -> EngineContext:
    return EngineContext(EngineConfig(), engine=pillow_engine).initialize()


@pytest.fixture
def pillow_processor(pillow_context: EngineContext) -> Processor:
    return Processor(pillow_context)


ImageFactory = Callable[..., bytes]


@pytest.fixture
def image_bytes() -> ImageFactory:
    """Factory encoding a synthetic image.

    Usage:
        data = image_bytes((400, 200), "JPEG", color=(255, 0, 0), orientation=6)
    """

    def make(
        size: tuple[int, int] = (64, 48),
        format: str = "PNG",
        mode: str = "RGB",
        color: tuple[int, ...] = (200, 30, 30),
        orientation: int | None = None,
        draw: Callable[[Image.Image], None] | None = None,
    ) -> bytes:
        img = Image.new(mode, size, color)
        if draw is not None:
            draw(img)

        save_kwargs: dict[str, object] = {}
        if orientation is not None:
            exif = Image.Exif()
            exif[0x0112] = orientation
            save_kwargs["exif"] = exif.tobytes()

        out = io.BytesIO()
        img.save(out, format, **save_kwargs)
        return out.getvalue()

    return make


def open_bytes(data: bytes) -> Image.Image:
    """Decode bytes produced by the engine for assertions."""
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def decode_bytes() -> Callable[[bytes], Image.Image]:
    return open_bytes
