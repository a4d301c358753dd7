"""Lazily discovered load/save capabilities of an image engine."""

import threading
from typing import NamedTuple

from loguru import logger

from ..common.types import ImageType
from .base import ImageEngine

# Formats the planner knows how to talk about
KNOWN_TYPES: tuple[ImageType, ...] = tuple(t for t in ImageType if t is not ImageType.UNKNOWN)


class SupportedImageType(NamedTuple):
    load: bool
    save: bool


UNSUPPORTED = SupportedImageType(load=False, save=False)


class CapabilityRegistry:
    """Caches which image types the engine can decode/encode.

    The engine is queried once, on first use. Readers that find the cache
    populated go straight through; the first reader to find it empty
    populates it under the lock while concurrent callers wait.
    """

    def __init__(self, engine: ImageEngine):
        self._engine: ImageEngine = engine
        self._lock: threading.Lock = threading.Lock()
        self._supported: dict[ImageType, SupportedImageType] = {}
        self.discoveries: int = 0

    def _discover(self) -> dict[ImageType, SupportedImageType]:
        supported = self._supported
        if supported:
            return supported

        with self._lock:
            if not self._supported:
                discovered = {
                    image_type: SupportedImageType(
                        load=self._engine.type_supported(image_type, save=False),
                        save=self._engine.type_supported(image_type, save=True),
                    )
                    for image_type in KNOWN_TYPES
                }
                self.discoveries += 1
                logger.info(
                    f"{self._engine.name} supports load={[t.value for t, s in discovered.items() if s.load]} "
                    + f"save={[t.value for t, s in discovered.items() if s.save]}"
                )
                self._supported = discovered
            return self._supported

    def clear(self) -> None:
        """Forget discovered capabilities; the next query rediscovers them."""
        with self._lock:
            self._supported = {}

    def is_supported(self, image_type: ImageType) -> SupportedImageType:
        return self._discover().get(image_type, UNSUPPORTED)

    def is_type_supported(self, image_type: ImageType) -> bool:
        return self.is_supported(image_type).load

    def is_type_supported_save(self, image_type: ImageType) -> bool:
        return self.is_supported(image_type).save

    def is_type_name_supported(self, name: str) -> bool:
        return self.is_type_supported(ImageType.from_name(name))

    def is_type_name_supported_save(self, name: str) -> bool:
        return self.is_type_supported_save(ImageType.from_name(name))


def image_type_name(image_type: ImageType) -> str:
    """Human friendly name of an image format ("unknown" for anything else)."""
    return image_type.value
