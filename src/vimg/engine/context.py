"""Injectable engine context: engine, configuration, registry and limiter."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from loguru import logger

from ..common.config import EngineConfig
from .base import ImageEngine
from .pillow_engine import PillowEngine
from .registry import CapabilityRegistry


class EngineContext:
    """Everything a Processor needs from the outside world.

    Build one explicitly and pass it around; nothing here is global
    except the optional default returned by get_default_context().

    Example:
        with EngineContext(EngineConfig(concurrency=4)) as context:
            processor = Processor(context)
    """

    def __init__(self, config: EngineConfig | None = None, engine: ImageEngine | None = None):
        self.config: EngineConfig = config or EngineConfig.from_env()
        self.engine: ImageEngine = engine or PillowEngine()
        self.registry: CapabilityRegistry = CapabilityRegistry(self.engine)
        self._limiter: threading.BoundedSemaphore = threading.BoundedSemaphore(self.config.concurrency)
        self._lock: threading.Lock = threading.Lock()
        self._initialized: bool = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> "EngineContext":
        """Apply the configuration to the engine. Safe to call repeatedly."""
        with self._lock:
            if self._initialized:
                return self
            self.engine.configure(max_image_pixels=self.config.max_image_pixels, trace=self.config.trace)
            self._initialized = True
            logger.info(
                f"Engine context ready: engine={self.engine.name} concurrency={self.config.concurrency} "
                + f"max_size={self.config.max_size}"
            )
        return self

    def shutdown(self) -> None:
        with self._lock:
            if not self._initialized:
                return
            self.registry.clear()
            self._initialized = False
            logger.info(f"Engine context for {self.engine.name} shut down")

    @contextmanager
    def limit(self) -> Iterator[None]:
        """Hold one of the `concurrency` processing slots."""
        _ = self._limiter.acquire()
        try:
            yield
        finally:
            self._limiter.release()

    def __enter__(self) -> "EngineContext":
        return self.initialize()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()


_default_context: EngineContext | None = None
_default_lock = threading.Lock()


def get_default_context() -> EngineContext:
    """Get or create the process-wide context used by the Image facade."""
    global _default_context
    if _default_context is None:
        with _default_lock:
            if _default_context is None:
                _default_context = EngineContext().initialize()
    return _default_context
