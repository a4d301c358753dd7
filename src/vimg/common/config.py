"""Engine configuration."""

import os

from pydantic import BaseModel, Field

ENV_PREFIX = "VIMG_"


class EngineConfig(BaseModel):
    """Process-level knobs for an EngineContext.

    Attributes:
        concurrency: Maximum number of concurrent process() calls
        max_size: Maximum width/height accepted by extract, crop and smart crop
        max_image_pixels: Decoder guard against decompression bombs (None = Pillow default)
        default_quality: Encoder quality used when options leave it at 0
        default_compression: PNG compression used when options leave it at 0
        watermark_font: Font used for text watermarks when none is given
        trace: Log every engine call at DEBUG level
    """

    concurrency: int = Field(default=1, ge=1)
    max_size: int = Field(default=16383, ge=1)
    max_image_pixels: int | None = Field(default=None, ge=1)
    default_quality: int = Field(default=80, ge=1, le=100)
    default_compression: int = Field(default=6, ge=0, le=9)
    watermark_font: str = "sans 10"
    trace: bool = False

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "EngineConfig":
        """Build a config from VIMG_* environment variables.

        Example:
            VIMG_CONCURRENCY=4 VIMG_TRACE=1 python app.py
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for name in cls.model_fields:
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None or raw == "":
                continue
            if name == "trace":
                values[name] = raw.lower() not in ("0", "false", "no", "off")
            else:
                values[name] = raw

        return cls.model_validate(values)
