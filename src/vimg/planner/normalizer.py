"""Options normalizer: defaults, operation mode and enlargement clamp.

Each step returns a new TransformOptions; nothing is mutated.
"""

from loguru import logger

from ..common.config import EngineConfig
from ..common.schemas import TransformOptions
from ..common.types import Angle, ImageType, Interpretation
from ..geometry.scale import enlargement_guarded


def apply_defaults(options: TransformOptions, source_type: ImageType, config: EngineConfig) -> TransformOptions:
    """Fill quality, compression, output type and interpretation when unset."""
    changes: dict[str, object] = {}
    if options.quality == 0:
        changes["quality"] = config.default_quality
    if options.compression == 0:
        changes["compression"] = config.default_compression
    if options.type == ImageType.UNKNOWN:
        changes["type"] = source_type
    if options.interpretation is None:
        changes["interpretation"] = Interpretation.SRGB

    if not changes:
        return options
    return options.update(**changes)


def normalize_operation(options: TransformOptions) -> TransformOptions:
    """A bare width/height request with no mode and no rotation means Force."""
    if (
        not options.maintain_aspect
        and not options.force
        and not options.crop
        and not options.embed
        and not options.enlarge
        and options.rotate == Angle.D0
        and (options.width > 0 or options.height > 0)
    ):
        logger.debug(f"No resize mode given for {options.width}x{options.height}, forcing exact size")
        return options.update(force=True)
    return options


def clamp_to_source(options: TransformOptions, in_width: int, in_height: int) -> TransformOptions:
    """Shrink the requested box to the source when enlarging is not allowed."""
    if enlargement_guarded(in_width, in_height, options):
        logger.debug(
            f"Source {in_width}x{in_height} is smaller than {options.width}x{options.height}, not enlarging"
        )
        return options.update(width=in_width, height=in_height)
    return options
