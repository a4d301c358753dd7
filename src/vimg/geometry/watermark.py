"""Watermark placement geometry.

Independent of any engine: given the source size, the watermark size
after its own scaling and a WatermarkPlacement, compute the absolute
top-left pixel where the watermark is drawn.
"""

from ..common.schemas import WatermarkPlacement
from ..common.types import HorizontalAlign, VerticalAlign


def resolve_offset(
    src: int, mark: int, offset: float, relative: bool, start: bool, centre: bool
) -> int:
    """One axis of the placement.

    start/centre select Left|Top, Centre, or (neither) Right|Bottom.
    Relative offsets are percentages of the source size on that axis.
    """
    if centre:
        return int((src - mark) / 2)

    distance = offset * src / 100.0 if relative else offset
    if start:
        return int(distance)
    return int(src - distance - mark)


def watermark_position(
    src_width: int,
    src_height: int,
    mark_width: int,
    mark_height: int,
    placement: WatermarkPlacement,
) -> tuple[int, int]:
    """Return (left, top) for a watermark of mark_width x mark_height."""
    left = resolve_offset(
        src_width,
        mark_width,
        placement.h_offset,
        placement.relative,
        start=placement.h_align == HorizontalAlign.LEFT,
        centre=placement.h_align == HorizontalAlign.CENTRE,
    )
    top = resolve_offset(
        src_height,
        mark_height,
        placement.v_offset,
        placement.relative,
        start=placement.v_align == VerticalAlign.TOP,
        centre=placement.v_align == VerticalAlign.CENTRE,
    )
    return left, top


def watermark_size(
    src_width: int, src_height: int, width: float, height: float, relative: bool
) -> tuple[int, int]:
    """Requested watermark box, resolving percentages against the source."""
    if not relative:
        return int(width), int(height)
    return int(width * src_width / 100.0), int(height * src_height / 100.0)
