"""Gravity based crop offsets."""

from ..common.types import Gravity


def calculate_crop(
    in_width: int, in_height: int, out_width: int, out_height: int, gravity: Gravity
) -> tuple[int, int]:
    """Return (left, top) of an out_width x out_height window anchored by gravity.

    Offsets can be negative when the window is larger than the source;
    callers clamp them to 0.
    """
    left, top = 0, 0

    match gravity:
        case Gravity.NORTH:
            left = (in_width - out_width + 1) // 2
        case Gravity.EAST:
            left = in_width - out_width
            top = (in_height - out_height + 1) // 2
        case Gravity.SOUTH:
            left = (in_width - out_width + 1) // 2
            top = in_height - out_height
        case Gravity.WEST:
            top = (in_height - out_height + 1) // 2
        case _:
            left = (in_width - out_width + 1) // 2
            top = (in_height - out_height + 1) // 2

    return left, top
