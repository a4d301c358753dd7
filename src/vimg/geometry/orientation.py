"""EXIF orientation to (rotation, flip) resolution."""

from typing import NamedTuple

from ..common.types import Angle


class Orientation(NamedTuple):
    rotation: Angle
    flip: bool


# EXIF orientation -> clockwise rotation, then a left/right mirror
EXIF_ORIENTATIONS: dict[int, Orientation] = {
    1: Orientation(Angle.D0, False),
    2: Orientation(Angle.D0, True),
    3: Orientation(Angle.D180, False),
    4: Orientation(Angle.D180, True),
    5: Orientation(Angle.D90, True),
    6: Orientation(Angle.D90, False),
    7: Orientation(Angle.D270, True),
    8: Orientation(Angle.D270, False),
}

NO_ORIENTATION = Orientation(Angle.D0, False)


def exif_orientation(code: int) -> Orientation:
    """Fixed table lookup; anything outside 1-8 needs no correction."""
    return EXIF_ORIENTATIONS.get(code, NO_ORIENTATION)


def calculate_rotation_and_flip(exif_code: int, user_rotation: Angle, additive: bool) -> Orientation:
    """Combine the EXIF orientation with a user requested rotation.

    additive=True adds the EXIF correction to the user's angle, which is
    what people expect when they rotate a photo straight off a camera.
    Otherwise an explicit user rotation wins and EXIF is ignored.
    """
    if user_rotation != Angle.D0 and not additive:
        return Orientation(user_rotation, False)

    rotation, flip = exif_orientation(exif_code)
    if additive:
        rotation = Angle.normalize(rotation + user_rotation)

    return Orientation(rotation, flip)


def resolve_orientation(
    exif_code: int,
    user_rotation: Angle,
    user_flip: bool,
    no_auto_rotate: bool,
    additive: bool = True,
) -> Orientation:
    """Final (rotation, flip) to apply.

    With no_auto_rotate the user's rotation and flip are used verbatim.
    Otherwise an EXIF mirror and a user flip cancel each other out.
    """
    if no_auto_rotate:
        return Orientation(user_rotation, user_flip)

    rotation, exif_flip = calculate_rotation_and_flip(exif_code, user_rotation, additive)
    return Orientation(rotation, exif_flip != user_flip)
