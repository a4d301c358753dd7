"""numpy pixel algorithms backing the Pillow engine.

Arrays are HxWxC (C = 1..4) unless noted. Functions never modify their
inputs.
"""

import math
from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..common.types import BlendMode, Extend

FloatArray = NDArray[np.float64]
ByteArray = NDArray[np.uint8]

# Gaussian kernels stop where the amplitude falls under this value
DEFAULT_MIN_AMPL = 0.2

# Sharpen parameters are expressed on a 0-100 lightness scale
LIGHTNESS_SCALE = 255.0 / 100.0


# ─────────────────────────────────────────────────────────────
# Convolution
# ─────────────────────────────────────────────────────────────


def gaussian_kernel(sigma: float, min_ampl: float = 0.0) -> FloatArray:
    """Normalised 1D Gaussian; the radius is where the curve drops below min_ampl."""
    if min_ampl <= 0:
        min_ampl = DEFAULT_MIN_AMPL
    radius = max(1, math.ceil(sigma * math.sqrt(-2.0 * math.log(min_ampl))))
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x**2) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def convolve_separable(data: FloatArray, kernel: FloatArray) -> FloatArray:
    """Convolve the first two axes with `kernel`, replicating edges."""
    rows = ndimage.convolve1d(data, kernel, axis=0, mode="nearest")
    return ndimage.convolve1d(rows, kernel, axis=1, mode="nearest")


def gaussian_blur(data: ByteArray, sigma: float, min_ampl: float) -> ByteArray:
    kernel = gaussian_kernel(sigma, min_ampl)
    blurred = convolve_separable(data.astype(np.float64), kernel)
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def sharpen_lightness(
    lightness: ByteArray,
    sigma: float,
    x1: float,
    y2: float,
    y3: float,
    m1: float,
    m2: float,
) -> ByteArray:
    """Unsharp mask on a single 2D lightness channel.

    Differences up to x1 are treated as flat and scaled by m1, larger
    ones as jaggy and scaled by m2; the result is limited to +y2/-y3.
    """
    values = lightness.astype(np.float64)
    blurred = convolve_separable(values, gaussian_kernel(sigma))
    detail = values - blurred

    gain = np.where(np.abs(detail) <= x1 * LIGHTNESS_SCALE, m1, m2)
    response = np.clip(detail * gain, -y3 * LIGHTNESS_SCALE, y2 * LIGHTNESS_SCALE)
    return np.clip(np.rint(values + response), 0, 255).astype(np.uint8)


def gamma_lut(exponent: float) -> list[int]:
    """max * (in / max) ** (1 / exponent) for 8-bit values."""
    return [int(round(255.0 * (i / 255.0) ** (1.0 / exponent))) for i in range(256)]


# ─────────────────────────────────────────────────────────────
# Analysis
# ─────────────────────────────────────────────────────────────


def trim_box(
    rgb: ByteArray, background: tuple[int, int, int], threshold: float
) -> tuple[int, int, int, int] | None:
    """(left, top, width, height) of pixels further than threshold from background.

    Returns None when every pixel is background.
    """
    distance = np.abs(rgb[..., :3].astype(np.int16) - np.asarray(background, dtype=np.int16))
    mask = distance.max(axis=2) > threshold
    if not mask.any():
        return None

    rows = np.flatnonzero(mask.any(axis=1))
    cols = np.flatnonzero(mask.any(axis=0))
    return (
        int(cols[0]),
        int(rows[0]),
        int(cols[-1] - cols[0] + 1),
        int(rows[-1] - rows[0] + 1),
    )


def smart_crop_window(grey: FloatArray, width: int, height: int) -> tuple[int, int]:
    """(left, top) of the width x height window holding the most edge energy.

    Flat images have no preferred window and are cropped from the centre.
    """
    in_height, in_width = grey.shape
    centre = ((in_width - width) // 2, (in_height - height) // 2)
    if in_width < 2 or in_height < 2:
        return centre

    gy, gx = np.gradient(grey)
    energy = np.hypot(gx, gy)

    integral = np.pad(energy.cumsum(axis=0).cumsum(axis=1), ((1, 0), (1, 0)))
    sums = (
        integral[height:, width:]
        - integral[:-height, width:]
        - integral[height:, :-width]
        + integral[:-height, :-width]
    )
    if np.ptp(sums) <= 1e-9:
        return centre

    top, left = np.unravel_index(int(np.argmax(sums)), sums.shape)
    return int(left), int(top)


# ─────────────────────────────────────────────────────────────
# Embed
# ─────────────────────────────────────────────────────────────

_PAD_MODES: dict[Extend, str] = {
    Extend.COPY: "edge",
    Extend.REPEAT: "wrap",
    Extend.MIRROR: "symmetric",
}


def embed(
    data: ByteArray,
    left: int,
    top: int,
    width: int,
    height: int,
    extend: Extend,
    fill: tuple[int, ...],
) -> ByteArray:
    """Place `data` at (left, top) on a width x height canvas.

    Negative offsets or a smaller canvas crop the source first. The rest
    of the canvas is filled with `fill` or by replicating the source
    according to `extend`.
    """
    in_height, in_width = data.shape[:2]

    x0, y0 = max(0, -left), max(0, -top)
    x1, y1 = min(in_width, width - left), min(in_height, height - top)
    pad_mode = _PAD_MODES.get(extend)

    canvas = np.empty((height, width, *data.shape[2:]), dtype=data.dtype)
    canvas[...] = np.asarray(fill, dtype=data.dtype).reshape((1, 1, *data.shape[2:]))
    if x1 <= x0 or y1 <= y0:
        return canvas

    visible = data[y0:y1, x0:x1]
    pad_top, pad_left = max(0, top), max(0, left)
    pad_bottom = height - pad_top - visible.shape[0]
    pad_right = width - pad_left - visible.shape[1]

    if pad_mode is not None:
        extra = [(0, 0)] * (data.ndim - 2)
        return np.pad(visible, [(pad_top, pad_bottom), (pad_left, pad_right), *extra], mode=pad_mode)

    canvas[pad_top : pad_top + visible.shape[0], pad_left : pad_left + visible.shape[1]] = visible
    return canvas


# ─────────────────────────────────────────────────────────────
# Blending
# ─────────────────────────────────────────────────────────────

BlendFunc = Callable[[FloatArray, FloatArray], FloatArray]


def _soft_light(b: FloatArray, s: FloatArray) -> FloatArray:
    d = np.where(b <= 0.25, ((16 * b - 12) * b + 4) * b, np.sqrt(b))
    return np.where(s <= 0.5, b - (1 - 2 * s) * b * (1 - b), b + (2 * s - 1) * (d - b))


def _hard_light(b: FloatArray, s: FloatArray) -> FloatArray:
    return np.where(s <= 0.5, 2 * b * s, 1 - 2 * (1 - b) * (1 - s))


def _dodge(b: FloatArray, s: FloatArray) -> FloatArray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(s >= 1, 1.0, np.minimum(1.0, b / (1 - s)))


def _burn(b: FloatArray, s: FloatArray) -> FloatArray:
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(s <= 0, 0.0, 1 - np.minimum(1.0, (1 - b) / s))


# Separable blend functions B(backdrop, source)
SEPARABLE_BLENDS: dict[BlendMode, BlendFunc] = {
    BlendMode.MULTIPLY: lambda b, s: b * s,
    BlendMode.SCREEN: lambda b, s: b + s - b * s,
    BlendMode.OVERLAY: lambda b, s: _hard_light(s, b),
    BlendMode.DARKEN: np.minimum,
    BlendMode.LIGHTEN: np.maximum,
    BlendMode.DODGE: _dodge,
    BlendMode.BURN: _burn,
    BlendMode.HARD: _hard_light,
    BlendMode.SOFT: _soft_light,
    BlendMode.DIFFERENCE: lambda b, s: np.abs(b - s),
    BlendMode.EXCLUSION: lambda b, s: b + s - 2 * b * s,
}

# Porter-Duff (Fa, Fb) factors as functions of (alpha_source, alpha_backdrop)
PORTER_DUFF: dict[BlendMode, Callable[[FloatArray, FloatArray], tuple[FloatArray, FloatArray]]] = {
    BlendMode.CLEAR: lambda a_s, a_b: (np.zeros_like(a_s), np.zeros_like(a_b)),
    BlendMode.SOURCE: lambda a_s, a_b: (np.ones_like(a_s), np.zeros_like(a_b)),
    BlendMode.OVER: lambda a_s, a_b: (np.ones_like(a_s), 1 - a_s),
    BlendMode.IN: lambda a_s, a_b: (a_b, np.zeros_like(a_b)),
    BlendMode.OUT: lambda a_s, a_b: (1 - a_b, np.zeros_like(a_b)),
    BlendMode.ATOP: lambda a_s, a_b: (a_b, 1 - a_s),
    BlendMode.DEST: lambda a_s, a_b: (np.zeros_like(a_s), np.ones_like(a_b)),
    BlendMode.DEST_OVER: lambda a_s, a_b: (1 - a_b, np.ones_like(a_b)),
    BlendMode.DEST_IN: lambda a_s, a_b: (np.zeros_like(a_s), a_s),
    BlendMode.DEST_OUT: lambda a_s, a_b: (np.zeros_like(a_s), 1 - a_s),
    BlendMode.DEST_ATOP: lambda a_s, a_b: (1 - a_b, a_s),
    BlendMode.XOR: lambda a_s, a_b: (1 - a_b, 1 - a_s),
    BlendMode.ADD: lambda a_s, a_b: (np.ones_like(a_s), np.ones_like(a_b)),
}


def _blend_region(backdrop: FloatArray, source: FloatArray, mode: BlendMode) -> FloatArray:
    """Composite two RGBA float (0..1) arrays of identical shape."""
    cb, a_b = backdrop[..., :3], backdrop[..., 3:4]
    cs, a_s = source[..., :3], source[..., 3:4]

    if mode in SEPARABLE_BLENDS:
        mixed = SEPARABLE_BLENDS[mode](cb, cs)
        premultiplied = a_s * (1 - a_b) * cs + a_s * a_b * mixed + (1 - a_s) * a_b * cb
        alpha = a_s + a_b * (1 - a_s)
    elif mode == BlendMode.SATURATE:
        with np.errstate(divide="ignore", invalid="ignore"):
            fa = np.where(a_s > 0, np.minimum(1.0, (1 - a_b) / a_s), 0.0)
        premultiplied = a_s * fa * cs + a_b * cb
        alpha = a_s * fa + a_b
    else:
        fa, fb = PORTER_DUFF[mode](a_s, a_b)
        premultiplied = a_s * fa * cs + a_b * fb * cb
        alpha = a_s * fa + a_b * fb

    alpha = np.clip(alpha, 0.0, 1.0)
    with np.errstate(divide="ignore", invalid="ignore"):
        colour = np.where(alpha > 0, premultiplied / np.maximum(alpha, 1e-12), 0.0)
    return np.concatenate([np.clip(colour, 0.0, 1.0), alpha], axis=-1)


def composite(
    base: ByteArray, mark: ByteArray, left: int, top: int, opacity: float, mode: BlendMode
) -> ByteArray:
    """Blend RGBA `mark` onto RGBA `base` at (left, top); parts outside are clipped."""
    height, width = base.shape[:2]
    mark_height, mark_width = mark.shape[:2]

    x0, y0 = max(0, left), max(0, top)
    x1, y1 = min(width, left + mark_width), min(height, top + mark_height)
    if x1 <= x0 or y1 <= y0:
        return base.copy()

    backdrop = base[y0:y1, x0:x1].astype(np.float64) / 255.0
    source = mark[y0 - top : y1 - top, x0 - left : x1 - left].astype(np.float64) / 255.0
    source[..., 3] *= opacity

    out = base.copy()
    out[y0:y1, x0:x1] = np.rint(_blend_region(backdrop, source, mode) * 255.0).astype(np.uint8)
    return out
