# colorspace.py — sRGB transfer, HSV and OKLab/OKLCH interpolation
# -----------------------------------------------------------------------------
# Colours are float RGB in [0,1] with a trailing channel axis: a single colour
# is shape (3,), a row band of colours is (H, W, 3). Interpolators take the two
# endpoint colours once and a `t` field of any shape, and return t.shape + (3,).
#
#   rgb   : straight per-channel lerp (can look muddy between hues)
#   hsv   : hue swept along the shortest arc, s/v linear
#   oklch : perceptual; L/C linear, hue along the shortest arc
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np

__all__ = [
    "OKLCH",
    "INTERPOLATORS",
    "srgb_to_linear",
    "linear_to_srgb",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "delta_angle",
    "wrap_radians",
    "shortest_angle_radians",
    "rgb_to_oklab",
    "oklab_to_rgb",
    "rgb_to_oklch",
    "oklch_to_rgb",
    "lerp_rgb",
    "lerp_hsv",
    "lerp_oklch",
    "interpolator_for",
]

TWO_PI = 2.0 * math.pi

# linear sRGB -> LMS
_M1 = np.array([
    [0.4122214708, 0.5363325363, 0.0514459929],
    [0.2119034982, 0.6806995451, 0.1073969566],
    [0.0883024619, 0.2817188376, 0.6299787005],
], np.float64)

# LMS' (cube-rooted) -> OKLab
_M2 = np.array([
    [0.2104542553, 0.7936177850, -0.0040720468],
    [1.9779984951, -2.4285922050, 0.4505937099],
    [0.0259040371, 0.7827717662, -0.8086757660],
], np.float64)

# OKLab -> LMS'
_M2_INV = np.array([
    [1.0, 0.3963377774, 0.2158037573],
    [1.0, -0.1055613458, -0.0638541728],
    [1.0, -0.0894841775, -1.2914855480],
], np.float64)

# LMS -> linear sRGB
_M1_INV = np.array([
    [4.0767416621, -3.3077115913, 0.2309699292],
    [-1.2684380046, 2.6097574011, -0.3413193965],
    [-0.0041960863, -0.7034186147, 1.7076147010],
], np.float64)


@dataclass(frozen=True)
class OKLCH:
    L: np.ndarray   # lightness, ~0..1
    C: np.ndarray   # chroma
    h: np.ndarray   # hue, radians in [0, 2pi)


# ---------------------------- transfer curves ----------------------------

def srgb_to_linear(c):
    c = np.asarray(c, dtype=np.float64)
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def linear_to_srgb(c):
    c = np.asarray(c, dtype=np.float64)
    hi = 1.055 * np.maximum(c, 0.0) ** (1.0 / 2.4) - 0.055
    return np.where(c <= 0.0031308, 12.92 * c, hi)


# ---------------------------------- HSV ----------------------------------

def rgb_to_hsv(rgb):
    """RGB (...,3) -> (h, s, v) arrays, h in [0,1)."""
    rgb = np.asarray(rgb, dtype=np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = np.max(rgb, axis=-1)
    mn = np.min(rgb, axis=-1)
    delta = mx - mn
    safe = np.where(delta > 0, delta, 1.0)

    h = np.where(
        mx == r, ((g - b) / safe) % 6.0,
        np.where(mx == g, (b - r) / safe + 2.0, (r - g) / safe + 4.0),
    ) / 6.0
    h = np.where(delta > 0, h, 0.0)
    s = np.where(mx > 0, delta / np.where(mx > 0, mx, 1.0), 0.0)
    return h % 1.0, s, mx


def hsv_to_rgb(h, s, v):
    h = np.asarray(h, dtype=np.float64) % 1.0
    s = np.asarray(s, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    h6 = h * 6.0
    sector = np.floor(h6).astype(np.int64) % 6
    f = h6 - np.floor(h6)
    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))

    r = np.choose(sector, [v, q, p, p, t, v])
    g = np.choose(sector, [t, v, v, q, p, p])
    b = np.choose(sector, [p, p, t, v, v, q])
    return np.stack([r, g, b], axis=-1)


def delta_angle(a_deg, b_deg):
    """Shortest signed difference b - a in degrees, in (-180, 180]."""
    d = (np.asarray(b_deg, dtype=np.float64) - a_deg) % 360.0
    return np.where(d > 180.0, d - 360.0, d)


# ---------------------------------- OKLab --------------------------------

def wrap_radians(r):
    return np.asarray(r, dtype=np.float64) % TWO_PI


def shortest_angle_radians(a, b):
    """Signed delta from a to b mapped into (-pi, pi]."""
    d = (np.asarray(b, dtype=np.float64) - a) % TWO_PI
    return np.where(d > math.pi, d - TWO_PI, d)


def rgb_to_oklab(rgb):
    lin = srgb_to_linear(rgb)
    lms = lin @ _M1.T
    return np.cbrt(lms) @ _M2.T


def oklab_to_rgb(lab):
    """OKLab (...,3) -> sRGB, clamped to [0,1]."""
    lms_ = np.asarray(lab, dtype=np.float64) @ _M2_INV.T
    lin = (lms_ ** 3) @ _M1_INV.T
    return np.clip(linear_to_srgb(lin), 0.0, 1.0)


def rgb_to_oklch(rgb) -> OKLCH:
    lab = rgb_to_oklab(rgb)
    a, b = lab[..., 1], lab[..., 2]
    return OKLCH(L=lab[..., 0], C=np.hypot(a, b), h=wrap_radians(np.arctan2(b, a)))


def oklch_to_rgb(c: OKLCH):
    h = np.asarray(c.h, dtype=np.float64)
    L, a, b = np.broadcast_arrays(
        np.asarray(c.L, dtype=np.float64), c.C * np.cos(h), c.C * np.sin(h)
    )
    return oklab_to_rgb(np.stack([L, a, b], axis=-1))


# ------------------------------ interpolators ----------------------------

def _lerp(a, b, t):
    return a + (b - a) * t


def lerp_rgb(a, b, t):
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)[..., None]
    return _lerp(a, b, t)


def lerp_hsv(a, b, t):
    ah, as_, av = rgb_to_hsv(a)
    bh, bs, bv = rgb_to_hsv(b)
    t = np.asarray(t, dtype=np.float64)

    dh = delta_angle(ah * 360.0, bh * 360.0) / 360.0
    h = (ah + dh * t) % 1.0
    return hsv_to_rgb(h, _lerp(as_, bs, t), _lerp(av, bv, t))


def lerp_oklch(a, b, t):
    ca = rgb_to_oklch(a)
    cb = rgb_to_oklch(b)
    t = np.asarray(t, dtype=np.float64)

    dh = shortest_angle_radians(ca.h, cb.h)
    mixed = OKLCH(
        L=_lerp(ca.L, cb.L, t),
        C=_lerp(ca.C, cb.C, t),
        h=wrap_radians(ca.h + dh * t),
    )
    return oklch_to_rgb(mixed)


INTERPOLATORS: Dict[str, Callable] = {
    "rgb": lerp_rgb,
    "hsv": lerp_hsv,
    "oklch": lerp_oklch,
}


def interpolator_for(space: str) -> Callable:
    # unknown spaces behave as plain RGB
    return INTERPOLATORS.get(str(space).strip().lower(), lerp_rgb)
