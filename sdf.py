# sdf.py — rounded-rectangle signed distance + smoothstep
# -----------------------------------------------------------------------------
# Every function here works on plain floats as well as numpy arrays, so the
# compositor can feed it whole row bands of pixel centres at once.
#
# Sign convention: negative inside, 0 on the boundary, positive outside.
# -----------------------------------------------------------------------------

from __future__ import annotations

import numpy as np

__all__ = ["rounded_rect_sdf", "rounded_rect_sdf_inset", "smoothstep", "clamp01"]


def clamp01(x):
    return np.clip(x, 0.0, 1.0)


def rounded_rect_sdf(px, py, width: float, height: float, radius: float):
    """Signed distance to an axis-aligned rounded box centred on (width/2, height/2)."""
    cx = width * 0.5
    cy = height * 0.5
    hx = cx - radius
    hy = cy - radius

    dx = np.abs(px - cx) - hx
    dy = np.abs(py - cy) - hy

    outside = np.hypot(np.maximum(dx, 0.0), np.maximum(dy, 0.0))
    inside = np.minimum(np.maximum(dx, dy), 0.0)
    return outside + inside - radius


def rounded_rect_sdf_inset(px, py, width: float, height: float, inset: float, radius: float):
    """Same SDF for a rectangle shrunk by `inset` on every side of the canvas."""
    w = max(1.0, width - inset * 2.0)
    h = max(1.0, height - inset * 2.0)
    return rounded_rect_sdf(px - inset, py - inset, w, h, radius)


def smoothstep(edge0: float, edge1: float, x):
    """
    Cubic Hermite step from edge0 -> edge1 (either order).
    Coincident edges give 0 everywhere instead of dividing by zero.
    """
    if edge0 == edge1:
        return np.zeros_like(np.asarray(x, dtype=np.float64))
    t = clamp01((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0))
    return t * t * (3.0 - 2.0 * t)
