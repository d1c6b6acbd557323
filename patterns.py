# patterns.py — gradient parameter, lift weights and edge vignette over (u, v)
# -----------------------------------------------------------------------------
# (u, v) are normalised pixel-centre coordinates in [0,1]. v grows upward, so
# "top" anchors sit at v = 1. Everything returns a dimensionless field that
# the compositor multiplies into colours; none of these are colours.
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Callable, Dict, Tuple

import numpy as np

from sdf import clamp01

__all__ = [
    "GRADIENT_DIRECTIONS",
    "LIFT_ANCHORS",
    "LIFT_MODES",
    "DEFAULT_DIRECTION",
    "DEFAULT_LIFT_MODE",
    "gradient_t",
    "hotspot_weight",
    "edges_weight",
    "lift_weight",
    "edge_vignette",
]

# centre-to-corner distance of the unit square
CORNER_DIST = 0.7071
VIGNETTE_CURVE = 1.4

DEFAULT_DIRECTION = "top_to_bottom"
DEFAULT_LIFT_MODE = "centre"


def _radial(u, v, power: float):
    r = clamp01(np.hypot(u - 0.5, v - 0.5) / CORNER_DIST)
    return r ** max(0.01, power)


GRADIENT_DIRECTIONS: Dict[str, Callable] = {
    "top_to_bottom":            lambda u, v, p: v,
    "bottom_to_top":            lambda u, v, p: 1.0 - v,
    "left_to_right":            lambda u, v, p: u,
    "right_to_left":            lambda u, v, p: 1.0 - u,
    "top_left_to_bottom_right": lambda u, v, p: (u + v) * 0.5,
    "bottom_right_to_top_left": lambda u, v, p: 1.0 - (u + v) * 0.5,
    "top_right_to_bottom_left": lambda u, v, p: ((1.0 - u) + v) * 0.5,
    "bottom_left_to_top_right": lambda u, v, p: 1.0 - ((1.0 - u) + v) * 0.5,
    "radial":                   _radial,
}


def gradient_t(direction: str, u, v, radial_power: float = 1.0):
    """Gradient position in [0,1]; unknown directions behave as top_to_bottom."""
    fn = GRADIENT_DIRECTIONS.get(direction, GRADIENT_DIRECTIONS[DEFAULT_DIRECTION])
    t = fn(np.asarray(u, dtype=np.float64), np.asarray(v, dtype=np.float64), radial_power)
    return clamp01(np.broadcast_to(t, np.broadcast(u, v).shape))


# ------------------------------- lift ---------------------------------

LIFT_ANCHORS: Dict[str, Tuple[float, float]] = {
    "centre":       (0.5, 0.5),
    "mid_top":      (0.5, 1.0),
    "top_right":    (1.0, 1.0),
    "mid_right":    (1.0, 0.5),
    "bottom_right": (1.0, 0.0),
    "bottom_mid":   (0.5, 0.0),
    "bottom_left":  (0.0, 0.0),
    "mid_left":     (0.0, 0.5),
    "top_left":     (0.0, 1.0),
}

LIFT_MODES = ("centre", "edges") + tuple(k for k in LIFT_ANCHORS if k != "centre")


def hotspot_weight(u, v, ax: float, ay: float, falloff: float, distance_scale: float = 1.0):
    """(1 - d / (0.7071 * scale)) ** falloff, with d the distance to the anchor."""
    max_dist = CORNER_DIST * max(0.01, distance_scale)
    d = np.hypot(np.asarray(u, dtype=np.float64) - ax, np.asarray(v, dtype=np.float64) - ay)
    return (1.0 - clamp01(d / max_dist)) ** max(0.01, falloff)


def edges_weight(u, v, falloff: float, distance_scale: float = 1.0):
    """1 on the border, 0 at half a side (scaled) inward."""
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    d_edge = np.minimum(np.minimum(u, 1.0 - u), np.minimum(v, 1.0 - v))
    t = 1.0 - clamp01(d_edge / (0.5 * max(0.01, distance_scale)))
    return t ** max(0.01, falloff)


def lift_weight(mode: str, u, v, falloff: float, distance_scale: float = 1.0):
    if mode == "edges":
        return edges_weight(u, v, falloff, distance_scale)
    ax, ay = LIFT_ANCHORS.get(mode, LIFT_ANCHORS[DEFAULT_LIFT_MODE])
    return hotspot_weight(u, v, ax, ay, falloff, distance_scale)


def edge_vignette(u, v):
    """0 at the centre rising to 1 at the corners."""
    r = clamp01(np.hypot(np.asarray(u, dtype=np.float64) - 0.5, np.asarray(v, dtype=np.float64) - 0.5) / CORNER_DIST)
    return r ** VIGNETTE_CURVE
