"""
plate.py — rarity plate compositor.

`generate(params)` is the single entry point: a pure function from
`PlateParams` to a `PixelGrid`. Pixels are independent, so the grid is
rendered in row bands (optionally on a thread pool); every band writes a
disjoint slice of one output buffer that is frozen before it is returned.

Per-pixel order (each step sees the result of the previous one):
    1. shape alpha + outline mask
    2. plate mode: alpha <= 0 -> transparent black, nothing else
    3. raw fill (flat colour or gradient at t)
    4. mute toward black
    5. lift (multiply by 1 + amount * weight)
    6. vignette (multiply by lerp(1, 1 - strength, vignette))
    7. outline colour (derived from the styled fill, forced or custom)
    8. blend fill -> outline by clamp01(mask * strength)
    9. alpha = shape alpha

The outline is blended after lift/vignette so a derived outline always tracks
the final fill colour underneath it.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from time import perf_counter
from typing import Callable, Tuple

import numpy as np
from PIL import Image

from colorspace import interpolator_for
from params import PlateParams
from patterns import edge_vignette, gradient_t, lift_weight
from sdf import clamp01
from shapes import BaseShape, shape_for

log = logging.getLogger("rarityplate")

__all__ = ["PixelGrid", "generate", "multiply_rgb"]


# =============== Output ===============
@dataclass(frozen=True)
class PixelGrid:
    """
    (size, size, 4) float32 RGBA in [0,1], indexed [y, x].
    Row 0 is the bottom row (v grows upward); to_image() flips to top-down.
    """
    pixels: np.ndarray

    @property
    def size(self) -> int:
        return int(self.pixels.shape[0])

    def pixel(self, x: int, y: int) -> Tuple[float, float, float, float]:
        r, g, b, a = self.pixels[y, x]
        return float(r), float(g), float(b), float(a)

    def rgba8(self) -> np.ndarray:
        return np.clip(np.rint(self.pixels * 255.0), 0, 255).astype(np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.rgba8()[::-1]), "RGBA")


# =============== Helpers ===============
def multiply_rgb(rgb: np.ndarray, m) -> np.ndarray:
    """Scale RGB by m (scalar or per-pixel field) and clamp to [0,1]."""
    m = np.asarray(m, dtype=np.float64)
    if m.ndim:
        m = m[..., None]
    return clamp01(rgb * m)


def _fill_evaluator(p: PlateParams) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    """Resolve fill mode/space/direction once; returns (u, v) -> (..., 3) RGB."""
    if p.fill_mode != "gradient":
        base = np.asarray(p.base_color, dtype=np.float64)

        def flat(u, v):
            return np.broadcast_to(base, u.shape + (3,))

        return flat

    lerp = interpolator_for(p.gradient_space)
    a = np.asarray(p.gradient_color_a, dtype=np.float64)
    b = np.asarray(p.gradient_color_b, dtype=np.float64)

    def gradient(u, v):
        t = gradient_t(p.gradient_direction, u, v, p.radial_power)
        return lerp(a, b, t)

    return gradient


def _outline_evaluator(p: PlateParams) -> Callable[[np.ndarray], np.ndarray]:
    if p.outline_color_mode == "forced":
        forced = np.asarray(p.forced_outline_color, dtype=np.float64)
        return lambda styled: np.broadcast_to(forced, styled.shape)
    if p.outline_color_mode == "custom":
        custom = np.asarray(p.custom_outline_color, dtype=np.float64)
        return lambda styled: np.broadcast_to(custom, styled.shape)
    keep = 1.0 - p.outline_darken
    return lambda styled: multiply_rgb(styled, keep)


# =============== Band renderer ===============
def _render_band(
    p: PlateParams,
    shape: BaseShape,
    fill: Callable,
    outline_col: Callable,
    y0: int,
    y1: int,
) -> np.ndarray:
    size = p.size
    xs = np.arange(size, dtype=np.float64) + 0.5
    ys = np.arange(y0, y1, dtype=np.float64) + 0.5
    px, py = np.meshgrid(xs, ys)
    u = px / size
    v = py / size

    # 1) shape
    alpha, outline_mask = shape.masks(px, py)

    # 3) raw fill, 4) mute
    raw = fill(u, v)
    muted = raw * (1.0 - p.mute_to_black)

    # 5) lift
    weight = lift_weight(p.lift_mode, u, v, p.lift_falloff, p.lift_distance_scale)
    styled = multiply_rgb(muted, 1.0 + p.lift_amount * weight)

    # 6) vignette
    if p.edge_vignette > 0:
        # lerp(1, 1 - strength, vignette)
        darken = 1.0 - p.edge_vignette * edge_vignette(u, v)
        styled = multiply_rgb(styled, darken)

    # 7) outline colour, 8) blend
    outline = outline_col(styled)
    mask = clamp01(outline_mask * p.outline_strength)[..., None]
    rgb = styled + (outline - styled) * mask

    # 9) alpha
    band = np.empty((y1 - y0, size, 4), dtype=np.float32)
    band[..., :3] = rgb
    band[..., 3] = alpha

    # 2) outside the plate is clear black
    if shape.transparent_outside:
        band[alpha <= 0.0] = 0.0
    return band


# =============== Entry ===============
def generate(params: PlateParams, *, workers: int = 1, row_chunk: int = 256) -> PixelGrid:
    """
    Render one plate. Output is independent of `workers` and `row_chunk`;
    they only change how rows are split across threads.
    """
    p = params.clamped()
    size = p.size
    t0 = perf_counter()

    shape = shape_for(p)
    fill = _fill_evaluator(p)
    outline_col = _outline_evaluator(p)

    row_chunk = max(1, int(row_chunk))
    bands = [(y0, min(size, y0 + row_chunk)) for y0 in range(0, size, row_chunk)]
    out = np.empty((size, size, 4), dtype=np.float32)

    def work(span: Tuple[int, int]) -> None:
        y0, y1 = span
        out[y0:y1] = _render_band(p, shape, fill, outline_col, y0, y1)

    workers = max(1, int(workers or 1))
    if workers == 1 or len(bands) == 1:
        for span in bands:
            work(span)
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # list() re-raises the first worker exception here
            list(pool.map(work, bands))

    out.setflags(write=False)
    log.debug(
        "Rendered %dx%d %s/%s in %.1f ms (%d band(s), %d worker(s))",
        size, size, p.shape_mode, p.fill_mode, (perf_counter() - t0) * 1000, len(bands), workers,
    )
    return PixelGrid(out)


def render_image(params: PlateParams, *, workers: int = 1, row_chunk: int = 256) -> Image.Image:
    """Convenience: generate() then convert to a top-down RGBA Pillow image."""
    return generate(params, workers=workers, row_chunk=row_chunk).to_image()
