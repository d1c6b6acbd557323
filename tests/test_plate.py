import dataclasses
import itertools

import numpy as np
import pytest
from PIL import Image

from params import PlateParams
from patterns import GRADIENT_DIRECTIONS, LIFT_MODES
from plate import PixelGrid, generate, multiply_rgb, render_image
from sdf import rounded_rect_sdf


def _rgb(grid: PixelGrid, x: int, y: int) -> np.ndarray:
    return np.asarray(grid.pixel(x, y)[:3])


@pytest.mark.parametrize(
    "shape_mode,space,direction",
    list(itertools.product(["rounded_plate", "full_bleed"], ["rgb", "hsv", "oklch"], ["top_to_bottom", "radial"])),
)
def test_output_is_bounded_rgba(shape_mode, space, direction):
    p = PlateParams(
        size=40,
        shape_mode=shape_mode,
        fill_mode="gradient",
        gradient_color_a=(0.95, 0.10, 0.20),
        gradient_color_b=(0.10, 0.90, 0.95),
        gradient_space=space,
        gradient_direction=direction,
        lift_amount=0.6,
        edge_vignette=1.0,
    )
    grid = generate(p)
    assert grid.pixels.shape == (40, 40, 4)
    assert grid.pixels.dtype == np.float32
    assert np.all((grid.pixels >= 0.0) & (grid.pixels <= 1.0))


@pytest.mark.parametrize("lift_mode", LIFT_MODES)
def test_every_lift_mode_renders(lift_mode):
    grid = generate(PlateParams(size=24, lift_mode=lift_mode, lift_amount=0.6))
    assert np.all((grid.pixels >= 0.0) & (grid.pixels <= 1.0))


def test_end_to_end_flat_plate(flat_params):
    grid = generate(flat_params)

    centre = grid.pixel(32, 32)
    assert centre[:3] == pytest.approx((0.5, 0.5, 0.5), abs=1e-6)
    assert centre[3] == pytest.approx(1.0)

    # corner pixel lies outside the rounded corner
    assert grid.pixel(0, 0) == (0.0, 0.0, 0.0, 0.0)

    edge = grid.pixel(32, 1)
    assert edge[3] == pytest.approx(1.0)
    assert max(edge[:3]) < 0.5 - 0.05


def test_transparent_pixels_are_black_outside_the_sdf():
    p = PlateParams(size=48, corner_radius=14, edge_softness=1.5)
    grid = generate(p)
    ys, xs = np.mgrid[0:48, 0:48]
    dist = rounded_rect_sdf(xs + 0.5, ys + 0.5, 48, 48, 14)
    outside = dist > 1.5
    assert outside.any()
    assert np.all(grid.pixels[outside] == 0.0)
    assert np.all(grid.pixels[dist < -1.5][:, 3] == 1.0)


def test_full_bleed_is_opaque_with_inner_band(flat_params):
    p = dataclasses.replace(flat_params, shape_mode="full_bleed", outline_thickness=4, inner_outline_radius=0)
    grid = generate(p)
    assert np.all(grid.pixels[..., 3] == 1.0)

    band = _rgb(grid, 2, 32)
    inside = _rgb(grid, 10, 32)
    assert np.allclose(inside, 0.5, atol=1e-6)
    assert np.allclose(band, 0.5 * (1.0 - p.outline_darken), atol=1e-6)


def test_full_bleed_without_outline_is_uniform(flat_params):
    p = dataclasses.replace(flat_params, shape_mode="full_bleed", outline_thickness=0)
    grid = generate(p)
    assert np.allclose(grid.pixels[..., :3], 0.5, atol=1e-6)


def _styled_params(**kw):
    base = dict(
        size=64,
        corner_radius=8,
        outline_thickness=4,
        fill_mode="gradient",
        gradient_color_a=(0.9, 0.6, 0.2),
        gradient_color_b=(0.2, 0.3, 0.7),
        gradient_space="oklch",
        lift_mode="top_left",
        lift_amount=0.3,
        edge_vignette=0.2,
        outline_darken=0.3,
    )
    base.update(kw)
    return PlateParams(**base)


# pixels where the outline mask is exactly 1 (4px band, fully inside the AA edge)
_BAND_PIXELS = [(32, 2), (2, 32), (61, 32), (32, 61)]


@pytest.mark.parametrize("x,y", _BAND_PIXELS)
def test_derived_outline_tracks_final_fill(x, y):
    with_outline = generate(_styled_params(outline_strength=3.0))
    without = generate(_styled_params(outline_thickness=0))
    assert np.allclose(_rgb(with_outline, x, y), 0.7 * _rgb(without, x, y), atol=1e-5)


@pytest.mark.parametrize("x,y", _BAND_PIXELS)
def test_forced_and_custom_outline_colours(x, y):
    forced = generate(_styled_params(outline_color_mode="forced"))
    assert np.allclose(_rgb(forced, x, y), (0.04, 0.04, 0.04), atol=1e-6)

    custom = generate(_styled_params(outline_color_mode="custom", custom_outline_color=(1.0, 0.0, 0.0)))
    assert np.allclose(_rgb(custom, x, y), (1.0, 0.0, 0.0), atol=1e-6)


def test_zero_strength_hides_outline():
    a = generate(_styled_params(outline_strength=0.0))
    b = generate(_styled_params(outline_thickness=0))
    assert np.array_equal(a.pixels, b.pixels)


def test_mute_scales_fill(flat_params):
    grid = generate(dataclasses.replace(flat_params, mute_to_black=0.5))
    assert np.allclose(_rgb(grid, 32, 32), 0.25, atol=1e-6)


def test_lift_brightens_towards_anchor(flat_params):
    p = dataclasses.replace(flat_params, lift_mode="mid_top", lift_amount=0.4)
    grid = generate(p)
    # row 0 is the bottom, so the top of the plate is the last rows
    assert _rgb(grid, 32, 55)[0] > _rgb(grid, 32, 8)[0]


def test_vignette_darkens_corners_not_centre(flat_params):
    p = dataclasses.replace(flat_params, shape_mode="full_bleed", outline_thickness=0, edge_vignette=0.5)
    grid = generate(p)
    assert _rgb(grid, 32, 32)[0] == pytest.approx(0.5, abs=1e-3)
    assert _rgb(grid, 0, 0)[0] < 0.3


def test_workers_and_row_chunk_do_not_change_output():
    p = _styled_params(size=96, lift_mode="edges")
    serial = generate(p, row_chunk=7)
    threaded = generate(p, workers=4, row_chunk=7)
    assert np.array_equal(serial.pixels, threaded.pixels)

    whole = generate(p)
    one_row = generate(p, workers=3, row_chunk=1)
    assert np.allclose(whole.pixels, serial.pixels, atol=1e-6)
    assert np.allclose(whole.pixels, one_row.pixels, atol=1e-6)


def test_output_is_read_only(flat_params):
    grid = generate(flat_params)
    assert not grid.pixels.flags.writeable
    with pytest.raises(ValueError):
        grid.pixels[0, 0, 0] = 1.0


def test_params_are_clamped_before_render():
    grid = generate(PlateParams(size=3, mute_to_black=7.0, gradient_direction="nope"))
    assert grid.size == 16


def test_to_image_flips_rows():
    grid = generate(_styled_params(size=32, lift_mode="mid_top"))
    img = grid.to_image()
    assert img.mode == "RGBA"
    assert img.size == (32, 32)
    arr = np.asarray(img)
    assert np.array_equal(arr[0], grid.rgba8()[-1])
    assert np.array_equal(arr[-1], grid.rgba8()[0])


def test_render_image():
    img = render_image(PlateParams(size=20))
    assert isinstance(img, Image.Image)
    assert img.size == (20, 20)


def test_multiply_rgb_clamps():
    rgb = np.array([[0.5, 0.8, 0.1]])
    assert np.allclose(multiply_rgb(rgb, 2.0), [[1.0, 1.0, 0.2]])
    assert np.allclose(multiply_rgb(rgb, np.array([0.5])), [[0.25, 0.4, 0.05]])


@pytest.mark.parametrize(
    "field",
    ["corner_radius", "outline_thickness", "edge_softness", "lift_amount", "lift_falloff", "edge_vignette", "radial_power"],
)
@pytest.mark.parametrize("bad", [float("nan"), float("inf")])
def test_non_finite_params_still_render_bounded(field, bad):
    p = dataclasses.replace(_styled_params(size=16, gradient_direction="radial"), **{field: bad})
    grid = generate(p)
    assert np.all(np.isfinite(grid.pixels))
    assert np.all((grid.pixels >= 0.0) & (grid.pixels <= 1.0))
