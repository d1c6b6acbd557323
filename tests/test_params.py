import dataclasses
import logging

import pytest

from palettes import get_tier
from params import ImportSettings, PlateParams, get_params


def test_defaults():
    p = PlateParams()
    assert p.size == 210
    assert p.shape_mode == "rounded_plate"
    assert p.gradient_space == "oklch"
    assert p.lift_mode == "centre"
    assert p.clamped() == p


def test_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        PlateParams().size = 12


def test_clamped_ranges():
    p = PlateParams(
        size=5,
        corner_radius=-3,
        outline_thickness=-1,
        edge_softness=0.0,
        inner_outline_softness=0.1,
        radial_power=0.0,
        mute_to_black=1.5,
        outline_darken=2.0,
        outline_strength=-1.0,
        edge_vignette=4.0,
        lift_amount=0.9,
        lift_falloff=0.0,
        lift_distance_scale=-2.0,
        base_color=(1.5, -0.2, 0.5),
    ).clamped()
    assert p.size == 16
    assert p.corner_radius == 0.0
    assert p.outline_thickness == 0.0
    assert p.edge_softness == 0.5
    assert p.inner_outline_softness == 0.5
    assert p.radial_power == 0.01
    assert p.mute_to_black == 0.9
    assert p.outline_darken == 1.0
    assert p.outline_strength == 0.0
    assert p.edge_vignette == 1.0
    assert p.lift_amount == 0.6
    assert p.lift_falloff == 0.01
    assert p.lift_distance_scale == 0.01
    assert p.base_color == (1.0, 0.0, 0.5)


def test_size_upper_bound():
    assert PlateParams(size=10_000).clamped().size == 2048


def test_unknown_mode_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="rarityplate"):
        p = PlateParams(gradient_direction="sideways", lift_mode="nowhere", shape_mode="Full_Bleed").clamped()
    assert p.gradient_direction == "top_to_bottom"
    assert p.lift_mode == "centre"
    # case is normalised, not treated as unknown
    assert p.shape_mode == "full_bleed"
    assert "sideways" in caplog.text
    assert "nowhere" in caplog.text


def test_from_extras_coerces_values(caplog):
    with caplog.at_level(logging.INFO, logger="rarityplate"):
        p = PlateParams.from_extras(
            {
                "size": "256",
                "base_color": "#ff0000",
                "gradient-color-a": "1,0.5,0",
                "lift_mode": "TOP_LEFT",
                "mute_to_black": 0,
                "bogus": 1,
            }
        )
    assert p.size == 256
    assert p.base_color == (1.0, 0.0, 0.0)
    assert p.gradient_color_a == (1.0, 0.5, 0.0)
    assert p.lift_mode == "top_left"
    assert p.mute_to_black == 0.0
    assert "bogus" in caplog.text


def test_from_extras_keeps_base():
    base = PlateParams(size=64, corner_radius=4)
    p = PlateParams.from_extras({"outline_thickness": 6}, base=base)
    assert (p.size, p.corner_radius, p.outline_thickness) == (64, 4, 6.0)


def test_from_extras_rejects_bad_colour():
    with pytest.raises(ValueError):
        PlateParams.from_extras({"base_color": "#12"})


def test_with_tier_single_and_gradient():
    rare = PlateParams(fill_mode="gradient").with_tier(get_tier("Rare"))
    assert rare.fill_mode == "single"
    assert rare.base_color == get_tier("Rare").color_a

    mythic = PlateParams(corner_radius=5).with_tier(get_tier("Mythic"))
    assert mythic.fill_mode == "gradient"
    assert mythic.gradient_color_a == (0.95, 0.78, 0.22)
    assert mythic.gradient_color_b == (0.40, 0.22, 0.06)
    assert mythic.corner_radius == 5


def test_get_params_covers_every_field():
    table = {e["name"]: e for e in get_params()}
    assert set(table) == {f.name for f in dataclasses.fields(PlateParams)}
    assert table["size"]["min"] == 16 and table["size"]["max"] == 2048
    assert table["mute_to_black"]["max"] == 0.9
    assert "radial" in table["gradient_direction"]["choices"]
    assert "edges" in table["lift_mode"]["choices"]
    assert table["base_color"]["type"] == "color"
    assert all(e["help"] for e in table.values())


def test_import_settings():
    s = ImportSettings()
    assert s.pixels_per_unit == 100.0
    assert s.disable_mipmaps and s.clamp_wrap_mode
    assert s.file_name == "Rarity_Background"

    s = ImportSettings.from_extras({"pixels_per_unit": 0, "disable_mipmaps": "false", "size": 64})
    assert s.pixels_per_unit == 1.0
    assert s.disable_mipmaps is False
    assert s.to_dict()["clamp_wrap_mode"] is True


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_use_defaults(bad, caplog):
    with caplog.at_level(logging.WARNING, logger="rarityplate"):
        p = PlateParams(size=bad, corner_radius=bad, lift_amount=bad, mute_to_black=bad).clamped()
    assert p.size == 210
    assert p.corner_radius == 18.0
    assert p.lift_amount == 0.18
    assert p.mute_to_black == 0.62
    assert "Non-finite" in caplog.text


def test_non_finite_colour_uses_default():
    p = PlateParams(base_color=(0.2, float("nan"), 0.4), gradient_color_b=(float("inf"), 0.0, 0.0)).clamped()
    assert p.base_color == (0.25, 0.45, 0.55)
    assert p.gradient_color_b == (0.20, 0.20, 0.20)


def test_non_finite_extras_survive_to_clamp():
    p = PlateParams.from_extras({"size": "nan", "lift_amount": "inf"}).clamped()
    assert p.size == 210
    assert p.lift_amount == 0.18


def test_clamped_is_idempotent_and_quiet(caplog):
    once = PlateParams(lift_mode="nowhere", edge_vignette=float("nan")).clamped()
    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="rarityplate"):
        assert once.clamped() == once
    assert caplog.text == ""


def test_import_settings_non_finite_ppu():
    assert ImportSettings(pixels_per_unit=float("inf")).clamped().pixels_per_unit == 100.0
    assert ImportSettings(pixels_per_unit=float("nan")).clamped().pixels_per_unit == 100.0
