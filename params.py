"""
params.py — resolved generation parameters for a rarity plate.

`PlateParams` is the only input the compositor reads. It is frozen; callers
derive variants with `dataclasses.replace` (batch tiers do exactly that), so
two concurrent renders can never observe each other's edits.

All knobs are clamped by `PlateParams.clamped()` before use. Mode names that
are not recognised fall back to the field default with a warning, so
generation stays total over any input.

`get_params()` exposes the knob table (type/default/range/choices/help) for
the CLI `params` command.
"""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from patterns import DEFAULT_DIRECTION, DEFAULT_LIFT_MODE, GRADIENT_DIRECTIONS, LIFT_MODES
from palettes import Color, Tier, parse_color

log = logging.getLogger("rarityplate")

SHAPE_MODES = ("rounded_plate", "full_bleed")
FILL_MODES = ("single", "gradient")
GRADIENT_SPACES = ("rgb", "hsv", "oklch")
OUTLINE_COLOR_MODES = ("derived", "forced", "custom")

MIN_SIZE, MAX_SIZE = 16, 2048

# name -> (min, max); None = unbounded on that side
_RANGES: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "corner_radius": (0.0, None),
    "outline_thickness": (0.0, None),
    "edge_softness": (0.5, None),
    "inner_outline_radius": (0.0, None),
    "inner_outline_softness": (0.5, None),
    "radial_power": (0.01, None),
    "mute_to_black": (0.0, 0.9),
    "outline_darken": (0.0, 1.0),
    "outline_strength": (0.0, None),
    "edge_vignette": (0.0, 1.0),
    "lift_amount": (0.0, 0.6),
    "lift_falloff": (0.01, None),
    "lift_distance_scale": (0.01, None),
}

_CHOICES: Dict[str, Tuple[str, ...]] = {
    "shape_mode": SHAPE_MODES,
    "fill_mode": FILL_MODES,
    "gradient_space": GRADIENT_SPACES,
    "gradient_direction": tuple(GRADIENT_DIRECTIONS),
    "outline_color_mode": OUTLINE_COLOR_MODES,
    "lift_mode": LIFT_MODES,
}

COLOR_FIELDS = (
    "base_color",
    "gradient_color_a",
    "gradient_color_b",
    "forced_outline_color",
    "custom_outline_color",
)

_HELP: Dict[str, str] = {
    "size": "Square output edge in pixels.",
    "shape_mode": "rounded_plate = transparent corners; full_bleed = opaque square with an inner rounded outline.",
    "corner_radius": "Outer corner radius in px (rounded_plate).",
    "outline_thickness": "Outline band thickness in px.",
    "edge_softness": "Anti-alias width of the outer edge in px (rounded_plate).",
    "inner_outline_radius": "Corner radius of the inner outline in px (full_bleed).",
    "inner_outline_softness": "Anti-alias width of the inner outline in px (full_bleed).",
    "fill_mode": "single colour or two-colour gradient.",
    "base_color": "Fill colour for single mode.",
    "gradient_color_a": "Gradient start colour.",
    "gradient_color_b": "Gradient end colour.",
    "gradient_space": "Interpolation space for gradients.",
    "gradient_direction": "Gradient direction (radial = centre out).",
    "radial_power": "Radial gradient curve; >1 keeps colour A longer near the centre.",
    "mute_to_black": "Blend the fill toward black for the muted plate look.",
    "outline_color_mode": "derived = darkened local fill; forced = near-black; custom = custom colour.",
    "forced_outline_color": "Outline colour for forced mode.",
    "custom_outline_color": "Outline colour for custom mode.",
    "outline_darken": "How much darker a derived outline is than the fill.",
    "outline_strength": "Outline mask multiplier (does not change thickness).",
    "edge_vignette": "Extra darkening toward the corners (0 = off).",
    "lift_mode": "Where the highlight originates.",
    "lift_amount": "How much brighter the lifted area becomes.",
    "lift_falloff": "Higher = tighter highlight.",
    "lift_distance_scale": "Widens (>1) or narrows (<1) the lift influence.",
}


def _clamp(x: float, lo: Optional[float], hi: Optional[float]) -> float:
    x = float(x)
    if lo is not None and x < lo:
        x = lo
    if hi is not None and x > hi:
        x = hi
    return x


def _clamp_color(c: Color) -> Color:
    return tuple(_clamp(ch, 0.0, 1.0) for ch in tuple(c)[:3])  # type: ignore[return-value]


def _finite_or_default(name: str, value: Any) -> Any:
    """NaN/inf (in any channel, for colours) -> the field default, with a warning."""
    channels = tuple(value)[:3] if name in COLOR_FIELDS else (value,)
    if all(math.isfinite(float(ch)) for ch in channels):
        return value
    default = _DEFAULTS[name]
    log.warning("Non-finite %s %r; using %r", name, value, default)
    return default


def _finite(x: Any, default: float) -> float:
    x = float(x)
    return x if math.isfinite(x) else default


def _to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("true", "1", "yes", "y", "on"):
        return True
    if s in ("false", "0", "no", "n", "off"):
        return False
    return bool(v)


@dataclass(frozen=True)
class PlateParams:
    # shape
    size: int = 210
    shape_mode: str = "rounded_plate"
    corner_radius: float = 18.0
    outline_thickness: float = 3.0
    edge_softness: float = 1.5
    inner_outline_radius: float = 18.0
    inner_outline_softness: float = 1.5

    # fill
    fill_mode: str = "single"
    base_color: Color = (0.25, 0.45, 0.55)
    gradient_color_a: Color = (0.25, 0.45, 0.55)
    gradient_color_b: Color = (0.20, 0.20, 0.20)
    gradient_space: str = "oklch"
    gradient_direction: str = DEFAULT_DIRECTION
    radial_power: float = 1.0

    # styling
    mute_to_black: float = 0.62
    outline_color_mode: str = "derived"
    forced_outline_color: Color = (0.04, 0.04, 0.04)
    custom_outline_color: Color = (0.0, 0.0, 0.0)
    outline_darken: float = 0.22
    outline_strength: float = 1.0
    edge_vignette: float = 0.08

    # lift
    lift_mode: str = DEFAULT_LIFT_MODE
    lift_amount: float = 0.18
    lift_falloff: float = 1.65
    lift_distance_scale: float = 1.0

    def clamped(self) -> "PlateParams":
        """Copy with every numeric range, colour channel and mode name enforced."""
        size = _finite_or_default("size", self.size)
        changes: Dict[str, Any] = {"size": int(min(MAX_SIZE, max(MIN_SIZE, int(size))))}
        for name, (lo, hi) in _RANGES.items():
            changes[name] = _clamp(_finite_or_default(name, getattr(self, name)), lo, hi)
        for name in COLOR_FIELDS:
            changes[name] = _clamp_color(_finite_or_default(name, getattr(self, name)))
        for name, choices in _CHOICES.items():
            value = str(getattr(self, name)).strip().lower()
            if value not in choices:
                default = _DEFAULTS[name]
                log.warning("Unknown %s '%s'; using '%s'", name, getattr(self, name), default)
                value = default
            changes[name] = value
        return replace(self, **changes)

    def with_tier(self, tier: Tier) -> "PlateParams":
        """Fill overridden by a rarity tier; every other knob is kept."""
        if tier.use_gradient:
            return replace(
                self,
                fill_mode="gradient",
                gradient_color_a=tier.color_a,
                gradient_color_b=tier.color_b,
            )
        return replace(self, fill_mode="single", base_color=tier.color_a)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_extras(cls, extras: Dict[str, Any], base: Optional["PlateParams"] = None) -> "PlateParams":
        """
        Build params from loose key/value pairs (CLI extras, JSON config).
        Values may be strings; colours accept hex or 'r,g,b'. Unknown keys are
        logged and ignored.
        """
        base = base or cls()
        known = {f.name: f for f in fields(cls)}
        changes: Dict[str, Any] = {}
        unused: List[str] = []
        for raw_key, value in extras.items():
            key = str(raw_key).strip().lower().replace("-", "_")
            if key not in known:
                unused.append(str(raw_key))
                continue
            changes[key] = _coerce_field(key, value)
        if unused:
            log.info("Unused extras (no matching parameter): %s", ", ".join(sorted(unused)))
        return replace(base, **changes)


_DEFAULTS: Dict[str, Any] = {f.name: f.default for f in fields(PlateParams)}


def _coerce_field(name: str, value: Any) -> Any:
    if name in COLOR_FIELDS:
        return parse_color(value)
    if name == "size":
        v = float(value)
        return int(v) if math.isfinite(v) else v
    if name in _CHOICES:
        return str(value).strip().lower()
    return float(value)


@dataclass(frozen=True)
class ImportSettings:
    """
    Metadata for the asset-import step that consumes the PNG. Carried next to
    the pixels, never read by the renderer.
    """
    pixels_per_unit: float = 100.0
    disable_mipmaps: bool = True
    clamp_wrap_mode: bool = True
    file_name: str = "Rarity_Background"

    def clamped(self) -> "ImportSettings":
        return replace(
            self,
            pixels_per_unit=max(1.0, _finite(self.pixels_per_unit, 100.0)),
            disable_mipmaps=_to_bool(self.disable_mipmaps),
            clamp_wrap_mode=_to_bool(self.clamp_wrap_mode),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self.clamped())

    @classmethod
    def from_extras(cls, extras: Dict[str, Any]) -> "ImportSettings":
        known = {f.name for f in fields(cls)}
        picked = {k: v for k, v in extras.items() if k in known}
        if "file_name" in picked:
            picked["file_name"] = str(picked["file_name"])
        return cls(**picked).clamped()


IMPORT_KEYS = frozenset(f.name for f in fields(ImportSettings))


def get_params() -> List[Dict[str, Any]]:
    """Parameter table for discovery: name, type, default, min/max or choices, help."""
    out: List[Dict[str, Any]] = []
    for f in fields(PlateParams):
        entry: Dict[str, Any] = {"name": f.name, "default": f.default, "help": _HELP.get(f.name, "")}
        if f.name == "size":
            entry.update(type=int, min=MIN_SIZE, max=MAX_SIZE)
        elif f.name in COLOR_FIELDS:
            entry.update(type="color")
        elif f.name in _CHOICES:
            entry.update(type=str, choices=list(_CHOICES[f.name]))
        else:
            lo, hi = _RANGES[f.name]
            entry.update(type=float, min=lo, max=hi)
        out.append(entry)
    return out
