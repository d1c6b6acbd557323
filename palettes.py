from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

Color = Tuple[float, float, float]


# =============== Colour parsing ===============
def _parse_hex_color(code: str) -> Color:
    s = code.strip().lstrip("#")
    if len(s) == 3:
        s = "".join([c * 2 for c in s])
    if len(s) not in (6, 8):
        raise ValueError(f"Bad hex colour '{code}' (expected #rgb, #rrggbb or #rrggbbaa)")
    r = int(s[0:2], 16); g = int(s[2:4], 16); b = int(s[4:6], 16)
    return r / 255.0, g / 255.0, b / 255.0


def parse_color(value: Any) -> Color:
    """
    Accepts '#rrggbb', '#rgb', 'r,g,b' floats in 0..1, or any 3/4-sequence.
    Alpha is dropped: plates are always opaque before the shape mask.
    """
    if isinstance(value, str):
        s = value.strip()
        if "," in s:
            parts = [p for p in s.split(",") if p.strip()]
            if len(parts) not in (3, 4):
                raise ValueError(f"Bad colour '{value}' (expected r,g,b)")
            r, g, b = (float(p) for p in parts[:3])
            return r, g, b
        return _parse_hex_color(s)
    try:
        seq = list(value)
    except TypeError:
        raise ValueError(f"Bad colour {value!r}") from None
    if len(seq) not in (3, 4):
        raise ValueError(f"Bad colour {value!r} (expected 3 channels)")
    return float(seq[0]), float(seq[1]), float(seq[2])


def to_hex(c: Color) -> str:
    r, g, b = (max(0, min(255, int(round(float(x) * 255)))) for x in c)
    return f"#{r:02x}{g:02x}{b:02x}"


# =============== Rarity tiers ===============
@dataclass(frozen=True)
class Tier:
    name: str
    color_a: Color
    color_b: Color = (0.0, 0.0, 0.0)
    use_gradient: bool = False
    description: str = ""


# Lower tiers sit in muted grey/green/blue; higher ones move to blue/purple and
# then warm gold. Mythic is a gradient so it still reads at small UI sizes.
TIERS: List[Tier] = [
    Tier("Very Common", (0.38, 0.40, 0.42), description="near-neutral cool grey"),
    Tier("Common", (0.45, 0.47, 0.50), description="slightly brighter neutral"),
    Tier("Uncommon", (0.22, 0.46, 0.30), description="gentle green"),
    Tier("Scarce", (0.18, 0.44, 0.42), description="teal / sea green"),
    Tier("Very Scarce", (0.18, 0.38, 0.50), description="desaturated cyan-blue"),
    Tier("Rare", (0.18, 0.34, 0.56), description="classic rare blue"),
    Tier("Very Rare", (0.22, 0.28, 0.62), description="deeper blue leaning violet"),
    Tier("Epic", (0.42, 0.24, 0.62), description="purple"),
    Tier("Fabled", (0.62, 0.22, 0.52), description="magenta-leaning purple"),
    Tier("Legendary", (0.72, 0.44, 0.18), description="warm amber gold"),
    Tier(
        "Mythic",
        (0.95, 0.78, 0.22),
        (0.40, 0.22, 0.06),
        use_gradient=True,
        description="bright gold to deep bronze gradient",
    ),
]

_BY_KEY: Dict[str, Tier] = {t.name.strip().lower(): t for t in TIERS}


def _key(name: str) -> str:
    return (name or "").strip().lower().replace("_", " ").replace("-", " ")


def list_tiers() -> List[str]:
    return [t.name for t in TIERS]


def get_tier(name: str) -> Tier:
    key = _key(name)
    if key not in _BY_KEY:
        raise KeyError(f"Unknown tier '{name}'. Available: {', '.join(list_tiers())}")
    return _BY_KEY[key]


def describe_tier(name: str) -> str:
    try:
        t = get_tier(name)
    except KeyError:
        return f"(unknown tier: {name})"
    colours = f"{to_hex(t.color_a)} -> {to_hex(t.color_b)}" if t.use_gradient else to_hex(t.color_a)
    return f"{t.name}: {t.description or '(no description)'} — {colours}"


def select_tiers(names: Optional[List[str]]) -> List[Tier]:
    """All tiers when `names` is empty, otherwise the named ones in the given order."""
    if not names:
        return list(TIERS)
    return [get_tier(n) for n in names]
