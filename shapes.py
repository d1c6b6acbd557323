from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from sdf import clamp01, rounded_rect_sdf, rounded_rect_sdf_inset, smoothstep


# =============== Registry ===============
class ShapeRegistry:
    def __init__(self) -> None:
        self._by_name: Dict[str, type[BaseShape]] = {}

    def register(self, name: str, cls: type["BaseShape"]) -> None:
        key = name.strip().lower()
        self._by_name[key] = cls

    def names(self) -> list[str]:
        return sorted(self._by_name.keys())

    def create(self, name: str, **kwargs) -> "BaseShape":
        key = name.strip().lower()
        if key not in self._by_name:
            raise KeyError(f"Unknown shape '{name}'. Available: {', '.join(self.names()) or '(none)'}")
        return self._by_name[key](**kwargs)


REGISTRY = ShapeRegistry()


# =============== Base ===============
@dataclass(frozen=True)
class BaseShape:
    """
    A shape policy turns pixel centres into (alpha, outline_mask) fields.

    `transparent_outside` tells the compositor whether alpha can reach 0,
    i.e. whether pixels outside the shape may short-circuit to clear black.
    """
    size: int
    outline: float = 0.0
    transparent_outside: bool = True

    def masks(self, px: np.ndarray, py: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:  # pragma: no cover
        raise NotImplementedError


# =============== Shapes ===============
@dataclass(frozen=True)
class RoundedPlateShape(BaseShape):
    """Rounded rectangle filling the canvas; transparent outside the corners."""
    radius: float = 0.0
    softness: float = 0.5

    def masks(self, px, py):
        aa = self.softness
        dist = rounded_rect_sdf(px, py, self.size, self.size, self.radius)
        alpha = smoothstep(aa, -aa, dist)

        if self.outline <= 0:
            return alpha, np.zeros_like(alpha)

        # 1 near the edge, 0 once we are `outline` px deep
        band = smoothstep(-self.outline - aa, -self.outline + aa, dist)
        return alpha, clamp01(alpha * band)


@dataclass(frozen=True)
class FullBleedShape(BaseShape):
    """Opaque square with a rounded outline drawn just inside the canvas edge."""
    transparent_outside: bool = False
    radius: float = 0.0
    softness: float = 0.5

    def masks(self, px, py):
        alpha = np.ones(np.broadcast(px, py).shape, dtype=np.float64)

        if self.outline <= 0:
            return alpha, np.zeros_like(alpha)

        half = self.outline * 0.5
        aa = self.softness
        dist = rounded_rect_sdf_inset(px, py, self.size, self.size, inset=half, radius=self.radius)

        outer = smoothstep(half + aa, half - aa, dist)
        inner = smoothstep(-half - aa, -half + aa, dist)
        return alpha, clamp01(outer * inner)


def shape_for(params) -> BaseShape:
    """Resolve the shape policy for already-clamped params."""
    if params.shape_mode == "full_bleed":
        return REGISTRY.create(
            "full_bleed",
            size=params.size,
            outline=params.outline_thickness,
            radius=params.inner_outline_radius,
            softness=params.inner_outline_softness,
        )
    return REGISTRY.create(
        "rounded_plate",
        size=params.size,
        outline=params.outline_thickness,
        radius=params.corner_radius,
        softness=params.edge_softness,
    )


# ---- Register defaults at import time ----
REGISTRY.register("rounded_plate", RoundedPlateShape)
REGISTRY.register("full_bleed", FullBleedShape)
