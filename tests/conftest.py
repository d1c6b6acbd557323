"""
Shared fixtures. The modules live flat at the repo root, so make sure the root
is importable when pytest is run without an editable install.
"""

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from params import PlateParams


@pytest.fixture
def flat_params():
    """Grey single-colour plate with every styling effect switched off."""
    return PlateParams(
        size=64,
        fill_mode="single",
        base_color=(0.5, 0.5, 0.5),
        corner_radius=8.0,
        outline_thickness=2.0,
        mute_to_black=0.0,
        lift_amount=0.0,
        edge_vignette=0.0,
    )
