"""
batch.py — render one plate per rarity tier.

Each tier gets its own copy of the base parameters with only the fill
overridden (single colour or gradient), so shape/outline/lift settings are
shared across the whole set. Renders share no state and run on a thread pool;
all PNGs are written first, then their import sidecars, so an importer
watching the folder never sees a sidecar without its image.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from export import save_png, sanitize_file_name, write_import_metadata
from palettes import Tier
from params import ImportSettings, PlateParams
from plate import generate

log = logging.getLogger("rarityplate")


@dataclass(frozen=True)
class BatchResult:
    tier: str
    path: Path
    params: PlateParams


def output_name(file_name: str, tier: Tier) -> str:
    return f"{sanitize_file_name(file_name)}_{sanitize_file_name(tier.name)}"


def settings_for_tier(base: PlateParams, tier: Tier) -> PlateParams:
    return base.with_tier(tier)


def run_batch(
    base: PlateParams,
    tiers: Sequence[Tier],
    out_dir: Path,
    settings: Optional[ImportSettings] = None,
    *,
    workers: int = 4,
    suffix: str = ".png",
) -> List[BatchResult]:
    settings = (settings or ImportSettings()).clamped()
    base = base.clamped()
    out_dir = Path(out_dir)
    jobs = [
        (tier, settings_for_tier(base, tier), out_dir / f"{output_name(settings.file_name, tier)}{suffix}")
        for tier in tiers
    ]
    log.info("Batch: %d tier(s) -> %s", len(jobs), out_dir)

    def render(job) -> BatchResult:
        tier, params, path = job
        grid = generate(params)
        save_png(grid, path, params=params)
        log.info("  %s -> %s", tier.name, path.name)
        return BatchResult(tier=tier.name, path=path, params=params)

    workers = max(1, int(workers))
    if workers == 1:
        results = [render(j) for j in jobs]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(render, jobs))

    for r in results:
        write_import_metadata(r.path, settings, extra={"tier": r.tier})
    return results
