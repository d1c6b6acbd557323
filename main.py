from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from batch import run_batch
from colorspace import INTERPOLATORS
from export import ExportError, save_png, sanitize_file_name
from palettes import describe_tier, get_tier, list_tiers, select_tiers
from params import COLOR_FIELDS, IMPORT_KEYS, ImportSettings, PlateParams, get_params
from patterns import GRADIENT_DIRECTIONS, LIFT_MODES
from plate import generate
from shapes import REGISTRY

# =============== Logging ===============
log = logging.getLogger("rarityplate")


def setup_logging(verbosity: int = 0) -> None:
    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(verbosity, 2)]
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


# =============== Extras / config ===============
def _coerce(v: str) -> Any:
    if v.isdigit():
        return int(v)
    try:
        return float(v)
    except ValueError:
        low = v.lower()
        if low in ("true", "false"):
            return low == "true"
    return v


def _parse_kv_pairs(pairs: Optional[List[str]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if not pairs:
        return out
    for p in pairs:
        if "=" in p:
            k, v = p.split("=", 1)
            k, v = k.strip(), v.strip()
            # colours stay strings: "112233" is hex, not a number
            is_color = k.lower().replace("-", "_") in COLOR_FIELDS
            out[k] = v if is_color else _coerce(v)
        else:
            log.warning("Ignoring extra without '=': %s", p)
    return out


def _split_import_extras(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Import-metadata keys (pixels_per_unit, ...) vs renderer keys."""
    plate = {k: v for k, v in raw.items() if k not in IMPORT_KEYS}
    imp = {k: v for k, v in raw.items() if k in IMPORT_KEYS}
    return plate, imp


def _resolve_params(args: argparse.Namespace) -> Tuple[PlateParams, ImportSettings]:
    """Precedence: defaults < --tier < --config < --extra."""
    params = PlateParams()
    if getattr(args, "tier", None):
        params = params.with_tier(get_tier(args.tier))

    imp_raw: Dict[str, Any] = {}
    if getattr(args, "config", None):
        data = json.loads(Path(args.config).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config {args.config} must contain a JSON object")
        plate_cfg, imp_cfg = _split_import_extras(data)
        params = PlateParams.from_extras(plate_cfg, base=params)
        imp_raw.update(imp_cfg)

    plate_x, imp_x = _split_import_extras(_parse_kv_pairs(getattr(args, "extra", None)))
    params = PlateParams.from_extras(plate_x, base=params)
    imp_raw.update(imp_x)
    return params, ImportSettings.from_extras(imp_raw)


# =============== CLI ===============
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Procedural rarity plate (item background) generator")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v, -vv).")

    sub = p.add_subparsers(dest="cmd", required=True)

    lp = sub.add_parser("list", help="List shapes, gradient spaces/directions, lift modes and tiers.")
    lp.set_defaults(func=cmd_list)

    pp = sub.add_parser("params", help="Describe every parameter accepted by --extra / --config.")
    pp.set_defaults(func=cmd_params)

    extra_help = (
        "Extra k=v pairs, e.g. size=256 shape_mode=full_bleed base_color=#3a6f8c "
        "gradient_color_a=0.95,0.78,0.22 lift_mode=top_left pixels_per_unit=64."
    )

    rp = sub.add_parser("run", help="Render a single plate to PNG.")
    rp.add_argument("--out", type=Path, required=True, help="Output image file (png/webp).")
    rp.add_argument("--tier", type=str, default=None, help="Start from a rarity tier's colours.")
    rp.add_argument("--config", type=Path, default=None, help="JSON object of parameters.")
    rp.add_argument("--workers", type=int, default=1, help="Threads for row-band rendering.")
    rp.add_argument("--no-sidecar", action="store_true", help="Skip the <name>.import.json metadata file.")
    rp.add_argument("--extra", nargs="*", help=extra_help)
    rp.set_defaults(func=cmd_run)

    bp = sub.add_parser("batch", help="Render one plate per rarity tier into a folder.")
    bp.add_argument("--out-dir", type=Path, required=True, help="Output folder.")
    bp.add_argument("--tiers", nargs="*", default=None, help="Tier names (default: all).")
    bp.add_argument("--config", type=Path, default=None, help="JSON object of parameters.")
    bp.add_argument("--file-name", type=str, default=None, help="Base file name (default Rarity_Background).")
    bp.add_argument("--workers", type=int, default=4, help="Concurrent renders.")
    bp.add_argument("--extra", nargs="*", help=extra_help)
    bp.set_defaults(func=cmd_batch, tier=None)

    bench = sub.add_parser("bench", help="Micro-benchmark plate rendering.")
    bench.add_argument("--runs", type=int, default=3)
    bench.add_argument("--workers", type=int, default=1)
    bench.add_argument("--config", type=Path, default=None)
    bench.add_argument("--extra", nargs="*")
    bench.set_defaults(func=cmd_bench, tier=None)

    return p


# =============== Commands ===============
def cmd_list(_args: argparse.Namespace) -> int:
    print("Shapes:", ", ".join(REGISTRY.names()))
    print("Gradient spaces:", ", ".join(INTERPOLATORS))
    print("Gradient directions:", ", ".join(GRADIENT_DIRECTIONS))
    print("Lift modes:", ", ".join(LIFT_MODES))
    print("Tiers:")
    for name in list_tiers():
        print("  " + describe_tier(name))
    return 0


def cmd_params(_args: argparse.Namespace) -> int:
    for entry in get_params():
        if "choices" in entry:
            rng = "{" + "|".join(entry["choices"]) + "}"
        elif entry.get("type") == "color":
            rng = "#rrggbb | r,g,b"
        else:
            lo, hi = entry.get("min"), entry.get("max")
            rng = f"[{'-inf' if lo is None else lo}, {'inf' if hi is None else hi}]"
        print(f"{entry['name']:<24} default={entry['default']!s:<22} {rng:<34} {entry['help']}")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    try:
        params, settings = _resolve_params(args)
        params = params.clamped()
        log.info("Params: %s", dict(sorted(params.to_dict().items())))
        grid = generate(params, workers=args.workers)
        save_png(grid, args.out, None if args.no_sidecar else settings, params=params)
        return 0
    except ExportError as e:
        log.error("%s", e)
        return 1
    except Exception as e:
        log.exception("Failed: %s", e)
        return 1


def cmd_batch(args: argparse.Namespace) -> int:
    try:
        params, settings = _resolve_params(args)
        params = params.clamped()
        if args.file_name:
            settings = ImportSettings.from_extras({**settings.to_dict(), "file_name": sanitize_file_name(args.file_name)})
        tiers = select_tiers(args.tiers)
        results = run_batch(params, tiers, args.out_dir, settings, workers=args.workers)
        print(f"Wrote {len(results)} plate(s) to {args.out_dir}")
        return 0
    except ExportError as e:
        log.error("%s", e)
        return 1
    except Exception as e:
        log.exception("Batch failed: %s", e)
        return 1


def cmd_bench(args: argparse.Namespace) -> int:
    try:
        params, _ = _resolve_params(args)
        params = params.clamped()
        times = []
        for _ in range(max(1, args.runs)):
            t0 = time.perf_counter()
            _ = generate(params, workers=args.workers)
            times.append(time.perf_counter() - t0)
        arr = np.asarray(times)
        size = params.size
        print(
            f"{size}x{size} {params.shape_mode}/{params.fill_mode}: {len(times)} run(s) — "
            f"avg {arr.mean()*1000:.2f} ms, min {arr.min()*1000:.2f} ms, max {arr.max()*1000:.2f} ms"
        )
        return 0
    except Exception as e:
        log.exception("Bench failed: %s", e)
        return 1


# =============== Entry ===============
def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
