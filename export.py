# export.py — PNG encoding + import-metadata sidecar
# -----------------------------------------------------------------------------
# The renderer never touches disk; this is the boundary. Each image is written
# with Pillow, and the asset-import preferences (pixels per unit, mip-maps,
# wrap mode) go to `<stem>.import.json` next to it for whatever importer picks
# the files up. The renderer params are also embedded as a PNG text chunk so a
# plate can be regenerated from the file alone.
# -----------------------------------------------------------------------------

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import PngImagePlugin

from params import ImportSettings, PlateParams
from plate import PixelGrid

log = logging.getLogger("rarityplate")

__all__ = ["ExportError", "sanitize_file_name", "sidecar_path", "save_png", "write_import_metadata"]

DEFAULT_FILE_NAME = "Rarity_Background"
PARAMS_CHUNK = "rarityplate.params"

_INVALID_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


class ExportError(OSError):
    """Writing an image or its sidecar failed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = Path(path)


def sanitize_file_name(name: Optional[str]) -> str:
    if not name or not str(name).strip():
        return DEFAULT_FILE_NAME
    return _INVALID_CHARS.sub("_", str(name)).strip()


def sidecar_path(image_path: Path) -> Path:
    image_path = Path(image_path)
    return image_path.with_name(f"{image_path.stem}.import.json")


def _infer_format_from_path(p: Path) -> str:
    if p.suffix.lower() == ".webp":
        return "WEBP"
    return "PNG"


def write_import_metadata(image_path: Path, settings: ImportSettings, extra: Optional[Dict[str, Any]] = None) -> Path:
    path = sidecar_path(image_path)
    payload: Dict[str, Any] = {
        "image": Path(image_path).name,
        "texture_type": "sprite",
        "alpha_is_transparency": True,
        "srgb": True,
        "filter_mode": "bilinear",
        **settings.to_dict(),
    }
    if extra:
        payload.update(extra)
    try:
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        raise ExportError(path, str(e)) from e
    return path


def save_png(
    grid: PixelGrid,
    path: Path,
    settings: Optional[ImportSettings] = None,
    params: Optional[PlateParams] = None,
) -> Path:
    """
    Encode `grid` to `path` (parents created). Writes the import sidecar when
    `settings` is given. Raises ExportError on any filesystem failure.
    """
    path = Path(path)
    img = grid.to_image()
    fmt = _infer_format_from_path(path)

    save_kwargs: Dict[str, Any] = {"format": fmt}
    if fmt == "PNG":
        save_kwargs["optimize"] = True
        if params is not None:
            info = PngImagePlugin.PngInfo()
            info.add_text(PARAMS_CHUNK, json.dumps(params.clamped().to_dict()))
            save_kwargs["pnginfo"] = info
    else:
        save_kwargs["lossless"] = True

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        img.save(path, **save_kwargs)
    except OSError as e:
        raise ExportError(path, str(e)) from e
    log.info("Saved %s (%dx%d)", path, *img.size)

    if settings is not None:
        write_import_metadata(path, settings)
    return path
