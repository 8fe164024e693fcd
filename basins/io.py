"""Input reading and output serialization for basin analysis runs."""

from __future__ import annotations

import json
from pathlib import Path
import shutil
from typing import Any

import numpy as np
from PIL import Image

from basins.grid import HeightGrid, parse_height_map


def read_height_map(path: str | Path) -> HeightGrid:
    """Read and parse a digit height map file."""

    return parse_height_map(Path(path).read_text(encoding="ascii", errors="replace"))


def resolve_output_dir(
    out_root: str | Path,
    map_name: str,
    width: int,
    height: int,
    *,
    overwrite: bool,
) -> Path:
    """Create and return the output directory for one analysis run."""

    target = Path(out_root) / map_name / f"{width}x{height}"
    if target.exists() and any(target.iterdir()) and not overwrite:
        raise FileExistsError(
            f"Output directory already exists and is not empty: {target}. Use --overwrite to replace files."
        )
    target.mkdir(parents=True, exist_ok=True)
    return target


def clean_output_dir(target: Path, *, out_root: Path) -> None:
    """Delete all children of an output directory that lies under `out_root`."""

    target_r = target.resolve()
    target_r.relative_to(out_root.resolve())

    for child in target_r.iterdir():
        if child.is_symlink() or child.is_file():
            child.unlink()
        elif child.is_dir():
            shutil.rmtree(child)


def write_png_u8(path: str | Path, raster_u8: np.ndarray) -> None:
    image = Image.fromarray(raster_u8.astype(np.uint8))
    image.save(Path(path))


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    Path(path).write_text(text + "\n", encoding="utf-8")
