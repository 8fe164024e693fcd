"""CLI entry point for height map basin analysis."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import platform
import time
from typing import Any

import numpy as np
from loguru import logger

from basins.analyze import BasinReport, InsufficientBasinsError, analyze_height_map, top_k_product
from basins.config import DEFAULT_INPUT_PATH, AnalyzerConfig
from basins.derive import basin_mask_u8, height_preview_u8, low_point_mask_u8
from basins.grid import GridParseError, HeightGrid
from basins.io import clean_output_dir, read_height_map, resolve_output_dir, write_json, write_png_u8
from basins.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find low points and basin sizes in a digit height map")
    parser.add_argument(
        "input",
        nargs="?",
        default=DEFAULT_INPUT_PATH,
        help=(
            "Height map file with one row of digits per line "
            f"(default: {DEFAULT_INPUT_PATH}, relative to the working directory)"
        ),
    )
    parser.add_argument("--out", default=None, help="Output root directory for JSON and PNG artifacts")
    parser.add_argument(
        "--debug-tier",
        type=int,
        choices=(0, 1),
        default=0,
        help="Debug output tier: 0=core, 1=basin mask",
    )
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Log level for stderr diagnostics",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write a rotating basins.log into this directory",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, log_dir=args.log_dir)

    try:
        grid = read_height_map(args.input)
    except FileNotFoundError:
        parser.error(f"Input file not found: {args.input}")
    except (GridParseError, OSError) as exc:
        parser.error(f"{args.input}: {exc}")

    config = AnalyzerConfig(debug_tier=args.debug_tier)
    top_count = config.basin.top_basin_count

    analysis_start = time.perf_counter()
    report = analyze_height_map(grid, config=config)
    try:
        product: int | None = top_k_product(report.basin_sizes, top_count)
    except InsufficientBasinsError as exc:
        logger.error("{}", exc)
        product = None
    analysis_seconds = time.perf_counter() - analysis_start

    width, height = grid.size()
    if args.out is not None:
        try:
            out_dir = resolve_output_dir(
                args.out,
                Path(args.input).stem,
                width,
                height,
                overwrite=args.overwrite,
            )
        except OSError as exc:
            parser.error(str(exc))
        clean_output_dir(out_dir, out_root=Path(args.out))
        _write_artifacts(out_dir, args, grid, report, product, config, analysis_seconds)
        logger.info("Wrote artifacts to {}", out_dir)

    print(f"Analyzed height map: {args.input} ({width}x{height})")
    print(
        f"Low points: {len(report.low_points)}; "
        f"largest basin: {max(report.basin_sizes, default=0)} cells"
    )
    print(f"Risk level sum: {report.risk_level_sum}")
    if product is not None:
        print(f"Top {top_count} basin product: {product}")
    print(f"Analysis time: {analysis_seconds:.3f} s")
    return 0 if product is not None else 1


def _write_artifacts(
    out_dir: Path,
    args: argparse.Namespace,
    grid: HeightGrid,
    report: BasinReport,
    product: int | None,
    config: AnalyzerConfig,
    analysis_seconds: float,
) -> None:
    png_u8_outputs: dict[str, np.ndarray] = {
        "height_preview.png": height_preview_u8(grid),
        "low_points.png": low_point_mask_u8(grid, report.low_points, value=config.render.low_point_value),
    }
    if config.debug_tier >= 1:
        png_u8_outputs["debug_basin_mask.png"] = basin_mask_u8(
            grid,
            report.low_points,
            barrier_height=config.basin.barrier_height,
            basin_value=config.render.basin_value,
            low_point_value=config.render.low_point_value,
        )
    for name, raster in png_u8_outputs.items():
        write_png_u8(out_dir / name, raster)

    if not args.json:
        return

    width, height = grid.size()
    deterministic_meta: dict[str, Any] = {
        "input": str(args.input),
        "width": width,
        "height": height,
        "config": config.to_dict(),
        "low_points": [
            {"x": lp.position[0], "y": lp.position[1], "height": lp.height} for lp in report.low_points
        ],
        "basin_sizes": list(report.basin_sizes),
        "risk_level_sum": report.risk_level_sum,
        "top_basin_product": product,
    }
    meta = {
        **deterministic_meta,
        "analyzed_at_utc": datetime.now(timezone.utc).isoformat(),
        "analysis_seconds": analysis_seconds,
        "python_version": platform.python_version(),
        "numpy_version": np.__version__,
    }
    write_json(out_dir / "basins.json", deterministic_meta)
    write_json(out_dir / "meta.json", meta)


if __name__ == "__main__":
    raise SystemExit(main())
