# depthcloud/cli/convert_runner.py
"""Offline conversion of depth images on disk into point cloud files.

Usage:
    depthcloud-convert captures/ --intrinsics captures/rs2_params.json --format ply
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from depthcloud.config import CloudFormat, ConverterConfig, get_settings
from depthcloud.conversion.assembler import CloudAssembler
from depthcloud.errors import ConversionError
from depthcloud.intrinsics import load_intrinsics, rescale_intrinsics
from depthcloud.io.cloud import save_cloud
from depthcloud.io.frames import FramePaths, collect_frames, load_color, load_depth
from depthcloud.utils.error_tracker import ErrorTracker
from depthcloud.utils.io import ensure_directory
from depthcloud.utils.logger import configure, get_logger
from depthcloud.utils.progress import track

LOGGER = get_logger(__name__)


def run_convert(
    inputs: Sequence[Path | str],
    intrinsics_path: Path,
    *,
    output_dir: Path | None = None,
    fmt: CloudFormat = CloudFormat.PLY,
    config: ConverterConfig | None = None,
    tracker: ErrorTracker | None = None,
) -> List[Path]:
    """Convert every depth frame found in ``inputs``; returns written paths.

    Frames that fail are recorded in ``tracker`` and skipped.
    """
    settings = get_settings()
    cfg = config or settings.converter
    tracker = tracker or ErrorTracker(context="depthcloud.convert")
    target_dir = ensure_directory(output_dir or settings.paths.output_root)
    assembler = CloudAssembler(cfg)
    base_intrinsics = load_intrinsics(Path(intrinsics_path))

    frames: List[FramePaths] = collect_frames(inputs)
    LOGGER.info("Converting {} frame(s) into {}", len(frames), target_dir)
    written: List[Path] = []
    for frame in track(frames, description="convert", total=len(frames)):
        try:
            depth = load_depth(frame.depth)
            color = load_color(frame.rgb) if cfg.colorful and frame.rgb else None
            intrinsics = rescale_intrinsics(base_intrinsics, depth.width, depth.height)
            cloud = assembler.convert(depth, intrinsics, color=color)
            written.append(save_cloud(target_dir / f"{frame.stem}.{fmt.value}", cloud, fmt))
        except (ConversionError, OSError, ValueError) as exc:
            tracker.record(frame.stem, f"{type(exc).__name__}: {exc}")
    tracker.summary()
    return written


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depthcloud-convert",
        description="Convert depth images (+ optional color) into point clouds",
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="depth files or directories")
    parser.add_argument(
        "--intrinsics", required=True, type=Path, help="calibration JSON or YAML"
    )
    parser.add_argument("--output", type=Path, default=None, help="output directory")
    parser.add_argument(
        "--format",
        choices=[f.value for f in CloudFormat],
        default=CloudFormat.PLY.value,
    )
    parser.add_argument("--range-max", type=float, default=None, help="meters, 0 = unlimited")
    parser.add_argument(
        "--quiet-nan",
        dest="use_quiet_nan",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="drop out-of-range samples instead of clamping them",
    )
    parser.add_argument("--colorful", action="store_true", default=None)
    parser.add_argument("--decimation", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        configure(level=args.log_level.upper())

    overrides = {
        key: value
        for key, value in (
            ("range_max", args.range_max),
            ("use_quiet_nan", args.use_quiet_nan),
            ("colorful", args.colorful),
            ("decimation", args.decimation),
        )
        if value is not None
    }
    try:
        config = replace(get_settings().converter, **overrides)
    except ValueError as exc:
        parser.error(str(exc))

    tracker = ErrorTracker(context="depthcloud.convert")
    try:
        run_convert(
            args.inputs,
            args.intrinsics,
            output_dir=args.output,
            fmt=CloudFormat(args.format),
            config=config,
            tracker=tracker,
        )
    except (FileNotFoundError, ValueError) as exc:
        LOGGER.error(str(exc))
        return 1
    return 1 if tracker.count() else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())


__all__ = ["main", "run_convert"]
