# depthcloud/io/frames.py
"""Depth/color image files on disk, paired by ``<stem>_depth`` / ``<stem>_rgb``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import imageio.v2 as imageio
import numpy as np

from depthcloud.config import (
    COLOR_SUFFIXES,
    DEPTH_SUFFIXES,
    FILENAME_COLOR_ROLE,
    FILENAME_DEPTH_ROLE,
)
from depthcloud.conversion.buffers import ColorBuffer, DepthBuffer
from depthcloud.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class FramePaths:
    """Depth path with its optional color companion."""

    stem: str
    depth: Path
    rgb: Optional[Path] = None


def _stem_and_role(path: Path) -> tuple[str, str] | None:
    name = path.stem
    if "_" not in name:
        return None
    base, role = name.rsplit("_", 1)
    if role == FILENAME_DEPTH_ROLE and path.suffix.lower() in DEPTH_SUFFIXES:
        return base, role
    if role == FILENAME_COLOR_ROLE and path.suffix.lower() in COLOR_SUFFIXES:
        return base, role
    return None


def collect_frames(inputs: Sequence[Path | str]) -> List[FramePaths]:
    """Collect depth files and attach matching color files.

    Directories are scanned for ``*_depth.{npy,png}``; files given directly
    are always treated as depth images.
    """
    if not inputs:
        raise ValueError("No inputs supplied")
    depth: dict[str, Path] = {}
    color: dict[str, Path] = {}
    for item in inputs:
        path = Path(item).expanduser()
        if path.is_dir():
            for child in sorted(p for p in path.iterdir() if p.is_file()):
                parsed = _stem_and_role(child)
                if parsed is None:
                    continue
                base, role = parsed
                target = depth if role == FILENAME_DEPTH_ROLE else color
                target.setdefault(str(child.parent / base), child)
        elif path.is_file():
            parsed = _stem_and_role(path)
            base = parsed[0] if parsed else path.stem
            depth[str(path.parent / base)] = path
            for suffix in COLOR_SUFFIXES:
                candidate = path.parent / f"{base}_{FILENAME_COLOR_ROLE}{suffix}"
                if candidate.is_file():
                    color.setdefault(str(path.parent / base), candidate)
                    break
        else:
            raise FileNotFoundError(f"No such file or directory: {path}")
    if not depth:
        raise FileNotFoundError("No depth images found for provided inputs")
    return [
        FramePaths(stem=Path(key).name, depth=path, rgb=color.get(key))
        for key, path in sorted(depth.items())
    ]


def load_depth(path: Path) -> DepthBuffer:
    """Read ``.npy`` arrays or 16-bit PNGs as a depth buffer."""
    if path.suffix.lower() == ".npy":
        data = np.load(path)
    else:
        data = np.asarray(imageio.imread(path))
    if data.dtype == np.float64:
        data = data.astype(np.float32)
    buffer = DepthBuffer.from_array(data)
    LOGGER.debug("Loaded depth {} ({}x{}, {})", path.name, buffer.width, buffer.height, buffer.encoding)
    return buffer


def load_color(path: Path) -> ColorBuffer:
    """Read an 8-bit image; RGB(A) from disk is reordered to BGR(A)."""
    pixels = np.asarray(imageio.imread(path))
    if pixels.ndim == 3 and pixels.shape[2] == 3:
        pixels = pixels[:, :, ::-1]
    elif pixels.ndim == 3 and pixels.shape[2] == 4:
        pixels = pixels[:, :, [2, 1, 0, 3]]
    return ColorBuffer.from_array(np.ascontiguousarray(pixels))


__all__ = ["FramePaths", "collect_frames", "load_color", "load_depth"]
