# depthcloud/io/cloud.py
"""Writing converted clouds to disk."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from depthcloud.config import CloudFormat
from depthcloud.conversion.cloud import POINT_DTYPE, PointCloud
from depthcloud.utils.io import atomic_write_json, ensure_directory
from depthcloud.utils.logger import get_logger

if TYPE_CHECKING:
    import open3d as o3d

LOGGER = get_logger(__name__)


def unpack_rgb(packed: npt.NDArray[np.uint32]) -> npt.NDArray[np.uint8]:
    """Split 0x00RRGGBB into (..., 3) uint8 RGB."""
    packed = np.asarray(packed, dtype=np.uint32)
    r = (packed >> 16) & 0xFF
    g = (packed >> 8) & 0xFF
    b = packed & 0xFF
    return np.stack([r, g, b], axis=-1).astype(np.uint8)


def to_open3d(cloud: PointCloud) -> o3d.geometry.PointCloud:
    """Unorganized Open3D cloud of the valid points, with colors when any are set."""
    import open3d as o3d

    mask = cloud.valid_mask()
    points = cloud.xyz()[mask].astype(np.float64)
    result = o3d.geometry.PointCloud()
    if points.size:
        result.points = o3d.utility.Vector3dVector(points)
        packed = cloud.rgb_packed()[mask]
        if np.any(packed):
            colors = unpack_rgb(packed).astype(np.float64) / 255.0
            result.colors = o3d.utility.Vector3dVector(colors)
    return result


def save_cloud(path: Path, cloud: PointCloud, fmt: CloudFormat | None = None) -> Path:
    """Save ``cloud``; the format follows ``fmt`` or the file suffix."""
    fmt = fmt or CloudFormat(path.suffix.lower().lstrip("."))
    path = path.with_suffix(f".{fmt.value}")
    ensure_directory(path.parent)
    if fmt is CloudFormat.NPY:
        np.save(path, cloud.points)
        LOGGER.info("Saved organized cloud {} ({}x{})", path.name, cloud.width, cloud.height)
        return path
    import open3d as o3d

    geometry = to_open3d(cloud)
    ok = o3d.io.write_point_cloud(str(path), geometry, write_ascii=False)
    if not ok:
        raise OSError(f"Failed to save cloud: {path}")
    LOGGER.info("Saved cloud {} with {} points", path.name, len(geometry.points))
    return path


def load_organized(path: Path) -> PointCloud:
    """Read back a cloud written with the ``npy`` format."""
    points = np.load(path)
    if points.dtype.names != POINT_DTYPE.names or points.ndim != 2:
        raise ValueError(f"{path} does not hold an organized x/y/z/rgb cloud")
    return PointCloud(points=points)


def export_statistics(path: Path, cloud: PointCloud) -> None:
    mask = cloud.valid_mask()
    xyz = cloud.xyz()[mask]
    stats = {
        "height": cloud.height,
        "width": cloud.width,
        "points": int(cloud.height * cloud.width),
        "valid": int(mask.sum()),
        "min": xyz.min(axis=0).tolist() if xyz.size else None,
        "max": xyz.max(axis=0).tolist() if xyz.size else None,
    }
    atomic_write_json(path, stats)
    LOGGER.debug("Exported statistics for {}", path)


__all__ = ["export_statistics", "load_organized", "save_cloud", "to_open3d", "unpack_rgb"]
