# depthcloud/conversion/cloud.py
"""Organized point cloud container with the x/y/z/rgb record layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

import numpy as np
import numpy.typing as npt

from depthcloud.config import POINT_FIELD_OFFSETS, POINT_STEP

POINT_DTYPE: np.dtype = np.dtype(
    {
        "names": [name for name, _ in POINT_FIELD_OFFSETS],
        "formats": ["<f4"] * len(POINT_FIELD_OFFSETS),
        "offsets": [offset for _, offset in POINT_FIELD_OFFSETS],
        "itemsize": POINT_STEP,
    }
)

# uint32 lane of each field inside one record
WORD_INDEX: dict[str, int] = {name: offset // 4 for name, offset in POINT_FIELD_OFFSETS}


@dataclass(frozen=True)
class PointField:
    name: str
    offset: int
    datatype: str = "float32"
    count: int = 1


@dataclass
class PointCloud:
    """Row-major grid of point records; invalid points stay in place as NaN."""

    points: npt.NDArray[Any]
    header: Any = None
    is_dense: bool = False
    is_bigendian: bool = False
    fields: Tuple[PointField, ...] = field(
        default_factory=lambda: tuple(PointField(n, o) for n, o in POINT_FIELD_OFFSETS)
    )

    @classmethod
    def from_words(cls, words: npt.NDArray[np.uint32], header: Any = None) -> "PointCloud":
        """Build from a (height, width, POINT_STEP // 4) uint32 array."""
        height, width = words.shape[:2]
        flat = np.ascontiguousarray(words, dtype="<u4")
        points = flat.view(POINT_DTYPE).reshape(height, width)
        return cls(points=points, header=header)

    @property
    def height(self) -> int:
        return int(self.points.shape[0])

    @property
    def width(self) -> int:
        return int(self.points.shape[1])

    @property
    def point_step(self) -> int:
        return POINT_STEP

    @property
    def row_step(self) -> int:
        return POINT_STEP * self.width

    def xyz(self) -> npt.NDArray[np.float32]:
        """(height, width, 3) float32 coordinates."""
        return np.stack([self.points["x"], self.points["y"], self.points["z"]], axis=-1)

    def rgb_packed(self) -> npt.NDArray[np.uint32]:
        """Packed 0x00RRGGBB colors as stored in the rgb slot."""
        return np.ascontiguousarray(self.points["rgb"]).view(np.uint32)

    def valid_mask(self) -> npt.NDArray[np.bool_]:
        return np.isfinite(self.points["z"])

    def to_bytes(self) -> bytes:
        """Little-endian record stream, ``row_step * height`` bytes."""
        return np.ascontiguousarray(self.points).tobytes()


__all__ = ["POINT_DTYPE", "PointCloud", "PointField", "WORD_INDEX"]
