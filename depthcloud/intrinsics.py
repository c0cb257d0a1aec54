# depthcloud/intrinsics.py
"""Camera intrinsics: shared latest-value cell and calibration loaders."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from depthcloud.config import CameraIntrinsics
from depthcloud.errors import MalformedInputError, NotReadyError
from depthcloud.messages import CameraInfo
from depthcloud.utils.io import load_json, load_yaml
from depthcloud.utils.logger import get_logger

LOGGER = get_logger(__name__)

T = TypeVar("T")


class LatestSlot(Generic[T]):
    """Single-slot holder: one writer replaces, many readers snapshot.

    Last value wins; there is no versioning or staleness check.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def clear(self) -> None:
        with self._lock:
            self._value = None

    def is_set(self) -> bool:
        return self.get() is not None


class IntrinsicsCell(LatestSlot[CameraIntrinsics]):
    """Latest camera intrinsics; unset until the first camera info arrives."""

    def require(self) -> CameraIntrinsics:
        value = self.get()
        if value is None:
            raise NotReadyError("No camera info, skipping point cloud conversion")
        return value


def _matrix(values: Sequence[float], size: int, name: str) -> list[float]:
    items = [float(v) for v in values]
    if len(items) != size:
        raise MalformedInputError(f"{name} must have {size} elements, got {len(items)}")
    return items


def intrinsics_from_camera_info(info: CameraInfo) -> CameraIntrinsics:
    """Read fx, fy, cx, cy from the projection matrix, falling back to K.

    The projection matrix describes the rectified image, which is what the
    pinhole model expects. An all-zero P means the camera was not rectified.
    """
    p = _matrix(info.p, 12, "P")
    if any(p):
        fx, cx, fy, cy = p[0], p[2], p[5], p[6]
    else:
        k = _matrix(info.k, 9, "K")
        fx, cx, fy, cy = k[0], k[2], k[4], k[5]
    return CameraIntrinsics(
        fx=fx, fy=fy, cx=cx, cy=cy, width=int(info.width), height=int(info.height)
    )


def _from_json(data: Mapping[str, Any]) -> CameraIntrinsics:
    # RealSense dump: {"intrinsics": {"depth": {"fx", "fy", "ppx", "ppy", ...}}}
    block: Mapping[str, Any] = data.get("intrinsics", {}).get("depth", data)
    try:
        cx = block["ppx"] if "ppx" in block else block["cx"]
        cy = block["ppy"] if "ppy" in block else block["cy"]
        return CameraIntrinsics(
            fx=float(block["fx"]),
            fy=float(block["fy"]),
            cx=float(cx),
            cy=float(cy),
            width=int(block.get("width", 0)),
            height=int(block.get("height", 0)),
        )
    except KeyError as exc:
        raise MalformedInputError(f"intrinsics JSON lacks {exc}") from None


def _from_yaml(data: Mapping[str, Any]) -> CameraIntrinsics:
    # camera_calibration format: camera_matrix / projection_matrix with data lists
    try:
        k = data["camera_matrix"]["data"]
    except (KeyError, TypeError):
        raise MalformedInputError("calibration YAML lacks camera_matrix.data") from None
    p = data.get("projection_matrix", {}).get("data", [0.0] * 12)
    info = CameraInfo(
        height=int(data.get("image_height", 0)),
        width=int(data.get("image_width", 0)),
        distortion_model=str(data.get("distortion_model", "plumb_bob")),
        k=tuple(k),
        p=tuple(p),
    )
    return intrinsics_from_camera_info(info)


def load_intrinsics(path: Path) -> CameraIntrinsics:
    """Load intrinsics from a RealSense-style JSON or a calibration YAML."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"intrinsics file not found: {path}")
    if path.suffix.lower() == ".json":
        intrinsics = _from_json(load_json(path))
    elif path.suffix.lower() in (".yaml", ".yml"):
        intrinsics = _from_yaml(load_yaml(path))
    else:
        raise MalformedInputError(f"unsupported intrinsics file type: {path.suffix}")
    LOGGER.tag(
        "INTR",
        f"{path.name}: fx={intrinsics.fx:.2f} fy={intrinsics.fy:.2f} "
        f"cx={intrinsics.cx:.2f} cy={intrinsics.cy:.2f}",
    )
    return intrinsics


def rescale_intrinsics(intrinsics: CameraIntrinsics, width: int, height: int) -> CameraIntrinsics:
    """Rescale calibration taken at another resolution to ``width`` x ``height``."""
    if intrinsics.width <= 0 or intrinsics.height <= 0:
        return intrinsics
    if intrinsics.width == width and intrinsics.height == height:
        return intrinsics
    sx, sy = width / float(intrinsics.width), height / float(intrinsics.height)
    LOGGER.tag(
        "INTR",
        f"scale ({intrinsics.width}x{intrinsics.height}) -> ({width}x{height}); "
        f"sx={sx:.6f} sy={sy:.6f}",
    )
    return CameraIntrinsics(
        fx=intrinsics.fx * sx,
        fy=intrinsics.fy * sy,
        cx=intrinsics.cx * sx,
        cy=intrinsics.cy * sy,
        width=width,
        height=height,
    )


__all__ = [
    "IntrinsicsCell",
    "LatestSlot",
    "intrinsics_from_camera_info",
    "load_intrinsics",
    "rescale_intrinsics",
]
