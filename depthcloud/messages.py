# depthcloud/messages.py
"""Frame records exchanged with the host middleware."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from depthcloud.conversion.buffers import ColorBuffer, DepthBuffer


@dataclass(frozen=True)
class Header:
    """Timestamp and frame id, copied unchanged from depth frame to cloud."""

    stamp_sec: int = 0
    stamp_nanosec: int = 0
    frame_id: str = ""


@dataclass(frozen=True)
class DepthFrame:
    header: Header
    height: int
    width: int
    encoding: str
    step: int
    data: bytes
    is_bigendian: bool = False

    def to_buffer(self) -> DepthBuffer:
        return DepthBuffer.from_bytes(
            self.data,
            height=self.height,
            width=self.width,
            step=self.step,
            encoding=self.encoding,
            is_bigendian=self.is_bigendian,
        )


@dataclass(frozen=True)
class ColorFrame:
    header: Header
    height: int
    width: int
    encoding: str
    step: int
    data: bytes

    def to_buffer(self) -> ColorBuffer:
        return ColorBuffer.from_bytes(
            self.data,
            height=self.height,
            width=self.width,
            step=self.step,
            encoding=self.encoding,
        )


@dataclass(frozen=True)
class CameraInfo:
    """Calibration record; ``k`` is the 3x3 and ``p`` the 3x4 matrix, row-major."""

    header: Header = field(default_factory=Header)
    height: int = 0
    width: int = 0
    distortion_model: str = "plumb_bob"
    k: Tuple[float, ...] = (0.0,) * 9
    p: Tuple[float, ...] = (0.0,) * 12


__all__ = ["CameraInfo", "ColorFrame", "DepthFrame", "Header"]
