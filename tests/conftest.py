# tests/conftest.py
"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from depthcloud.config import CameraIntrinsics, ConverterConfig
from depthcloud.conversion.buffers import DepthBuffer
from depthcloud.messages import CameraInfo, DepthFrame, Header
from depthcloud.utils.logger import reset_throttle


@pytest.fixture(autouse=True)
def _clear_throttle() -> None:
    reset_throttle()


@pytest.fixture
def sample_intrinsics() -> CameraIntrinsics:
    """fx = fy = 100 with the principal point at (2, 2)."""
    return CameraIntrinsics(fx=100.0, fy=100.0, cx=2.0, cy=2.0, width=4, height=4)


@pytest.fixture
def depth_mm() -> np.ndarray:
    """4x4 uint16 image, every sample 1000 mm."""
    return np.full((4, 4), 1000, dtype=np.uint16)


@pytest.fixture
def depth_buffer_mm(depth_mm: np.ndarray) -> DepthBuffer:
    return DepthBuffer.from_array(depth_mm)


@pytest.fixture
def plain_config() -> ConverterConfig:
    """No range limit, reference decimation."""
    return ConverterConfig(range_max=0.0, use_quiet_nan=True, decimation=2)


@pytest.fixture
def sample_header() -> Header:
    return Header(stamp_sec=12, stamp_nanosec=345, frame_id="depth_optical")


@pytest.fixture
def sample_camera_info() -> CameraInfo:
    return CameraInfo(
        height=4,
        width=4,
        k=(100.0, 0.0, 2.0, 0.0, 100.0, 2.0, 0.0, 0.0, 1.0),
        p=(100.0, 0.0, 2.0, 0.0, 0.0, 100.0, 2.0, 0.0, 0.0, 0.0, 1.0, 0.0),
    )


@pytest.fixture
def make_depth_frame(sample_header: Header) -> Callable[..., DepthFrame]:
    """Serialize an array into a DepthFrame the way the wire carries it."""

    def _make(
        depth: np.ndarray,
        encoding: str | None = None,
        *,
        padding: int = 0,
        is_bigendian: bool = False,
    ) -> DepthFrame:
        if encoding is None:
            encoding = "16UC1" if depth.dtype == np.uint16 else "32FC1"
        wire = depth.astype(depth.dtype.newbyteorder(">" if is_bigendian else "<"))
        height, width = depth.shape
        row = width * depth.dtype.itemsize
        step = row + padding
        data = bytearray(step * height)
        for v in range(height):
            data[v * step : v * step + row] = wire[v].tobytes()
        return DepthFrame(
            header=sample_header,
            height=height,
            width=width,
            encoding=encoding,
            step=step,
            data=bytes(data),
            is_bigendian=is_bigendian,
        )

    return _make
