# tests/test_unproject.py
"""Tests for pinhole back-projection."""

from __future__ import annotations

import numpy as np
import pytest

from depthcloud.config import CameraIntrinsics
from depthcloud.conversion.policy import FixedPointPolicy, FloatingPointPolicy
from depthcloud.conversion.unproject import PinholeUnprojector


def test_constants_fold_unit_scale(sample_intrinsics: CameraIntrinsics) -> None:
    mm = PinholeUnprojector.from_intrinsics(sample_intrinsics, FixedPointPolicy())
    m = PinholeUnprojector.from_intrinsics(sample_intrinsics, FloatingPointPolicy())
    # the float32 unit scale is widened before dividing by the focal length
    assert mm.constant_x == np.float32(float(np.float32(0.001)) / 100.0)
    assert mm.constant_y == np.float32(float(np.float32(0.001)) / 100.0)
    assert m.constant_y == np.float32(1.0 / 100.0)
    assert mm.center_x == np.float32(2.0)


def test_principal_point_maps_to_optical_axis(sample_intrinsics: CameraIntrinsics) -> None:
    unprojector = PinholeUnprojector.from_intrinsics(sample_intrinsics, FloatingPointPolicy())
    x, y, z = unprojector.unproject(2, 2, np.float32(3.0))
    assert float(x) == 0.0
    assert float(y) == 0.0
    assert float(z) == 3.0


@pytest.mark.parametrize("u,v,depth", [(0, 0, 0.5), (7, 3, 1.25), (639, 479, 9.0)])
def test_unprojection_inverts_projection(u: int, v: int, depth: float) -> None:
    intrinsics = CameraIntrinsics(fx=525.0, fy=520.0, cx=319.5, cy=239.5)
    unprojector = PinholeUnprojector.from_intrinsics(intrinsics, FloatingPointPolicy())
    x, y, z = unprojector.unproject(u, v, np.float32(depth))
    assert float(z) == np.float32(depth)
    assert float(x) * intrinsics.fx / float(z) + intrinsics.cx == pytest.approx(u, abs=1e-3)
    assert float(y) * intrinsics.fy / float(z) + intrinsics.cy == pytest.approx(v, abs=1e-3)


def test_grid_broadcast_shapes(sample_intrinsics: CameraIntrinsics) -> None:
    unprojector = PinholeUnprojector.from_intrinsics(sample_intrinsics, FixedPointPolicy())
    us = np.array([0, 2, 4])
    vs = np.array([0, 2])
    depth = np.full((2, 3), 1000.0, dtype=np.float32)
    x, y, z = unprojector.unproject(us[np.newaxis, :], vs[:, np.newaxis], depth)
    assert x.shape == y.shape == z.shape == (2, 3)
    assert x.dtype == np.float32
    assert x[0].tolist() == pytest.approx([-0.02, 0.0, 0.02])
    assert y[:, 0].tolist() == pytest.approx([-0.02, 0.0])


def test_unprojection_is_deterministic(sample_intrinsics: CameraIntrinsics) -> None:
    unprojector = PinholeUnprojector.from_intrinsics(sample_intrinsics, FixedPointPolicy())
    depth = np.arange(1, 13, dtype=np.float32).reshape(3, 4) * 111
    first = unprojector.unproject(np.arange(4)[np.newaxis, :], np.arange(3)[:, np.newaxis], depth)
    second = unprojector.unproject(np.arange(4)[np.newaxis, :], np.arange(3)[:, np.newaxis], depth)
    for a, b in zip(first, second):
        assert a.tobytes() == b.tobytes()
