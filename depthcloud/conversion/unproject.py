# depthcloud/conversion/unproject.py
"""Pinhole back-projection of pixels with depth into camera-frame points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import numpy.typing as npt

from depthcloud.config import CameraIntrinsics
from depthcloud.conversion.policy import DepthPolicy


@dataclass(frozen=True)
class PinholeUnprojector:
    """Precomputed per-conversion constants for the pinhole model.

    ``constant_x`` and ``constant_y`` fold the depth unit into the inverse
    focal lengths, so native samples are used directly::

        x = (u - cx) * depth * constant_x
        y = (v - cy) * depth * constant_y
        z = to_meters(depth)

    All arithmetic runs in float32. No distortion correction is applied.
    """

    center_x: np.float32
    center_y: np.float32
    constant_x: np.float32
    constant_y: np.float32
    policy: DepthPolicy

    @classmethod
    def from_intrinsics(cls, intrinsics: CameraIntrinsics, policy: DepthPolicy) -> "PinholeUnprojector":
        unit_scaling = float(policy.unit_scale)
        return cls(
            center_x=np.float32(intrinsics.cx),
            center_y=np.float32(intrinsics.cy),
            constant_x=np.float32(unit_scaling / intrinsics.fx),
            constant_y=np.float32(unit_scaling / intrinsics.fy),
            policy=policy,
        )

    def unproject(
        self,
        u: npt.ArrayLike,
        v: npt.ArrayLike,
        depth: npt.ArrayLike,
    ) -> Tuple[npt.NDArray[np.float32], npt.NDArray[np.float32], npt.NDArray[np.float32]]:
        """Map pixel columns ``u``, rows ``v`` and native depth to (x, y, z).

        Inputs broadcast against each other, so a row vector of columns and a
        column vector of rows cover a whole grid.
        """
        d = np.asarray(depth, dtype=np.float32)
        du = np.asarray(u, dtype=np.float32) - self.center_x
        dv = np.asarray(v, dtype=np.float32) - self.center_y
        x = du * d * self.constant_x
        y = dv * d * self.constant_y
        z = self.policy.to_meters(d)
        shape = np.broadcast_shapes(x.shape, y.shape, z.shape)
        return (
            np.broadcast_to(x, shape).astype(np.float32),
            np.broadcast_to(y, shape).astype(np.float32),
            np.broadcast_to(z, shape).astype(np.float32),
        )


__all__ = ["PinholeUnprojector"]
