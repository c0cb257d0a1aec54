# depthcloud/conversion/assembler.py
"""Depth image to organized point cloud conversion."""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from depthcloud.config import POINT_STEP, QUIET_NAN_BITS, CameraIntrinsics, ConverterConfig
from depthcloud.conversion.buffers import ColorBuffer, DepthBuffer
from depthcloud.conversion.cloud import WORD_INDEX, PointCloud
from depthcloud.conversion.color import ColorSampler
from depthcloud.conversion.policy import policy_for
from depthcloud.conversion.unproject import PinholeUnprojector
from depthcloud.errors import NotReadyError


def _bits(values: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(values, dtype=np.float32).view(np.uint32)


class CloudAssembler:
    """Sample the depth grid at a fixed stride and emit one record per cell.

    Cell (r, c) of the output is source pixel (v, u) = (r * d, c * d) with
    d the decimation. Samples rejected by the depth policy produce records
    whose four fields are all quiet NaN.
    """

    def __init__(self, config: ConverterConfig | None = None) -> None:
        self.config = config or ConverterConfig()

    def convert(
        self,
        depth: DepthBuffer,
        intrinsics: Optional[CameraIntrinsics],
        color: ColorBuffer | None = None,
        header: Any = None,
    ) -> PointCloud:
        if intrinsics is None:
            raise NotReadyError("No camera info, skipping point cloud conversion")
        policy = policy_for(depth.encoding)
        cfg = self.config
        step = int(cfg.decimation)

        rows, cols = depth.height // step, depth.width // step
        vs = np.arange(rows, dtype=np.int64) * step
        us = np.arange(cols, dtype=np.int64) * step
        raw = depth.samples[: rows * step : step, : cols * step : step]

        native, keep = policy.resolve(raw, cfg.range_max, cfg.use_quiet_nan)
        unprojector = PinholeUnprojector.from_intrinsics(intrinsics, policy)
        x, y, z = unprojector.unproject(us[np.newaxis, :], vs[:, np.newaxis], native)
        rgb = ColorSampler(color, legacy_color=cfg.legacy_color).sample_grid(us, vs)

        bad = np.uint32(QUIET_NAN_BITS)
        words = np.zeros((rows, cols, POINT_STEP // 4), dtype=np.uint32)
        words[..., WORD_INDEX["x"]] = np.where(keep, _bits(x), bad)
        words[..., WORD_INDEX["y"]] = np.where(keep, _bits(y), bad)
        words[..., WORD_INDEX["z"]] = np.where(keep, _bits(z), bad)
        words[..., WORD_INDEX["rgb"]] = np.where(keep, rgb, bad)
        return PointCloud.from_words(words, header=header)


def convert(
    depth: DepthBuffer,
    intrinsics: Optional[CameraIntrinsics],
    color: ColorBuffer | None = None,
    config: ConverterConfig | None = None,
    header: Any = None,
) -> PointCloud:
    """One-shot conversion with a throwaway assembler."""
    return CloudAssembler(config).convert(depth, intrinsics, color=color, header=header)


__all__ = ["CloudAssembler", "convert"]
