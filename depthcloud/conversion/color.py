# depthcloud/conversion/color.py
"""Packed RGB lookup from an optional color image."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from depthcloud.config import ColorLayout
from depthcloud.conversion.buffers import ColorBuffer


def pack_bgr(pixels: npt.NDArray[np.uint8]) -> npt.NDArray[np.uint32]:
    """Pack (..., >=3) BGR(A) pixels into 0x00RRGGBB."""
    b = pixels[..., 0].astype(np.uint32)
    g = pixels[..., 1].astype(np.uint32)
    r = pixels[..., 2].astype(np.uint32)
    return (r << 16) | (g << 8) | b


class ColorSampler:
    """Look up the packed color for depth pixel (u, v).

    Missing buffers, unsupported layouts and coordinates outside the color
    image all give 0. Grayscale images are masked into a zero accumulator,
    so they also give 0.
    """

    def __init__(self, color: ColorBuffer | None = None, *, legacy_color: bool = False) -> None:
        self.color = color
        self.legacy_color = legacy_color

    def sample(self, u: int, v: int) -> int:
        grid = self.sample_grid(np.array([u]), np.array([v]))
        return int(grid[0, 0])

    def sample_grid(
        self, us: npt.NDArray[np.integer], vs: npt.NDArray[np.integer]
    ) -> npt.NDArray[np.uint32]:
        """Colors for every (v, u) in rows ``vs`` x columns ``us``.

        ``us`` and ``vs`` must be non-negative and increasing.
        """
        rgb = np.zeros((len(vs), len(us)), dtype=np.uint32)
        color = self.color
        if color is None:
            return rgb

        if color.layout is ColorLayout.MONO:
            # 0 & gray
            rgb &= 0
            return rgb

        if color.layout is ColorLayout.BGR and self.legacy_color:
            if color.pixels.size:
                rgb[:] = np.uint32(color.pixels[0, 0, 0])
            return rgb

        if color.layout in (ColorLayout.BGR, ColorLayout.BGRA):
            us = np.asarray(us)
            vs = np.asarray(vs)
            n_rows = int(np.count_nonzero(vs < color.height))
            n_cols = int(np.count_nonzero(us < color.width))
            if n_rows and n_cols:
                block = color.pixels[np.ix_(vs[:n_rows], us[:n_cols])]
                rgb[:n_rows, :n_cols] = pack_bgr(block)
        return rgb


__all__ = ["ColorSampler", "pack_bgr"]
