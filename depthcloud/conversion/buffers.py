# depthcloud/conversion/buffers.py
"""Validated depth and color buffers decoded from raw frame bytes."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from depthcloud.config import COLOR_ENCODING_LAYOUTS, ColorLayout, DepthEncoding
from depthcloud.conversion.policy import policy_for
from depthcloud.errors import MalformedInputError, UnsupportedEncodingError

_LAYOUT_CHANNELS: dict[ColorLayout, int] = {
    ColorLayout.MONO: 1,
    ColorLayout.BGR: 3,
    ColorLayout.BGRA: 4,
}


def _rows_view(
    data: bytes | bytearray | memoryview | npt.NDArray[np.uint8],
    *,
    height: int,
    width: int,
    step: int,
    itemsize: int,
    channels: int = 1,
) -> npt.NDArray[np.uint8]:
    """Check the byte budget and return a (height, step) uint8 view."""
    if height < 0 or width < 0:
        raise MalformedInputError(f"negative image size {width}x{height}")
    if step % itemsize:
        raise MalformedInputError(f"step {step} is not a multiple of element size {itemsize}")
    row_bytes = width * channels * itemsize
    if step < row_bytes:
        raise MalformedInputError(f"step {step} shorter than a row of {row_bytes} bytes")
    raw = np.frombuffer(data, dtype=np.uint8) if not isinstance(data, np.ndarray) else data
    raw = raw.reshape(-1)
    needed = step * height
    if raw.size < needed:
        raise MalformedInputError(
            f"buffer holds {raw.size} bytes, {width}x{height} with step {step} needs {needed}"
        )
    return raw[:needed].reshape(height, step)


@dataclass(frozen=True)
class DepthBuffer:
    """Row-major depth samples in their native dtype.

    ``samples`` has shape (height, width); padding beyond ``width`` in each
    row has been stripped.
    """

    samples: npt.NDArray
    encoding: str

    @property
    def height(self) -> int:
        return int(self.samples.shape[0])

    @property
    def width(self) -> int:
        return int(self.samples.shape[1])

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        *,
        height: int,
        width: int,
        step: int,
        encoding: str,
        is_bigendian: bool = False,
    ) -> "DepthBuffer":
        policy = policy_for(encoding)
        itemsize = policy.dtype.itemsize
        rows = _rows_view(data, height=height, width=width, step=step, itemsize=itemsize)
        wire = policy.dtype.newbyteorder(">" if is_bigendian else "<")
        samples = rows.view(wire)[:, :width].astype(policy.dtype)
        return cls(samples=samples, encoding=policy.encoding.value)

    @classmethod
    def from_array(cls, depth: npt.ArrayLike, encoding: str | None = None) -> "DepthBuffer":
        """Wrap a 2-D array; the encoding is inferred from its dtype if not given."""
        arr = np.asarray(depth)
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        if arr.ndim != 2:
            raise MalformedInputError(f"depth must be 2-D, got shape {arr.shape}")
        if encoding is None:
            if arr.dtype == np.uint16:
                encoding = DepthEncoding.TYPE_16UC1.value
            elif arr.dtype in (np.float32, np.float64):
                encoding = DepthEncoding.TYPE_32FC1.value
            else:
                raise UnsupportedEncodingError(str(arr.dtype))
        policy = policy_for(encoding)
        return cls(samples=arr.astype(policy.dtype, copy=False), encoding=policy.encoding.value)


@dataclass(frozen=True)
class ColorBuffer:
    """uint8 color pixels; channel order is read as BGR(A)."""

    pixels: npt.NDArray[np.uint8]
    layout: ColorLayout

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0]) if self.pixels.ndim >= 2 else 0

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1]) if self.pixels.ndim >= 2 else 0

    @classmethod
    def from_bytes(
        cls,
        data: bytes | bytearray | memoryview,
        *,
        height: int,
        width: int,
        step: int,
        encoding: str,
    ) -> "ColorBuffer":
        layout = COLOR_ENCODING_LAYOUTS.get(encoding, ColorLayout.UNSUPPORTED)
        if layout is ColorLayout.UNSUPPORTED:
            return cls(pixels=np.zeros((0, 0), dtype=np.uint8), layout=layout)
        channels = _LAYOUT_CHANNELS[layout]
        rows = _rows_view(
            data, height=height, width=width, step=step, itemsize=1, channels=channels
        )
        pixels = rows[:, : width * channels].reshape(height, width, channels)
        if channels == 1:
            pixels = pixels[:, :, 0]
        return cls(pixels=np.ascontiguousarray(pixels), layout=layout)

    @classmethod
    def from_array(cls, pixels: npt.ArrayLike) -> "ColorBuffer":
        """Wrap an image array; the layout follows its channel count."""
        arr = np.asarray(pixels)
        if arr.dtype != np.uint8:
            return cls(pixels=np.zeros((0, 0), dtype=np.uint8), layout=ColorLayout.UNSUPPORTED)
        if arr.ndim == 2:
            return cls(pixels=arr, layout=ColorLayout.MONO)
        if arr.ndim == 3:
            by_channels = {1: ColorLayout.MONO, 3: ColorLayout.BGR, 4: ColorLayout.BGRA}
            layout = by_channels.get(arr.shape[2], ColorLayout.UNSUPPORTED)
            if layout is ColorLayout.MONO:
                arr = arr[:, :, 0]
            return cls(pixels=arr, layout=layout)
        raise MalformedInputError(f"color image must be 2-D or 3-D, got shape {arr.shape}")


__all__ = ["ColorBuffer", "DepthBuffer"]
