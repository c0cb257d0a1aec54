# depthcloud/conversion/policy.py
"""Per-encoding depth sample rules: validity, unit conversion, range handling.

Each policy exposes the same capability set (``valid``, ``to_meters``,
``from_meters``) and is picked at runtime from the frame's encoding tag, so
every incoming frame may carry a different encoding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

import numpy as np
import numpy.typing as npt

from depthcloud.config import (
    FIXED_POINT_METERS_PER_UNIT,
    FIXED_POINT_UNITS_PER_METER,
    DepthEncoding,
)
from depthcloud.errors import UnsupportedEncodingError


@dataclass(frozen=True)
class DepthPolicy:
    """Base policy; subclasses bind one encoding and its native dtype."""

    encoding: ClassVar[DepthEncoding]
    dtype: ClassVar[np.dtype]

    def valid(self, depth: npt.ArrayLike) -> npt.NDArray[np.bool_]:
        raise NotImplementedError

    def to_meters(self, depth: npt.ArrayLike) -> npt.NDArray[np.float32]:
        raise NotImplementedError

    def from_meters(self, meters: float) -> np.float32:
        """Native-unit value for ``meters``, as float32 for arithmetic."""
        raise NotImplementedError

    @property
    def unit_scale(self) -> np.float32:
        """Meters per native unit."""
        return np.float32(self.to_meters(np.ones((), dtype=self.dtype)))

    def resolve(
        self,
        depth: npt.ArrayLike,
        range_max: float = 0.0,
        use_quiet_nan: bool = False,
    ) -> Tuple[npt.NDArray[np.float32], npt.NDArray[np.bool_]]:
        """Apply validity and range rules to raw samples.

        Returns native-unit depth as float32 and a mask of samples that yield
        a point. Rejected samples hold 0 in the depth array.
        """
        raw = np.asarray(depth)
        native = raw.astype(np.float32)
        valid = self.valid(raw)
        if range_max != 0.0:
            threshold = self.from_meters(range_max)
            if use_quiet_nan:
                keep = valid & ~(native > threshold)
            else:
                # missing samples are reported at the range limit
                native = np.where(valid, np.minimum(native, threshold), threshold)
                keep = np.ones(native.shape, dtype=bool)
        else:
            keep = valid
        native = np.where(keep, native, np.float32(0.0)).astype(np.float32, copy=False)
        return native, keep

    def resolve_sample(
        self, raw: float, range_max: float = 0.0, use_quiet_nan: bool = False
    ) -> Optional[float]:
        """Distance in meters for one raw sample, or None when invalid."""
        native, keep = self.resolve(np.asarray(raw, dtype=self.dtype), range_max, use_quiet_nan)
        if not bool(keep):
            return None
        return float(self.to_meters(native.astype(self.dtype)))


@dataclass(frozen=True)
class FixedPointPolicy(DepthPolicy):
    """uint16 millimeters; zero means no measurement."""

    encoding: ClassVar[DepthEncoding] = DepthEncoding.TYPE_16UC1
    dtype: ClassVar[np.dtype] = np.dtype(np.uint16)

    def valid(self, depth: npt.ArrayLike) -> npt.NDArray[np.bool_]:
        return np.asarray(depth) != 0

    def to_meters(self, depth: npt.ArrayLike) -> npt.NDArray[np.float32]:
        return np.asarray(depth).astype(np.float32) * np.float32(FIXED_POINT_METERS_PER_UNIT)

    def from_meters(self, meters: float) -> np.float32:
        scaled = np.float32(meters) * np.float32(FIXED_POINT_UNITS_PER_METER) + np.float32(0.5)
        limit = np.iinfo(np.uint16).max
        return np.float32(np.floor(np.clip(scaled, 0, limit)))


@dataclass(frozen=True)
class FloatingPointPolicy(DepthPolicy):
    """float32 meters; NaN and infinities mean no measurement."""

    encoding: ClassVar[DepthEncoding] = DepthEncoding.TYPE_32FC1
    dtype: ClassVar[np.dtype] = np.dtype(np.float32)

    def valid(self, depth: npt.ArrayLike) -> npt.NDArray[np.bool_]:
        return np.isfinite(np.asarray(depth))

    def to_meters(self, depth: npt.ArrayLike) -> npt.NDArray[np.float32]:
        return np.asarray(depth).astype(np.float32)

    def from_meters(self, meters: float) -> np.float32:
        return np.float32(meters)


_POLICIES: dict[str, DepthPolicy] = {
    DepthEncoding.TYPE_16UC1.value: FixedPointPolicy(),
    DepthEncoding.TYPE_32FC1.value: FloatingPointPolicy(),
}


def policy_for(encoding: str | DepthEncoding) -> DepthPolicy:
    """Select the policy for a depth encoding tag."""
    key = encoding.value if isinstance(encoding, DepthEncoding) else str(encoding)
    try:
        return _POLICIES[key]
    except KeyError:
        raise UnsupportedEncodingError(key) from None


__all__ = [
    "DepthPolicy",
    "FixedPointPolicy",
    "FloatingPointPolicy",
    "policy_for",
]
