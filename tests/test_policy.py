# tests/test_policy.py
"""Tests for per-encoding depth sample rules."""

from __future__ import annotations

import numpy as np
import pytest

from depthcloud.config import DepthEncoding
from depthcloud.conversion.policy import (
    FixedPointPolicy,
    FloatingPointPolicy,
    policy_for,
)
from depthcloud.errors import UnsupportedEncodingError


def test_policy_selected_by_encoding_tag() -> None:
    assert isinstance(policy_for("16UC1"), FixedPointPolicy)
    assert isinstance(policy_for(DepthEncoding.TYPE_32FC1), FloatingPointPolicy)


@pytest.mark.parametrize("encoding", ["8UC1", "rgb8", "16SC1", ""])
def test_unsupported_encoding_rejected(encoding: str) -> None:
    with pytest.raises(UnsupportedEncodingError, match="unsupported encoding"):
        policy_for(encoding)


def test_fixed_point_units() -> None:
    policy = FixedPointPolicy()
    assert policy.unit_scale == np.float32(0.001)
    assert float(policy.to_meters(np.uint16(1000))) == pytest.approx(1.0)
    assert policy.from_meters(1.0) == 1000
    # rounds half up
    assert policy.from_meters(1.0006) == 1001
    assert policy.from_meters(1.0004) == 1000


def test_fixed_point_threshold_saturates() -> None:
    assert FixedPointPolicy().from_meters(100.0) == 65535


def test_fixed_point_validity() -> None:
    policy = FixedPointPolicy()
    valid = policy.valid(np.array([0, 1, 65535], dtype=np.uint16))
    assert valid.tolist() == [False, True, True]


def test_floating_point_validity() -> None:
    policy = FloatingPointPolicy()
    samples = np.array([np.nan, np.inf, -np.inf, 0.0, 2.5], dtype=np.float32)
    assert policy.valid(samples).tolist() == [False, False, False, True, True]


def test_invalid_without_range_limit() -> None:
    policy = FixedPointPolicy()
    assert policy.resolve_sample(0, range_max=0.0, use_quiet_nan=False) is None
    assert policy.resolve_sample(0, range_max=0.0, use_quiet_nan=True) is None


def test_invalid_substituted_with_range_max_when_clamping() -> None:
    assert FixedPointPolicy().resolve_sample(0, range_max=3.0, use_quiet_nan=False) == pytest.approx(3.0)
    assert FloatingPointPolicy().resolve_sample(np.nan, range_max=3.0, use_quiet_nan=False) == 3.0


def test_invalid_rejected_with_quiet_nan() -> None:
    assert FloatingPointPolicy().resolve_sample(np.nan, range_max=3.0, use_quiet_nan=True) is None


def test_out_of_range_clamped() -> None:
    assert FloatingPointPolicy().resolve_sample(10.0, range_max=5.0, use_quiet_nan=False) == 5.0
    assert FixedPointPolicy().resolve_sample(7000, range_max=5.0, use_quiet_nan=False) == pytest.approx(5.0)


def test_out_of_range_rejected() -> None:
    assert FloatingPointPolicy().resolve_sample(10.0, range_max=5.0, use_quiet_nan=True) is None
    assert FixedPointPolicy().resolve_sample(5001, range_max=5.0, use_quiet_nan=True) is None


def test_sample_at_threshold_kept() -> None:
    assert FixedPointPolicy().resolve_sample(5000, range_max=5.0, use_quiet_nan=True) == pytest.approx(5.0)


def test_in_range_sample_untouched() -> None:
    assert FloatingPointPolicy().resolve_sample(2.25, range_max=5.0, use_quiet_nan=True) == 2.25


def test_resolve_zeroes_rejected_samples() -> None:
    native, keep = FixedPointPolicy().resolve(
        np.array([[0, 1500], [9000, 200]], dtype=np.uint16), range_max=2.0, use_quiet_nan=True
    )
    assert keep.tolist() == [[False, True], [False, True]]
    assert native.dtype == np.float32
    assert native.tolist() == [[0.0, 1500.0], [0.0, 200.0]]
