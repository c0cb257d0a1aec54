# depthcloud/errors.py
"""Per-frame conversion conditions surfaced to the caller."""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for conditions that stop processing of one frame."""


class NotReadyError(ConversionError):
    """Camera intrinsics have not been received yet."""


class UnsupportedEncodingError(ConversionError):
    """Depth image encoding is neither 16UC1 nor 32FC1."""

    def __init__(self, encoding: str) -> None:
        super().__init__(f"Depth image has unsupported encoding [{encoding}]")
        self.encoding = encoding


class MalformedInputError(ConversionError, ValueError):
    """Buffer or calibration data inconsistent with its declared shape."""


__all__ = [
    "ConversionError",
    "MalformedInputError",
    "NotReadyError",
    "UnsupportedEncodingError",
]
