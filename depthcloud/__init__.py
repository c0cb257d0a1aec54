# depthcloud/__init__.py
"""Depth image to organized point cloud conversion toolkit."""

from __future__ import annotations

from depthcloud.config import CameraIntrinsics, ConverterConfig, Settings, get_settings
from depthcloud.conversion import CloudAssembler, ColorBuffer, DepthBuffer, PointCloud, convert
from depthcloud.errors import (
    ConversionError,
    MalformedInputError,
    NotReadyError,
    UnsupportedEncodingError,
)
from depthcloud.node import DepthCloudNode

__all__ = [
    "CameraIntrinsics",
    "CloudAssembler",
    "ColorBuffer",
    "ConversionError",
    "ConverterConfig",
    "DepthBuffer",
    "DepthCloudNode",
    "MalformedInputError",
    "NotReadyError",
    "PointCloud",
    "Settings",
    "UnsupportedEncodingError",
    "convert",
    "get_settings",
]
