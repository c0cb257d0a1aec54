# depthcloud/conversion/__init__.py
"""Depth image to point cloud conversion core."""

from .assembler import CloudAssembler, convert
from .buffers import ColorBuffer, DepthBuffer
from .cloud import POINT_DTYPE, PointCloud, PointField
from .color import ColorSampler, pack_bgr
from .policy import DepthPolicy, FixedPointPolicy, FloatingPointPolicy, policy_for
from .unproject import PinholeUnprojector

__all__ = [
    "CloudAssembler",
    "ColorBuffer",
    "ColorSampler",
    "DepthBuffer",
    "DepthPolicy",
    "FixedPointPolicy",
    "FloatingPointPolicy",
    "POINT_DTYPE",
    "PinholeUnprojector",
    "PointCloud",
    "PointField",
    "convert",
    "pack_bgr",
    "policy_for",
]
