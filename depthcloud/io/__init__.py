# depthcloud/io/__init__.py
"""IO utilities for depth frames and point clouds."""

from .frames import FramePaths, collect_frames, load_color, load_depth

__all__ = ["FramePaths", "collect_frames", "load_color", "load_depth"]
