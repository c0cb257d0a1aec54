# depthcloud/utils/__init__.py
"""Utility package re-exporting shared helpers for depthcloud."""

from depthcloud.utils.error_tracker import ErrorTracker
from depthcloud.utils.io import (
    atomic_write_json,
    ensure_directory,
    load_json,
    load_yaml,
)
from depthcloud.utils.logger import get_logger
from depthcloud.utils.progress import track

__all__ = [
    "ErrorTracker",
    "atomic_write_json",
    "ensure_directory",
    "get_logger",
    "load_json",
    "load_yaml",
    "track",
]
