# depthcloud/config.py
"""Centralized configuration for the depthcloud toolkit.

All constants, settings, and configuration dataclasses are defined here.
Modules should import from this single source of truth.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final, Tuple

from depthcloud.errors import MalformedInputError

# ============================================================================
# PROJECT PATHS
# ============================================================================

BASE_DIR: Final[Path] = Path(__file__).resolve().parent.parent


def _env_path(key: str, default: Path) -> Path:
    """Resolve path from environment variable with fallback."""
    value = os.getenv(key)
    return Path(value).expanduser() if value else default


def _env_str(key: str, default: str) -> str:
    """Resolve string from environment variable with fallback."""
    value = os.getenv(key)
    return value if value is not None else default


def _env_int(key: str, default: int) -> int:
    """Resolve integer from environment variable with fallback."""
    value = os.getenv(key)
    return int(value) if value is not None else default


def _env_float(key: str, default: float) -> float:
    """Resolve float from environment variable with fallback."""
    value = os.getenv(key)
    return float(value) if value is not None else default


def _env_bool(key: str, default: bool) -> bool:
    """Resolve boolean from environment variable with fallback."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# ============================================================================
# CONVERSION CONSTANTS
# ============================================================================

DEFAULT_DECIMATION: Final[int] = 2
DEFAULT_RANGE_MAX_M: Final[float] = 0.0
DEFAULT_USE_QUIET_NAN: Final[bool] = True
DEFAULT_COLORFUL: Final[bool] = False

# uint16 depth images carry millimeters
FIXED_POINT_METERS_PER_UNIT: Final[float] = 0.001
FIXED_POINT_UNITS_PER_METER: Final[float] = 1000.0

# ============================================================================
# POINT RECORD LAYOUT
# ============================================================================

POINT_FIELD_OFFSETS: Final[Tuple[Tuple[str, int], ...]] = (
    ("x", 0),
    ("y", 4),
    ("z", 8),
    ("rgb", 16),
)
POINT_STEP: Final[int] = 32
QUIET_NAN_BITS: Final[int] = 0x7FC00000

# ============================================================================
# HOST NODE CONSTANTS
# ============================================================================

NODE_NAME: Final[str] = "depthimage_to_pointcloud2_node"
UNSUPPORTED_WARN_PERIOD_S: Final[float] = 5.0
NOT_READY_WARN_PERIOD_S: Final[float] = 1.0

# ============================================================================
# FILE NAMING CONSTANTS
# ============================================================================

DEPTH_SUFFIXES: Final[Tuple[str, ...]] = (".npy", ".png")
COLOR_SUFFIXES: Final[Tuple[str, ...]] = (".png", ".jpg", ".jpeg")
FILENAME_DEPTH_ROLE: Final[str] = "depth"
FILENAME_COLOR_ROLE: Final[str] = "rgb"

# ============================================================================
# ENUMS
# ============================================================================


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DepthEncoding(str, Enum):
    """Depth image encodings accepted by the converter."""

    TYPE_16UC1 = "16UC1"
    TYPE_32FC1 = "32FC1"


class ColorLayout(str, Enum):
    """Pixel layout of the color image fused into the cloud."""

    MONO = "mono"
    BGR = "bgr"
    BGRA = "bgra"
    UNSUPPORTED = "unsupported"


class CloudFormat(str, Enum):
    """Output file format for offline conversion."""

    PLY = "ply"
    PCD = "pcd"
    NPY = "npy"


# Color encodings grouped by channel count; channel order is read as BGR
COLOR_ENCODING_LAYOUTS: Final[dict[str, ColorLayout]] = {
    "mono8": ColorLayout.MONO,
    "8UC1": ColorLayout.MONO,
    "bgr8": ColorLayout.BGR,
    "rgb8": ColorLayout.BGR,
    "8UC3": ColorLayout.BGR,
    "bgra8": ColorLayout.BGRA,
    "rgba8": ColorLayout.BGRA,
    "8UC4": ColorLayout.BGRA,
}

# ============================================================================
# DATACLASSES - Core Data Types
# ============================================================================


@dataclass(frozen=True)
class CameraIntrinsics:
    """Pinhole camera intrinsics.

    Width and height are informative only; the converter never checks them
    against the depth image.
    """

    fx: float
    fy: float
    cx: float
    cy: float
    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        """Validate focal lengths and principal point."""
        for name in ("fx", "fy"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0.0:
                raise MalformedInputError(f"{name} must be a positive finite number, got {value}")
        for name in ("cx", "cy"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise MalformedInputError(f"{name} must be finite, got {value}")

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return (fx, fy, cx, cy)."""
        return (self.fx, self.fy, self.cx, self.cy)


# ============================================================================
# DATACLASSES - Configuration Sections
# ============================================================================


@dataclass(frozen=True)
class ConverterConfig:
    """Depth-to-cloud conversion parameters.

    Attributes:
        range_max: Maximum range in meters, 0 disables range handling
        use_quiet_nan: Reject out-of-range samples as NaN instead of clamping
        colorful: Fuse the latest color image into the cloud
        decimation: Sampling stride over rows and columns
        legacy_color: Color every point from channel 0 of pixel (0, 0) on 3-channel images
    """

    range_max: float = DEFAULT_RANGE_MAX_M
    use_quiet_nan: bool = DEFAULT_USE_QUIET_NAN
    colorful: bool = DEFAULT_COLORFUL
    decimation: int = DEFAULT_DECIMATION
    legacy_color: bool = False

    def __post_init__(self) -> None:
        if int(self.decimation) != self.decimation or self.decimation < 1:
            raise ValueError(f"decimation must be a positive integer, got {self.decimation}")
        if not math.isfinite(self.range_max) or self.range_max < 0.0:
            raise ValueError(f"range_max must be >= 0, got {self.range_max}")


@dataclass(frozen=True)
class PathsConfig:
    """File system paths configuration."""

    data_root: Path
    output_root: Path
    logs_root: Path


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = LogLevel.INFO.value
    to_file: bool = False


# ============================================================================
# MAIN CONFIGURATION
# ============================================================================


@dataclass(frozen=True)
class Settings:
    """Main application configuration.

    Instances are immutable (frozen=True) to prevent accidental mutation.
    """

    paths: PathsConfig
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_settings() -> Settings:
    """Factory function to create Settings with environment variable overrides.

    Environment variables:
        DEPTHCLOUD_DATA_ROOT: Base data directory
        DEPTHCLOUD_OUTPUT_ROOT: Directory for converted clouds
        DEPTHCLOUD_LOGS_ROOT: Logs directory
        DEPTHCLOUD_RANGE_MAX: Maximum range in meters
        DEPTHCLOUD_USE_QUIET_NAN: Reject out-of-range samples (bool)
        DEPTHCLOUD_COLORFUL: Fuse color (bool)
        DEPTHCLOUD_DECIMATION: Sampling stride
        DEPTHCLOUD_LOG_LEVEL: Logging level
        DEPTHCLOUD_LOG_TO_FILE: Enable the file sink (bool)
    """
    data_root = _env_path("DEPTHCLOUD_DATA_ROOT", BASE_DIR / "data")
    paths = PathsConfig(
        data_root=data_root,
        output_root=_env_path("DEPTHCLOUD_OUTPUT_ROOT", data_root / "clouds"),
        logs_root=_env_path("DEPTHCLOUD_LOGS_ROOT", data_root / "logs"),
    )

    converter = ConverterConfig(
        range_max=_env_float("DEPTHCLOUD_RANGE_MAX", DEFAULT_RANGE_MAX_M),
        use_quiet_nan=_env_bool("DEPTHCLOUD_USE_QUIET_NAN", DEFAULT_USE_QUIET_NAN),
        colorful=_env_bool("DEPTHCLOUD_COLORFUL", DEFAULT_COLORFUL),
        decimation=_env_int("DEPTHCLOUD_DECIMATION", DEFAULT_DECIMATION),
    )

    logging = LoggingConfig(
        level=_env_str("DEPTHCLOUD_LOG_LEVEL", LogLevel.INFO.value).upper(),
        to_file=_env_bool("DEPTHCLOUD_LOG_TO_FILE", False),
    )

    return Settings(paths=paths, converter=converter, logging=logging)


# ============================================================================
# MODULE EXPORTS
# ============================================================================

__all__ = [
    # Factory
    "get_settings",
    # Main config
    "Settings",
    # Config sections
    "ConverterConfig",
    "PathsConfig",
    "LoggingConfig",
    # Core data types
    "CameraIntrinsics",
    # Enums
    "LogLevel",
    "DepthEncoding",
    "ColorLayout",
    "CloudFormat",
    # Constants (selected for external use)
    "BASE_DIR",
    "COLOR_ENCODING_LAYOUTS",
    "DEFAULT_DECIMATION",
    "FIXED_POINT_METERS_PER_UNIT",
    "FIXED_POINT_UNITS_PER_METER",
    "NODE_NAME",
    "POINT_FIELD_OFFSETS",
    "POINT_STEP",
    "QUIET_NAN_BITS",
    "UNSUPPORTED_WARN_PERIOD_S",
]
