# depthcloud/node.py
"""Event-driven host around the converter.

Camera info, color and depth frames arrive as independent callbacks. The
latest camera info and the latest color image are kept in single-slot
cells; each depth frame is converted against whatever they hold at that
moment and the resulting cloud is handed to ``publisher``.
"""

from __future__ import annotations

from typing import Callable, Optional

from depthcloud.config import (
    NODE_NAME,
    NOT_READY_WARN_PERIOD_S,
    UNSUPPORTED_WARN_PERIOD_S,
    ConverterConfig,
    get_settings,
)
from depthcloud.conversion.assembler import CloudAssembler
from depthcloud.conversion.buffers import ColorBuffer
from depthcloud.conversion.cloud import PointCloud
from depthcloud.errors import (
    ConversionError,
    MalformedInputError,
    NotReadyError,
    UnsupportedEncodingError,
)
from depthcloud.intrinsics import IntrinsicsCell, LatestSlot, intrinsics_from_camera_info
from depthcloud.messages import CameraInfo, ColorFrame, DepthFrame
from depthcloud.utils.error_tracker import ErrorTracker
from depthcloud.utils.logger import get_logger

Publisher = Callable[[PointCloud], None]


class DepthCloudNode:
    """Convert each incoming depth frame and publish the cloud."""

    def __init__(
        self,
        publisher: Publisher,
        config: ConverterConfig | None = None,
        *,
        name: str = NODE_NAME,
    ) -> None:
        self.name = name
        self.config = config or get_settings().converter
        self.publisher = publisher
        self.assembler = CloudAssembler(self.config)
        self.intrinsics = IntrinsicsCell()
        self.color: LatestSlot[ColorBuffer] = LatestSlot()
        self.tracker = ErrorTracker(context=name)
        self.published = 0
        self._log = get_logger(name)
        self._log.tag(
            "NODE",
            f"range_max={self.config.range_max} use_quiet_nan={self.config.use_quiet_nan} "
            f"colorful={self.config.colorful} decimation={self.config.decimation}",
        )

    # ────────────── callbacks ──────────────
    def on_camera_info(self, info: CameraInfo) -> None:
        try:
            intrinsics = intrinsics_from_camera_info(info)
        except MalformedInputError as exc:
            self.tracker.record("camera_info", str(exc))
            return
        self.intrinsics.set(intrinsics)

    def on_color(self, frame: ColorFrame | ColorBuffer) -> None:
        if not self.config.colorful:
            return
        try:
            buffer = frame if isinstance(frame, ColorBuffer) else frame.to_buffer()
        except MalformedInputError as exc:
            # keep the previous image
            self.tracker.record("color", str(exc))
            return
        self.color.set(buffer)

    def on_depth(self, frame: DepthFrame) -> Optional[PointCloud]:
        """Convert and publish one frame; returns None when the frame is skipped."""
        try:
            cloud = self.process(frame)
        except NotReadyError as exc:
            self._log.throttled(f"{self.name}.not_ready", NOT_READY_WARN_PERIOD_S, str(exc))
            self.tracker.record("not_ready", str(exc), log=False)
            return None
        except UnsupportedEncodingError as exc:
            self._log.throttled(f"{self.name}.encoding", UNSUPPORTED_WARN_PERIOD_S, str(exc))
            self.tracker.record("encoding", str(exc), log=False)
            return None
        except ConversionError as exc:
            self.tracker.record("depth", str(exc))
            return None
        self.publisher(cloud)
        self.published += 1
        return cloud

    def process(self, frame: DepthFrame) -> PointCloud:
        """Convert without publishing; raises the per-frame conditions."""
        intrinsics = self.intrinsics.require()
        color = self.color.get() if self.config.colorful else None
        depth = frame.to_buffer()
        return self.assembler.convert(depth, intrinsics, color=color, header=frame.header)


__all__ = ["DepthCloudNode", "Publisher"]
