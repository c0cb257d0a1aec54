# depthcloud/utils/logger.py
"""Single-source Loguru setup: console sink plus optional file sink."""

from __future__ import annotations

import inspect
import sys
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger as _root_logger
from loguru._logger import Logger as LoguruLogger

from depthcloud.config import get_settings


# ---------- options ----------
@dataclass(slots=True)
class _LogOptions:
    level: str = "INFO"
    to_file: bool = False


_CONFIGURED = False
_LOG_FILE: Optional[Path] = None
_LOG_HANDLE: Optional[TextIO] = None
_LOGGER: Optional[LoguruLogger] = None

# key -> monotonic time of the last emitted message
_THROTTLE: dict[str, float] = {}
_THROTTLE_LOCK = threading.Lock()


def _default_options() -> _LogOptions:
    settings = get_settings()
    return _LogOptions(level=settings.logging.level, to_file=settings.logging.to_file)


# ---------- sinks as callables ----------
def _console_sink(msg) -> None:
    r = msg.record
    module = r["extra"].get("module", r.get("name", "unknown"))
    sys.stderr.write(
        f"{r['time']:%H:%M:%S} | {r['level'].name: <3.3} | {module} | {r['message']}\n"
    )


def _make_file_sink(fh: TextIO):
    def _file_sink(msg) -> None:
        r = msg.record
        module = r["extra"].get("module", r.get("name", "unknown"))
        fh.write(
            f"{r['time'].isoformat()} | {r['level'].name} | {module} | {r['message']}\n"
        )
        fh.flush()

    return _file_sink


def _configure_logger(level: str | None = None, to_file: bool | None = None) -> None:
    global _CONFIGURED, _LOG_FILE, _LOG_HANDLE, _LOGGER

    options = _default_options()
    level = level or options.level
    to_file = options.to_file if to_file is None else to_file

    _root_logger.remove()
    if _LOG_HANDLE is not None:
        _LOG_HANDLE.close()
        _LOG_HANDLE = None
        _LOG_FILE = None

    def _inject_extras(record):
        record["extra"].setdefault("module", record.get("name", "unknown"))

    logger = _root_logger.patch(_inject_extras)
    logger.add(_console_sink, level=level, catch=True)

    if to_file:
        log_dir = get_settings().paths.logs_root
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = log_dir / f"depthcloud_{timestamp}.log"
        fh = file_path.open("a", encoding="utf-8")
        logger.add(_make_file_sink(fh), level=level, catch=True)
        _LOG_FILE = file_path
        _LOG_HANDLE = fh

    _LOGGER = logger
    _CONFIGURED = True


def _should_emit(key: str, period_s: float) -> bool:
    now = time.monotonic()
    with _THROTTLE_LOCK:
        last = _THROTTLE.get(key)
        if last is not None and now - last < period_s:
            return False
        _THROTTLE[key] = now
    return True


def reset_throttle() -> None:
    with _THROTTLE_LOCK:
        _THROTTLE.clear()


def get_logger(name: str | None = None) -> LoguruLogger:
    if not _CONFIGURED:
        _configure_logger()

    module_name = name
    frame = inspect.currentframe()
    if module_name is None and frame is not None:
        caller_frame = frame.f_back
        if caller_frame is not None:
            module = inspect.getmodule(caller_frame)
            if module is not None and module.__name__ != "__main__":
                module_name = module.__name__

    bound = _LOGGER.bind(module=module_name or "unknown")

    def _tag(label: str, msg: str | None = None, *args, level: str = "info") -> None:
        text = f"[{label}] " + (msg or "")
        if args:
            text = text.format(*args)
        getattr(bound, level, bound.info)(text)

    def _throttled(
        key: str, period_s: float, msg: str, *args, level: str = "warning"
    ) -> bool:
        """Emit ``msg`` at most once per ``period_s`` seconds for ``key``."""
        if not _should_emit(key, period_s):
            return False
        getattr(bound, level, bound.warning)(msg, *args)
        return True

    setattr(bound, "tag", _tag)
    setattr(bound, "throttled", _throttled)
    return bound


def configure(level: str | None = None, to_file: bool | None = None) -> None:
    _configure_logger(level=level, to_file=to_file)


def log_file() -> Optional[Path]:
    return _LOG_FILE


__all__ = [
    "configure",
    "get_logger",
    "log_file",
    "reset_throttle",
]
