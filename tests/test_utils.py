# tests/test_utils.py
"""Tests for shared utilities: error tracking, throttled logging, file helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from depthcloud.utils.error_tracker import ErrorTracker
from depthcloud.utils.io import atomic_write_json, load_json
from depthcloud.utils import logger as logger_module
from depthcloud.utils.logger import configure, get_logger, log_file


def test_error_tracker_counts_and_clears() -> None:
    tracker = ErrorTracker(context="test")
    tracker.record("depth", "bad step")
    tracker.record("depth", "short buffer", log=False)
    tracker.record("color", "unknown encoding")
    assert tracker.count("depth") == 2
    assert tracker.count() == 3
    assert tracker.summary() == {
        "depth": ["bad step", "short buffer"],
        "color": ["unknown encoding"],
    }
    tracker.clear()
    assert tracker.count() == 0
    assert tracker.summary() == {}


def test_error_tracker_scope_reraises() -> None:
    tracker = ErrorTracker(context="test")
    with pytest.raises(KeyError):
        with tracker.scope("frame-7"):
            raise KeyError("missing")
    assert tracker.count("frame-7") == 1
    assert tracker.errors["frame-7"][0].startswith("KeyError")


def test_throttled_emits_once_per_period() -> None:
    log = get_logger("test.throttle")
    results = [log.throttled("key", 60.0, "message {}", i) for i in range(3)]
    assert results == [True, False, False]
    assert log.throttled("other", 60.0, "message") is True


def test_throttle_zero_period_always_emits() -> None:
    log = get_logger("test.throttle")
    assert log.throttled("zero", 0.0, "a") is True
    assert log.throttled("zero", 0.0, "b") is True


def test_atomic_json_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "stats.json"
    atomic_write_json(path, {"valid": 3, "points": 4})
    assert load_json(path) == {"points": 4, "valid": 3}
    assert [p.name for p in path.parent.iterdir()] == ["stats.json"]


def test_file_sink_writes_under_logs_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DEPTHCLOUD_LOGS_ROOT", str(tmp_path / "logs"))
    configure(to_file=True)
    try:
        get_logger("test.file").info("hello file sink")
        path = log_file()
        assert path is not None and path.parent == tmp_path / "logs"
        assert "hello file sink" in path.read_text(encoding="utf-8")
    finally:
        configure(to_file=False)
    assert log_file() is None


def test_reconfigure_closes_previous_log_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DEPTHCLOUD_LOGS_ROOT", str(tmp_path / "logs"))
    configure(to_file=True)
    first = logger_module._LOG_HANDLE
    configure(to_file=True)
    try:
        assert first is not None and first.closed
        assert logger_module._LOG_HANDLE is not first
    finally:
        configure(to_file=False)
    assert logger_module._LOG_HANDLE is None


def test_error_tracker_keeps_bounded_history() -> None:
    tracker = ErrorTracker(context="test", max_messages=4)
    for i in range(1000):
        tracker.record("not_ready", f"frame {i}", log=False)
    assert tracker.count("not_ready") == 1000
    assert list(tracker.errors["not_ready"]) == [f"frame {i}" for i in range(996, 1000)]
    assert tracker.summary()["not_ready"][-1] == "frame 999"
