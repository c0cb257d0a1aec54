# tests/test_cli.py
"""Tests for the offline conversion runner."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from depthcloud.cli.convert_runner import main, run_convert
from depthcloud.config import CloudFormat, ConverterConfig
from depthcloud.utils.error_tracker import ErrorTracker


@pytest.fixture
def capture_dir(tmp_path: Path) -> Path:
    root = tmp_path / "captures"
    root.mkdir()
    np.save(root / "000_depth.npy", np.full((8, 8), 1000, dtype=np.uint16))
    np.save(root / "001_depth.npy", np.full((8, 8), 2.0, dtype=np.float32))
    (root / "intr.json").write_text(
        json.dumps({"fx": 100.0, "fy": 100.0, "cx": 4.0, "cy": 4.0}), encoding="utf-8"
    )
    return root


def test_run_convert_writes_one_cloud_per_frame(capture_dir: Path, tmp_path: Path) -> None:
    out = tmp_path / "out"
    tracker = ErrorTracker(context="test")
    written = run_convert(
        [capture_dir],
        capture_dir / "intr.json",
        output_dir=out,
        fmt=CloudFormat.NPY,
        config=ConverterConfig(decimation=2),
        tracker=tracker,
    )
    assert [p.name for p in written] == ["000.npy", "001.npy"]
    assert tracker.count() == 0
    points = np.load(out / "001.npy")
    assert points.shape == (4, 4)
    assert np.all(points["z"] == np.float32(2.0))


def test_bad_frame_is_skipped_and_reported(capture_dir: Path, tmp_path: Path) -> None:
    np.save(capture_dir / "002_depth.npy", np.zeros((8, 8), dtype=np.int8))
    tracker = ErrorTracker(context="test")
    written = run_convert(
        [capture_dir],
        capture_dir / "intr.json",
        output_dir=tmp_path / "out",
        fmt=CloudFormat.NPY,
        tracker=tracker,
    )
    assert len(written) == 2
    assert tracker.count("002") == 1


def test_main_exit_codes(capture_dir: Path, tmp_path: Path) -> None:
    args = [str(capture_dir), "--intrinsics", str(capture_dir / "intr.json"), "--format", "npy"]
    assert main([*args, "--output", str(tmp_path / "ok"), "--no-quiet-nan"]) == 0
    assert (tmp_path / "ok" / "000.npy").exists()

    np.save(capture_dir / "002_depth.npy", np.zeros((8, 8), dtype=np.int8))
    assert main([*args, "--output", str(tmp_path / "partial")]) == 1


def test_main_missing_intrinsics(capture_dir: Path, tmp_path: Path) -> None:
    code = main(
        [str(capture_dir), "--intrinsics", str(tmp_path / "nope.json"), "--output", str(tmp_path)]
    )
    assert code == 1


@pytest.mark.parametrize("flag", [["--decimation", "0"], ["--range-max", "-1"]])
def test_main_rejects_invalid_config(capture_dir: Path, flag: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(capture_dir), "--intrinsics", str(capture_dir / "intr.json"), *flag])
    assert excinfo.value.code == 2


def test_unwritable_cloud_is_recorded_and_exits_nonzero(
    capture_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    o3d = pytest.importorskip("open3d")
    monkeypatch.setattr(o3d.io, "write_point_cloud", lambda *args, **kwargs: False)
    code = main(
        [
            str(capture_dir),
            "--intrinsics",
            str(capture_dir / "intr.json"),
            "--format",
            "ply",
            "--output",
            str(tmp_path / "out"),
        ]
    )
    assert code == 1


def test_save_failure_skips_only_that_frame(
    capture_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from depthcloud.cli import convert_runner

    real_save = convert_runner.save_cloud

    def flaky_save(path, cloud, fmt=None):
        if path.stem == "000":
            raise OSError(f"Failed to save cloud: {path}")
        return real_save(path, cloud, fmt)

    monkeypatch.setattr(convert_runner, "save_cloud", flaky_save)
    tracker = ErrorTracker(context="test")
    written = run_convert(
        [capture_dir],
        capture_dir / "intr.json",
        output_dir=tmp_path / "out",
        fmt=CloudFormat.NPY,
        tracker=tracker,
    )
    assert [p.name for p in written] == ["001.npy"]
    assert tracker.count("000") == 1
