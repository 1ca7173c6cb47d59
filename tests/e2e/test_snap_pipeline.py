# tests/e2e/test_snap_pipeline.py
from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
from adapters.decode import NumpyFrameDecoder
from adapters.image_store import MemoryImageSink
from adapters.remote_ssh import FakeRemotePort, device_remote
from adapters.time import FakeClockPort, FakeSleeperPort
from domain.errors import IncompleteCapture, MappingNotFound, ProcessNotFound

import apps.snap.__main__ as cli
from apps.snap.compose import build_service
from apps.snap.settings import DecodeSettings, DeviceSettings, SnapSettings

RAW_H, RAW_W = 1404, 1872
MAPS_OK = (
    "00008000-00100000 r-xp 00000000 b3:02 1234 /usr/bin/xochitl\n"
    "20000000-20fff000 rw-s 00000000 00:06 210 /dev/fb0\n"
    "30000000-30fff000 rw-s 00000000 00:06 210 /dev/fb0\n"
    "31000000-32000000 rw-p 00000000 00:00 0\n"
)
MAPS_NONE = "00008000-00100000 r-xp 00000000 b3:02 1234 /usr/bin/xochitl\n"
STEM = "03-01-2024-12-30-45-remarkable-screen"


def _raw_from_screen(screen: np.ndarray) -> bytes:
    """Inverse of transpose=2 + hflip: that pair is an anti-transpose, its own inverse."""
    raw = screen[::-1, ::-1].T
    assert raw.shape == (RAW_H, RAW_W)
    return np.ascontiguousarray(raw).astype("<u2").tobytes()


def _screen(blob: tuple[int, int, int, int] | None = None) -> np.ndarray:
    # decoded screen is portrait: 1404 wide, 1872 tall
    s = np.full((RAW_W, RAW_H), 65535, dtype=np.uint16)
    if blob:
        x0, y0, x1, y1 = blob
        s[y0 : y1 + 1, x0 : x1 + 1] = 0
    return s


def _settings(**kw) -> SnapSettings:
    return SnapSettings(decode=DecodeSettings(adapter="numpy"), **kw)


def _run(remote, sink=None, **kw):
    sink = sink or MemoryImageSink()
    svc = build_service(
        _settings(**kw),
        remote=remote,
        decoder=NumpyFrameDecoder(),
        sink=sink,
        clock=FakeClockPort(),
    )
    return svc.run(), sink


def test_blob_is_captured_and_cropped():
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    remote = device_remote(["311", "305"], {"311": MAPS_NONE, "305": MAPS_OK}, frame)

    report, sink = _run(remote)

    assert report.status == "cropped"
    assert report.pid == "305"
    assert report.base_address == 0x30000000
    assert report.box is not None
    assert (report.box.min_x, report.box.min_y) == (850, 650)
    assert (report.box.max_x, report.box.max_y) == (1000, 800)

    full = sink.images[f"{STEM}.png"]
    cropped = sink.images[f"{STEM}_cropped.png"]
    assert full.shape == (1872, 1404)
    assert cropped.shape == (800 - 650 + 1, 1000 - 850 + 1)
    assert report.cropped_path == f"/memory/{STEM}_cropped.png"


def test_stream_offset_includes_skip_correction():
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    remote = device_remote(["305"], {"305": MAPS_OK}, frame)
    _run(remote)
    dd = [c for c in remote.calls if "/proc/305/mem" in c]
    assert len(dd) == 1
    assert f"skip={0x30000000 + 7}" in dd[0]
    assert f"bs={RAW_W * RAW_H * 2} count=1" in dd[0]


def test_after_last_policy_reads_following_mapping():
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    remote = device_remote(["305"], {"305": MAPS_OK}, frame)
    report, _ = _run(remote, device=DeviceSettings(mapping_pick="after_last"))
    assert report.base_address == 0x31000000


def test_blank_screen_writes_no_cropped_file():
    remote = device_remote(["305"], {"305": MAPS_OK}, _raw_from_screen(_screen()))
    report, sink = _run(remote)
    assert report.status == "no_content"
    assert report.cropped_path is None
    assert list(sink.images) == [f"{STEM}.png"]


def test_keep_full_off_only_writes_crop():
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    remote = device_remote(["305"], {"305": MAPS_OK}, frame)
    report, sink = _run(remote, keep_full=False)
    assert report.full_path is None
    assert list(sink.images) == [f"{STEM}_cropped.png"]


def test_short_capture_aborts_before_decoding():
    remote = device_remote(["305"], {"305": MAPS_OK}, b"\x00" * 1000)
    sink = MemoryImageSink()
    with pytest.raises(IncompleteCapture):
        _run(remote, sink=sink)
    assert sink.images == {}


def test_missing_process_aborts():
    with pytest.raises(ProcessNotFound):
        _run(FakeRemotePort())


def test_missing_mapping_aborts():
    remote = device_remote(["305"], {"305": MAPS_NONE}, b"")
    with pytest.raises(MappingNotFound):
        _run(remote)


# --- caller-level retry + CLI ---------------------------------------------------


def test_retry_reruns_whole_pipeline_after_failure():
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    answers = iter([b"\n", b"305\n"])
    remote = (
        FakeRemotePort()
        .on(r"^pidof xochitl$", lambda _line: next(answers))
        .on(r"^cat /proc/305/maps$", MAPS_OK.encode())
        .on(r"/proc/305/mem", frame)
    )
    sleeper = FakeSleeperPort()

    report = cli.run_with_retries(
        _settings(retries=1, retry_delay_s=0.25),
        sleeper=sleeper,
        remote=remote,
        decoder=NumpyFrameDecoder(),
        sink=MemoryImageSink(),
        clock=FakeClockPort(),
    )
    assert report.status == "cropped"
    assert sleeper.slept == [0.25]
    assert remote.closed


def test_retries_exhausted_reraises():
    sleeper = FakeSleeperPort()
    with pytest.raises(ProcessNotFound):
        cli.run_with_retries(
            _settings(retries=2, retry_delay_s=0.0),
            sleeper=sleeper,
            remote=FakeRemotePort(),
            decoder=NumpyFrameDecoder(),
            sink=MemoryImageSink(),
            clock=FakeClockPort(),
        )
    assert len(sleeper.slept) == 2


def test_cli_bad_profile_exits_with_usage_code(tmp_path: Path, monkeypatch):
    (tmp_path / "dev.toml").write_text("[snap\n", encoding="utf-8")
    monkeypatch.setenv("RMS_CONFIG_DIR", str(tmp_path))
    assert cli.main(["--profile", "dev"]) == cli.EXIT_USAGE


def test_cli_maps_capture_failure_to_exit_1(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("RMS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(cli, "build_service", lambda s, **kw: _failing_service())
    assert cli.main(["-d", str(tmp_path / "out")]) == cli.EXIT_CAPTURE_FAILED
    assert (tmp_path / "out").is_dir()
    assert capsys.readouterr().out == ""


def test_cli_prints_cropped_path(tmp_path: Path, monkeypatch, capsys):
    frame = _raw_from_screen(_screen((900, 700, 950, 750)))
    remote = device_remote(["305"], {"305": MAPS_OK}, frame)
    real_build = build_service

    def _build(settings, **kw):
        return real_build(settings, remote=remote, decoder=NumpyFrameDecoder(), clock=FakeClockPort())

    monkeypatch.setenv("RMS_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(cli, "build_service", _build)
    out_dir = tmp_path / "shots"
    assert cli.main(["-d", str(out_dir), "--json"]) == cli.EXIT_OK

    report = json.loads(capsys.readouterr().out)
    assert report["status"] == "cropped"
    assert Path(report["cropped_path"]) == out_dir / f"{STEM}_cropped.png"
    assert (out_dir / f"{STEM}_cropped.png").exists()
    assert (out_dir / f"{STEM}.png").exists()


class _failing_service:
    def __init__(self) -> None:
        self.remote = FakeRemotePort()

    def run(self):
        raise ProcessNotFound("no 'xochitl' process on the device")
