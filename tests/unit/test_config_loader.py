from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError
from shared.config.loader import load_snap_settings


def _write_profile(dirpath: Path, name: str, text: str) -> Path:
    dirpath.mkdir(parents=True, exist_ok=True)
    p = dirpath / f"{name}.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults_when_no_profile_and_no_env(tmp_path: Path):
    s = load_snap_settings(env={"RMS_CONFIG_DIR": str(tmp_path)}, profile="dev")
    assert s.host == "10.11.99.1"
    assert s.keep_full is True
    assert s.retries == 0
    assert s.device.process_name == "xochitl"
    assert s.device.device_path == "/dev/fb0"
    g = s.device.geometry()
    assert (g.width, g.height, g.bytes_per_pixel, g.skip_correction) == (1872, 1404, 2, 7)
    assert s.extract.config().threshold == 200
    assert s.decode.adapter == "ffmpeg"


def test_toml_overlay_deep_merges_nested_tables(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(
        profiles,
        "dev",
        """
        [snap]
        host = "192.168.1.50"

        [snap.extract]
        padding = 20
        """,
    )
    s = load_snap_settings(env={"RMS_CONFIG_DIR": str(profiles), "RMS_PROFILE": "dev"})
    assert s.host == "192.168.1.50"
    assert s.extract.padding == 20
    # untouched siblings keep defaults
    assert s.extract.threshold == 200
    assert s.extract.exclude_w == 200


def test_env_overrides_toml(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(
        profiles,
        "dev",
        """
        [snap]
        host = "from_toml"
        retries = 1
        """,
    )
    env: dict[str, Any] = {
        "RMS_CONFIG_DIR": str(profiles),
        "RMS_PROFILE": "dev",
        "RMS_HOST": "from_env",
        "RMS_RETRIES": "3",
        "rms_decode": '{"adapter": "numpy"}',
    }
    s = load_snap_settings(env=env)
    assert s.host == "from_env"
    assert s.retries == 3
    assert s.decode.adapter == "numpy"
    assert s.decode.hflip is True


def test_overrides_win_over_env(tmp_path: Path):
    env = {"RMS_CONFIG_DIR": str(tmp_path), "RMS_HOST": "from_env"}
    s = load_snap_settings(env=env, overrides={"host": "from_cli", "keep_full": False})
    assert s.host == "from_cli"
    assert s.keep_full is False


def test_profile_selected_by_name(tmp_path: Path):
    profiles = tmp_path / "custom_profiles"
    _write_profile(profiles, "bench", '[snap]\nhost = "bench-tablet"\n')
    s = load_snap_settings(env={"RMS_CONFIG_DIR": str(profiles)}, profile="bench")
    assert s.host == "bench-tablet"


def test_bad_toml_raises_runtime_error(tmp_path: Path):
    profiles = tmp_path / "profiles"
    _write_profile(profiles, "dev", "[snap]\nthis = not_valid\n")
    with pytest.raises(RuntimeError):
        load_snap_settings(env={"RMS_CONFIG_DIR": str(profiles), "RMS_PROFILE": "dev"})


def test_invalid_value_is_validation_error(tmp_path: Path):
    env = {"RMS_CONFIG_DIR": str(tmp_path), "RMS_DEVICE": '{"mapping_pick": "first"}'}
    with pytest.raises(ValidationError):
        load_snap_settings(env=env)


def test_repo_dev_profile_matches_defaults():
    s = load_snap_settings(env={}, profile="dev")
    assert s.device.geometry().frame_bytes == 1872 * 1404 * 2
    assert s.decode.curve == [(0.045, 0.0), (0.06, 1.0)]
