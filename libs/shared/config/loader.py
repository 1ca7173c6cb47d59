from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from apps.snap.settings import SnapSettings

# --- paths --------------------------------------------------------------------


def _repo_root() -> Path:
    """Heuristic: walk up from this file until we find pyproject.toml."""
    p = Path(__file__).resolve()
    for ancestor in [p, *p.parents]:
        if (ancestor / "pyproject.toml").exists():
            return ancestor
    return Path.cwd()


def _profiles_dir(env: Mapping[str, str]) -> Path:
    # RMS_CONFIG_DIR points *at* profiles/
    override = env.get("RMS_CONFIG_DIR")
    if override:
        return Path(override)
    return _repo_root() / "configs" / "profiles"


def _load_profile_table(env: Mapping[str, str], profile: str) -> dict[str, Any]:
    f = _profiles_dir(env) / f"{profile}.toml"
    if not f.exists():
        return {}
    text = f.read_text("utf-8")
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise RuntimeError(f"Failed to parse profile TOML: {f}") from e


# --- overlay helpers ----------------------------------------------------------


def _deep_merge(base: dict[str, Any], over: Mapping[str, Any]) -> dict[str, Any]:
    """Nested tables merge key by key; everything else is replaced."""
    out = dict(base)
    for k, v in over.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = _deep_merge(dict(out[k]), v)
        else:
            out[k] = v
    return out


def _coerce_env_value(raw: str) -> Any:
    """
    Try to parse JSON first (so tables/numbers/bools work),
    then fall back to the original string.
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _collect_env_for(
    fields: set[str], env: Mapping[str, str], prefix: str = "RMS_"
) -> dict[str, Any]:
    """
    Collect overrides like RMS_HOST, RMS_EXTRACT='{"padding": 20}' -> {'host': ...}.
    Case-insensitive after the prefix.
    """
    out: dict[str, Any] = {}
    upper_to_field = {f.upper(): f for f in fields}
    plen = len(prefix)
    for k, v in env.items():
        if not k.upper().startswith(prefix):
            continue
        key = k[plen:].upper()
        if key in upper_to_field:
            out[upper_to_field[key]] = _coerce_env_value(v)
    return out


# --- public API ---------------------------------------------------------------


def load_snap_settings(
    env: Mapping[str, str] | None = None,
    profile: str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> SnapSettings:
    """
    Merge defaults (SnapSettings) <- TOML [snap] <- env RMS_* <- overrides (CLI).
    Env examples: RMS_HOST=10.11.99.1, RMS_RETRIES=2, RMS_DECODE={"adapter":"numpy"}
    """
    env = os.environ if env is None else env
    profile = (profile or env.get("RMS_PROFILE") or "dev").strip()

    # defaults come from the model itself, not from the ambient environment
    base = SnapSettings.model_construct().model_dump()

    toml_table = _load_profile_table(env, profile)
    toml_snap = toml_table.get("snap", {}) if isinstance(toml_table, dict) else {}
    if isinstance(toml_snap, dict):
        base = _deep_merge(base, toml_snap)

    base = _deep_merge(base, _collect_env_for(set(base.keys()), env))

    if overrides:
        base = _deep_merge(base, overrides)

    return SnapSettings.model_validate(base)
