"""
Collector configuration.

Defaults match the device this collector was written for. Everything
can be overridden from a JSON file (load_config) or the CLI.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Optional

STARTUP_DELAY_SECONDS = 30  # let the codec driver finish loading
COLLECTION_INTERVAL_SECONDS = 60 * 60 * 24

_UFS = "/sys/devices/platform/soc/1d84000.ufshc"


class ConfigError(Exception):
    """Config file is missing, malformed, or has unknown keys."""


@dataclass
class CollectorPaths:
    cycle_count_bins: str = "/sys/class/power_supply/maxfg/cycle_counts_bins"
    codec_state: str = (
        "/sys/devices/platform/soc/171c0000.slim/tavil-slim-pgd/tavil_codec/codec_state"
    )
    slowio_read_cnt: str = f"{_UFS}/slowio_read_cnt"
    slowio_write_cnt: str = f"{_UFS}/slowio_write_cnt"
    slowio_unmap_cnt: str = f"{_UFS}/slowio_unmap_cnt"
    slowio_sync_cnt: str = f"{_UFS}/slowio_sync_cnt"
    speaker_impedance: str = "/sys/class/misc/msm_cirrus_playback/resistance_left_right"


@dataclass
class CollectorConfig:
    paths: CollectorPaths = field(default_factory=CollectorPaths)
    sysfs_root: Optional[str] = None  # prefix for every path, e.g. a fake tree
    startup_delay_seconds: float = STARTUP_DELAY_SECONDS
    interval_seconds: float = COLLECTION_INTERVAL_SECONDS
    sink: str = "http"  # "http", "sqlite" or "jsonl"
    sink_url: str = "http://127.0.0.1:8125"
    sink_timeout_seconds: float = 5.0
    db_path: str = "sysfstats.db"

    def to_dict(self) -> dict:
        return asdict(self)


def _check_keys(cls, data: dict, where: str):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown {where} keys: {', '.join(sorted(unknown))}")


def _require_str(value, name: str):
    if not isinstance(value, str):
        raise ConfigError(f"'{name}' must be a string, got {value!r}")


def config_from_dict(data: dict) -> CollectorConfig:
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object")
    data = dict(data)
    _check_keys(CollectorConfig, data, "config")

    paths_data = data.pop("paths", {}) or {}
    if not isinstance(paths_data, dict):
        raise ConfigError("'paths' must be a JSON object")
    _check_keys(CollectorPaths, paths_data, "paths")

    config = CollectorConfig(paths=CollectorPaths(**paths_data), **data)

    for name in ("sink", "sink_url", "db_path"):
        _require_str(getattr(config, name), name)
    if config.sysfs_root is not None:
        _require_str(config.sysfs_root, "sysfs_root")
    for path_field in fields(CollectorPaths):
        _require_str(getattr(config.paths, path_field.name), f"paths.{path_field.name}")

    for name in ("startup_delay_seconds", "interval_seconds", "sink_timeout_seconds"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ConfigError(f"'{name}' must be a non-negative number, got {value!r}")
    if config.interval_seconds == 0:
        raise ConfigError("'interval_seconds' must be greater than zero")
    if config.sink not in ("http", "sqlite", "jsonl"):
        raise ConfigError(f"Unknown sink {config.sink!r}")

    return config


def load_config(path: str) -> CollectorConfig:
    """Load a JSON config file. Keys left out keep their defaults."""
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    return config_from_dict(data)
