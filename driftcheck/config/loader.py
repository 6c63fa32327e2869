"""Configuration loader for driftcheck runs.

Settings come from an optional YAML profile (``<config_dir>/<profile>.yaml``)
layered over built-in defaults, with a couple of environment overrides for the
values operators most often need to change per invocation.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import yaml

DEFAULT_SCAN_ROOT = "."
DEFAULT_IGNORED_PREFIXES: tuple[str, ...] = (".",)
DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_STORE_PATH = ".save/level.db"
DEFAULT_STORE_FILENAME = "fingerprints.sqlite3"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PROFILE_DICT: dict[str, Any] = {
    "scan": {
        "root": DEFAULT_SCAN_ROOT,
        "ignored_prefixes": list(DEFAULT_IGNORED_PREFIXES),
        "chunk_size": DEFAULT_CHUNK_SIZE,
    },
    "store": {"path": DEFAULT_STORE_PATH, "filename": DEFAULT_STORE_FILENAME},
    "logging": {"level": DEFAULT_LOG_LEVEL},
}
CONFIG_PROFILE_ENV = "DRIFTCHECK_CONFIG_PROFILE"
CONFIG_DIR_ENV = "DRIFTCHECK_CONFIG_DIR"
STORE_PATH_ENV = "DRIFTCHECK_STORE_PATH"
LOG_LEVEL_ENV = "DRIFTCHECK_LOG_LEVEL"
DEFAULT_PROFILE = "default"
DEFAULT_CONFIG_ROOT = Path(".driftcheck")
CONFIG_EXTENSIONS = (".yaml", ".yml")


@dataclass
class ScanConfig:
    root: str = DEFAULT_SCAN_ROOT
    ignored_prefixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_IGNORED_PREFIXES)
    )
    chunk_size: int = DEFAULT_CHUNK_SIZE


@dataclass
class StoreConfig:
    path: str = DEFAULT_STORE_PATH
    filename: str = DEFAULT_STORE_FILENAME


@dataclass
class LoggingConfig:
    level: str = DEFAULT_LOG_LEVEL


@dataclass
class Settings:
    scan: ScanConfig = field(default_factory=ScanConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def store_dir(self) -> Path:
        return Path(self.store.path).expanduser()


def load_settings(
    profile: str | None = None, config_dir: str | Path | None = None
) -> Settings:
    """Load settings from the requested profile or fall back to defaults."""

    profile_name = profile or os.getenv(CONFIG_PROFILE_ENV, DEFAULT_PROFILE)
    config_root = Path(
        config_dir or os.getenv(CONFIG_DIR_ENV, DEFAULT_CONFIG_ROOT)
    ).expanduser()
    config_data = _load_profile_dict(profile_name, config_root)
    if not config_data:
        config_data = copy.deepcopy(DEFAULT_PROFILE_DICT)

    scan_config = _build_scan_config(_section(config_data, "scan"))

    store_cfg = _section(config_data, "store")
    store_config = StoreConfig(
        path=str(
            os.getenv(STORE_PATH_ENV) or store_cfg.get("path", DEFAULT_STORE_PATH)
        ),
        filename=str(store_cfg.get("filename", DEFAULT_STORE_FILENAME)),
    )

    logging_cfg = _section(config_data, "logging")
    logging_config = LoggingConfig(
        level=str(
            os.getenv(LOG_LEVEL_ENV) or logging_cfg.get("level", DEFAULT_LOG_LEVEL)
        ).upper()
    )

    return Settings(
        scan=scan_config,
        store=store_config,
        logging=logging_config,
        raw=config_data,
    )


def _load_profile_dict(profile_name: str, config_root: Path) -> dict[str, Any]:
    """Load the YAML profile if available, otherwise return an empty dict."""

    if not config_root.exists():
        return {}

    for extension in CONFIG_EXTENSIONS:
        candidate = config_root / f"{profile_name}{extension}"
        if not candidate.exists():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise RuntimeError(
                f"Failed to parse config profile {candidate}: {exc}"
            ) from exc
        if not isinstance(loaded, dict):
            raise RuntimeError(
                f"Config profile {candidate} must be a mapping at the root"
            )
        return loaded

    return {}


def _section(config_data: dict[str, Any], name: str) -> dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise RuntimeError(
            f"Config section '{name}' must be a mapping, got {type(section).__name__}"
        )
    return section


def _build_scan_config(scan_cfg: dict[str, Any]) -> ScanConfig:
    prefixes_cfg = scan_cfg.get("ignored_prefixes")
    if prefixes_cfg is None:
        prefixes = list(DEFAULT_IGNORED_PREFIXES)
    elif isinstance(prefixes_cfg, str):
        prefixes = [prefixes_cfg]
    elif isinstance(prefixes_cfg, list):
        prefixes = [str(prefix) for prefix in prefixes_cfg if prefix]
    else:
        raise RuntimeError(
            "scan.ignored_prefixes must be a string or a list, "
            f"got {type(prefixes_cfg).__name__}"
        )

    chunk_size = scan_cfg.get("chunk_size", DEFAULT_CHUNK_SIZE)
    # bool is an int subclass; reject it explicitly.
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool):
        raise RuntimeError(f"scan.chunk_size must be an integer, got {chunk_size!r}")
    if chunk_size <= 0:
        raise RuntimeError(f"scan.chunk_size must be positive, got {chunk_size}")

    return ScanConfig(
        root=str(scan_cfg.get("root", DEFAULT_SCAN_ROOT)),
        ignored_prefixes=prefixes,
        chunk_size=chunk_size,
    )
