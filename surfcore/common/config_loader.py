"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from surfcore.common.errors import ConfigError
from surfcore.common.fs import read_yaml
from surfcore.common.http import RetryConfig, TimeoutConfig
from surfcore.common.schema import validate_client_config

CONFIG_FILENAME = "client.yml"


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    timeout: TimeoutConfig
    retry: RetryConfig
    log_level: str
    display_format: str
    timestamp_fallback: str


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def load_client_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ClientConfig:
    overlay_path = overlay_config_dir / CONFIG_FILENAME if overlay_config_dir is not None else None
    cfg = validate_client_config(
        _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )
    api = cfg["api"]
    return ClientConfig(
        base_url=api["base_url"].rstrip("/"),
        timeout=TimeoutConfig(connect=float(api["timeout"]["connect"]), read=float(api["timeout"]["read"])),
        retry=RetryConfig(
            max_attempts=api["retry"]["max_attempts"],
            multiplier=float(api["retry"]["multiplier"]),
            max_wait=float(api["retry"]["max_wait"]),
        ),
        log_level=str(cfg["logging"]["level"]).upper(),
        display_format=cfg["timestamps"]["display_format"],
        timestamp_fallback=cfg["timestamps"]["fallback"],
    )
