"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from surfcore.common.errors import ConfigError

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_client_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top = {"api", "logging", "timestamps"}
    _assert_required_keys(cfg, top, "client config")
    _assert_no_unknown_keys(cfg, top, "client config", allow_unknown)

    api = cfg["api"]
    _assert_required_keys(api, {"base_url", "timeout", "retry"}, "api")
    _assert_no_unknown_keys(api, {"base_url", "timeout", "retry"}, "api", allow_unknown)
    if not isinstance(api["base_url"], str) or not api["base_url"].startswith(("http://", "https://")):
        raise ConfigError("api.base_url must be an http(s) URL")

    _assert_required_keys(api["timeout"], {"connect", "read"}, "api.timeout")
    _assert_no_unknown_keys(api["timeout"], {"connect", "read"}, "api.timeout", allow_unknown)
    for key in ("connect", "read"):
        _assert_positive(api["timeout"][key], f"api.timeout.{key}")

    _assert_required_keys(api["retry"], {"max_attempts", "multiplier", "max_wait"}, "api.retry")
    _assert_no_unknown_keys(api["retry"], {"max_attempts", "multiplier", "max_wait"}, "api.retry", allow_unknown)
    if not isinstance(api["retry"]["max_attempts"], int) or api["retry"]["max_attempts"] < 1:
        raise ConfigError("api.retry.max_attempts must be an integer >= 1")
    for key in ("multiplier", "max_wait"):
        _assert_positive(api["retry"][key], f"api.retry.{key}")

    _assert_required_keys(cfg["logging"], {"level"}, "logging")
    _assert_no_unknown_keys(cfg["logging"], {"level"}, "logging", allow_unknown)
    if str(cfg["logging"]["level"]).upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(sorted(LOG_LEVELS))}")

    _assert_required_keys(cfg["timestamps"], {"display_format", "fallback"}, "timestamps")
    _assert_no_unknown_keys(cfg["timestamps"], {"display_format", "fallback"}, "timestamps", allow_unknown)

    return cfg
