"""TOML config loading, profiles and environment overrides."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

# Environment variable -> (section, key). Environment wins over TOML.
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "FULLSET_DB_PATH": ("storage", "db_path"),
    "FULLSET_GAMMA_API_BASE": ("polymarket", "gamma_api_base"),
    "FULLSET_CLOB_API_BASE": ("polymarket", "clob_api_base"),
    "FULLSET_WEB_BASE": ("polymarket", "web_base"),
    "FULLSET_CRON_SCHEDULE": ("scheduler", "cron"),
    "FULLSET_CONCURRENCY": ("scan", "concurrency"),
    "FULLSET_REQUESTS_PER_SEC": ("clob", "requests_per_sec"),
    "FULLSET_LOG_LEVEL": ("logging", "level"),
    "FULLSET_LOG_FORMAT": ("logging", "format"),
}

# Names used by earlier deployments. Applied only when the FULLSET_* name is unset.
LEGACY_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CRON_SCHEDULE": ("scheduler", "cron"),
    "POLYMARKET_API_BASE_URL": ("polymarket", "gamma_api_base"),
}


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def _env_overlay(environ: Mapping[str, str]) -> dict[str, Any]:
    overlay: dict[str, Any] = {}
    for var, (section, key) in [*LEGACY_ENV_OVERRIDES.items(), *ENV_OVERRIDES.items()]:
        value = environ.get(var)
        if value is None or value == "":
            continue
        overlay.setdefault(section, {})[key] = value
    return overlay


def load_config(
    profile: str | None = None,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load merged config: default.toml, optional profile overlay, then environment."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    base: dict[str, Any] = _load_toml(default_path) if default_path.exists() else {}
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            base = _deep_merge(base, _load_toml(profile_path))
    env = os.environ if environ is None else environ
    return _deep_merge(base, _env_overlay(env))


def get_settings(
    profile: str | None = None,
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir=config_dir, environ=environ)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config and environment."""

    def __init__(
        self,
        *,
        storage: dict[str, Any] | None = None,
        polymarket: dict[str, Any] | None = None,
        clob: dict[str, Any] | None = None,
        scan: dict[str, Any] | None = None,
        scheduler: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.polymarket = polymarket or {}
        self.clob = clob or {}
        self.scan = scan or {}
        self.scheduler = scheduler or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            polymarket=raw.get("polymarket"),
            clob=raw.get("clob"),
            scan=raw.get("scan"),
            scheduler=raw.get("scheduler"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/fullset.duckdb")

    @property
    def gamma_api_base(self) -> str:
        return self.polymarket.get("gamma_api_base", "https://gamma-api.polymarket.com")

    @property
    def clob_api_base(self) -> str:
        return self.polymarket.get("clob_api_base", "https://clob.polymarket.com")

    @property
    def web_base(self) -> str:
        return self.polymarket.get("web_base", "https://polymarket.com")

    @property
    def http_timeout_sec(self) -> float:
        return float(self.polymarket.get("http_timeout_sec", 15.0))

    @property
    def catalog_page_size(self) -> int:
        return int(self.polymarket.get("catalog_page_size", 1000))

    @property
    def requests_per_sec(self) -> float:
        return float(self.clob.get("requests_per_sec", 10.0))

    @property
    def burst(self) -> int:
        return int(self.clob.get("burst", 20))

    @property
    def concurrency(self) -> int:
        return max(1, int(self.scan.get("concurrency", 4)))

    @property
    def payout(self) -> float:
        return float(self.scan.get("payout", 100))

    @property
    def price_scale(self) -> float:
        return float(self.scan.get("price_scale", 100))

    @property
    def cron(self) -> str:
        return self.scheduler.get("cron", "*/5 * * * *")

    @property
    def shutdown_grace_sec(self) -> float:
        return float(self.scheduler.get("shutdown_grace_sec", 10.0))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
