"""YAML config loading and validation."""

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from job_sync.errors import ConfigError
from job_sync.jobs import REQUIRED_KEYS, SOURCE_CLASSES

DEFAULT_SEARCH_QUERIES = [
    "software developer",
    "frontend developer",
    "backend developer",
    "full stack developer",
    "python developer",
    "data scientist",
]
DEFAULT_LOCATIONS = ["remote", "san francisco", "new york"]


@dataclass
class SyncConfig:
    sources: list[str] = field(default_factory=lambda: ["rapidapi"])
    search_queries: list[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_QUERIES))
    locations: list[str] = field(default_factory=lambda: list(DEFAULT_LOCATIONS))
    sync_interval_minutes: float = 60
    max_jobs_per_source: int = 50
    enable_deduplication: bool = True
    auto_refresh: bool = False
    request_delay_seconds: float = 0.2
    max_pages_per_query: int = 1

    def copy(self) -> "SyncConfig":
        return dataclasses.replace(
            self,
            sources=list(self.sources),
            search_queries=list(self.search_queries),
            locations=list(self.locations),
        )


@dataclass
class ApiKeys:
    rapidapi_key: str = ""
    indeed_publisher_id: str = ""
    linkedin_access_token: str = ""


@dataclass
class RateLimitConfig:
    min_interval_seconds: float = 2.0
    cooldown_minutes: float = 5


@dataclass
class AppConfig:
    sync: SyncConfig = field(default_factory=SyncConfig)
    api_keys: ApiKeys = field(default_factory=ApiKeys)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    log_dir: str = "logs"
    log_level: str = "INFO"


def _string_list(value: Any, name: str) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{name} must be a list of strings")
    return [v.strip() for v in value if v.strip()]


def _number(value: Any, name: str, minimum: float, integer: bool = False) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number")
    if integer and value != int(value):
        raise ConfigError(f"{name} must be a whole number")
    if value < minimum:
        raise ConfigError(f"{name} must be at least {minimum}")
    return int(value) if integer else value


def _flag(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false")
    return value


_SYNC_VALIDATORS = {
    "sources": lambda v: [s.lower() for s in _string_list(v, "sources")],
    "search_queries": lambda v: _string_list(v, "search_queries"),
    "locations": lambda v: _string_list(v, "locations"),
    "sync_interval_minutes": lambda v: _number(v, "sync_interval_minutes", 1),
    "max_jobs_per_source": lambda v: _number(v, "max_jobs_per_source", 1, integer=True),
    "enable_deduplication": lambda v: _flag(v, "enable_deduplication"),
    "auto_refresh": lambda v: _flag(v, "auto_refresh"),
    "request_delay_seconds": lambda v: _number(v, "request_delay_seconds", 0),
    "max_pages_per_query": lambda v: _number(v, "max_pages_per_query", 1, integer=True),
}


def apply_sync_changes(config: SyncConfig, changes: dict[str, Any]) -> SyncConfig:
    """Return a copy of ``config`` with ``changes`` validated and applied.

    Raises ConfigError for unknown fields or invalid values; ``config`` itself
    is never modified.
    """
    unknown = sorted(set(changes) - set(_SYNC_VALIDATORS))
    if unknown:
        raise ConfigError(f"Unknown sync setting(s): {', '.join(unknown)}")

    validated = {key: _SYNC_VALIDATORS[key](value) for key, value in changes.items()}
    return dataclasses.replace(config.copy(), **validated)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Copy config.example.yaml to config.yaml and fill in your settings."
        )

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig()

    # Sync
    sync_raw = raw.get("sync") or {}
    if not isinstance(sync_raw, dict):
        raise ConfigError("'sync' must be a mapping")
    config.sync = apply_sync_changes(SyncConfig(), sync_raw)

    # API keys (env vars take precedence)
    keys_raw = raw.get("api_keys") or {}
    config.api_keys = ApiKeys(
        rapidapi_key=os.environ.get("RAPIDAPI_KEY", keys_raw.get("rapidapi_key", "")),
        indeed_publisher_id=os.environ.get("INDEED_PUBLISHER_ID", keys_raw.get("indeed_publisher_id", "")),
        linkedin_access_token=os.environ.get("LINKEDIN_ACCESS_TOKEN", keys_raw.get("linkedin_access_token", "")),
    )

    # Rate limiting
    limit_raw = raw.get("rate_limit") or {}
    config.rate_limit = RateLimitConfig(
        min_interval_seconds=_number(limit_raw.get("min_interval_seconds", 2.0), "min_interval_seconds", 0),
        cooldown_minutes=_number(limit_raw.get("cooldown_minutes", 5), "cooldown_minutes", 0),
    )

    config.log_dir = raw.get("log_dir", "logs")
    config.log_level = str(raw.get("log_level", "INFO")).upper()

    return config


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    warnings = []
    sync = config.sync

    if not sync.sources:
        warnings.append("No job sources configured - sync will produce no jobs")

    for source in sync.sources:
        if source not in SOURCE_CLASSES:
            warnings.append(f"Unknown job source '{source}' - it will be reported as failed on every sync")
            continue
        key_field = REQUIRED_KEYS.get(source)
        if key_field and not getattr(config.api_keys, key_field):
            warnings.append(f"No credential configured for '{source}' ({key_field}) - source will be unavailable")

    if not sync.search_queries:
        warnings.append("No search queries configured - nothing will be fetched")

    if not sync.locations:
        warnings.append("No locations configured - nothing will be fetched")

    return warnings
