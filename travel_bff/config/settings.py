"""travel_bff.config.settings
===========================
Runtime configuration for the **travel BFF**.

This module provides a single `Settings` object powered by
`pydantic‑settings` (v2) that merges configuration from **init kwargs**,
**environment variables**, **YAML**, **TOML**, **.env** and a secrets
directory. The loading order (highest → lowest priority):

1. Values passed via `Settings(...)` kwargs
2. Environment variables (prefix ``BFF_``; ``SUPABASE_URL`` and
   ``SUPABASE_SERVICE_KEY`` are also read unprefixed)
3. External YAML (``settings.yaml`` or path in ``BFF_SETTINGS``)
4. External TOML (``settings.toml`` or path in ``BFF_SETTINGS``)
5. ``.env`` file in the working directory (if present)
6. File‑secrets directory (Kubernetes‑style)

The module also exposes helpers:

* `get_settings()` – cached accessor for DI/tests.
* `configure_logging()` – sets up logging from the packaged ``logging.yaml``
  and honours `log_level_per_module` for fine‑grained control.

Usage
-----
```python
from travel_bff.config.settings import get_settings, configure_logging

settings = get_settings()
configure_logging(settings)
```
"""
from __future__ import annotations

import json
import logging
import logging.config
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

import yaml
from pydantic import AliasChoices, Field, PositiveFloat, PositiveInt, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
    YamlConfigSettingsSource,
)

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]

_SETTINGS_PATH_ENV = "BFF_SETTINGS"
_LOGGING_YAML = Path(__file__).resolve().parent.parent / "logging.yaml"


def _external_config_path(default: str, suffixes: Tuple[str, ...]) -> Path:
    env_val = os.getenv(_SETTINGS_PATH_ENV)
    if env_val and Path(env_val).suffix.lower() in suffixes:
        return Path(env_val)
    return Path(default)


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Application runtime settings (validated & type‑safe)."""

    # ---------------------------------------------------------------------
    # Core service
    # ---------------------------------------------------------------------
    service_name: str = Field("travel-bff", description="Service name reported by /version")
    debug: bool = Field(False, description="Run service in debug mode")
    host: str = Field("0.0.0.0", description="Bind address")
    port: PositiveInt = Field(8000, description="Bind port")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: LogLevel = Field("INFO", description="Root log level")
    log_level_per_module: Optional[Dict[str, LogLevel]] = Field(
        default=None,
        description="Per‑module log levels, e.g. '{\"httpx\": \"WARNING\"}'.",
    )

    # ------------------------------------------------------------------
    # Remote store
    # ------------------------------------------------------------------
    cache_backend: Literal["supabase", "memory"] = Field(
        "supabase", description="Remote cache backend; 'memory' for local development"
    )
    supabase_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("supabase_url", "BFF_SUPABASE_URL", "SUPABASE_URL"),
        description="Supabase project URL",
    )
    supabase_service_key: Optional[SecretStr] = Field(
        None,
        validation_alias=AliasChoices("supabase_service_key", "BFF_SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_KEY"),
        description="Supabase service-role key",
    )
    supabase_timeout_sec: PositiveFloat = Field(30.0, description="HTTP timeout for store calls")
    memory_max_entries: PositiveInt = Field(10_000, description="Capacity of the in-memory backend")

    # ------------------------------------------------------------------
    # Cache policy / maintenance
    # ------------------------------------------------------------------
    default_region: str = Field("eu", description="Region used when a request carries none")
    cleanup_interval_sec: PositiveInt = Field(6 * 60 * 60, description="Interval for the cache cleanup job")
    cleanup_on_start: bool = Field(True, description="Run one cleanup pass at startup")
    search_cache_size: PositiveInt = Field(1000, description="Local search cache capacity")
    search_cache_ttl_minutes: PositiveInt = Field(6 * 60, description="Search cache lifetime")

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------
    enable_metrics: bool = Field(True, description="Expose Prometheus metrics at /metrics")

    # ------------------------------------------------------------------
    # Pydantic settings config
    # ------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_prefix="BFF_",  # All env vars start with "BFF_"
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # custom sources (TOML / YAML)
    # ------------------------------------------------------------------

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Define custom loading order with TOML & YAML support."""

        yaml_settings = YamlConfigSettingsSource(
            settings_cls, yaml_file=_external_config_path("settings.yaml", (".yaml", ".yml"))
        )
        toml_settings = TomlConfigSettingsSource(
            settings_cls, toml_file=_external_config_path("settings.toml", (".toml",))
        )

        # Precedence: init → ENV → YAML → TOML → .env → secrets
        return (
            init_settings,
            env_settings,
            yaml_settings,
            toml_settings,
            dotenv_settings,
            file_secret_settings,
        )

    def public_dump(self) -> Dict[str, Any]:
        """Settings as JSON-safe dict with secrets masked."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance (singleton‑like)."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:  # pragma: no cover
    """Configure logging from ``logging.yaml`` and apply overrides.

    If the YAML file is missing or broken, falls back to ``basicConfig``.
    Call this once at app startup.
    """
    settings = settings or get_settings()
    if _LOGGING_YAML.exists():
        try:
            with _LOGGING_YAML.open("r", encoding="utf-8") as fp:
                config_dict = yaml.safe_load(fp)
            logging.config.dictConfig(config_dict)
            logging.getLogger().setLevel(settings.log_level)
            logging.getLogger("travel_bff").setLevel(settings.log_level)
        except (OSError, ValueError, TypeError, yaml.YAMLError):
            logging.basicConfig(level=settings.log_level)
            logging.getLogger(__name__).exception(
                "Failed to load logging.yaml – falling back to basicConfig")
    else:
        logging.basicConfig(level=settings.log_level)

    # fine‑grained overrides
    if settings.log_level_per_module:
        for mod, lvl in settings.log_level_per_module.items():
            logging.getLogger(mod).setLevel(lvl)


# ---------------------------------------------------------------------------
# CLI helper (optional)
# ---------------------------------------------------------------------------

def _cli_preview() -> None:  # pragma: no cover – quick debug helper
    """Print current settings as JSON (for debugging)."""

    import argparse

    parser = argparse.ArgumentParser(description="Print merged settings")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    args = parser.parse_args()

    dumped = get_settings().public_dump()
    if args.json:
        print(json.dumps(dumped, indent=2, default=str))
    else:
        for k, v in dumped.items():
            print(f"{k:30} : {v}")


if __name__ == "__main__":  # pragma: no cover
    _cli_preview()
