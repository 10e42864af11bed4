"""
Controller settings using Pydantic.

Provides environment-based configuration loading with PYRRA_ prefix. The
settings are resolved once at process start and passed to the reconciler;
nothing reads them from module state afterwards.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Backend(str, Enum):
    """Where the generated rules are materialized. Exactly one per deployment."""

    PROMETHEUS_RULE = "prometheus_rule"
    CONFIG_MAP = "config_map"
    MIMIR_RULE = "mimir_rule"


class Settings(BaseSettings):
    """Controller settings."""

    # Output
    backend: Backend = Backend.PROMETHEUS_RULE
    generic_rules: bool = False

    # Mimir ruler
    mimir_url: str | None = None
    mimir_tenant_id: str | None = None
    mimir_api_key: str | None = None
    mimir_username: str | None = None
    mimir_password: str | None = None
    mimir_write_alerting_rules: bool = False
    mimir_timeout: float = 30.0

    # Kubernetes (in-cluster config is tried first)
    kubeconfig: str | None = None
    kube_context: str | None = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "PYRRA_"

    @model_validator(mode="after")
    def _require_mimir_url(self) -> "Settings":
        if self.backend is Backend.MIMIR_RULE and not self.mimir_url:
            raise ValueError("mimir_url is required when backend is mimir_rule")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
