"""podwatch settings configuration.

Uses Pydantic Settings for type-safe configuration loaded from
environment variables. No configuration file is read.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from podwatch.version import __version__


class KubernetesSettings(BaseSettings):
    """Kubernetes API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PODWATCH_K8S_",
        extra="ignore",
        populate_by_name=True,
    )

    namespace: str = Field(
        default="",
        validation_alias=AliasChoices("PODWATCH_K8S_NAMESPACE", "NAMESPACE"),
        description="Namespace to watch (empty = all namespaces)",
    )
    kubeconfig: str | None = Field(
        default=None,
        description="Path to kubeconfig file (used when not running in-cluster)",
    )
    health_check_namespace: str = Field(
        default="default",
        description="Namespace read by the connectivity probe",
    )
    health_check_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Connectivity probe timeout in seconds",
    )


class WatchSettings(BaseSettings):
    """Watch session configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PODWATCH_WATCH_",
        extra="ignore",
    )

    max_reconnect_attempts: int = Field(
        default=10,
        ge=1,
        description="Consecutive stream failures tolerated before giving up",
    )
    backoff_unit_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Unit of the quadratic reconnect backoff",
    )
    timeout_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Server-side timeout of each watch request (unset = API server default)",
    )


class ObservabilitySettings(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PODWATCH_OBSERVABILITY_",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )

    # Metrics
    metrics_enabled: bool = Field(
        default=True,
        description="Serve Prometheus metrics and the liveness endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",  # noqa: S104
        description="Bind address for the metrics endpoint",
    )
    metrics_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port for the metrics endpoint",
    )


class Settings(BaseSettings):
    """Main podwatch configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PODWATCH_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    version: str = Field(default=__version__)

    # Nested settings
    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()


def reload_settings() -> Settings:
    """Force reload settings (clears cache).

    Returns:
        Settings: Fresh settings instance.
    """
    get_settings.cache_clear()
    return get_settings()
