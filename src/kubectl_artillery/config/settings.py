"""Strongly typed CLI configuration."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORKER_IMAGE = "artilleryio/artillery:latest"
DEFAULT_SCRIPTS_DIR = "artillery-scripts"
DEFAULT_MANIFESTS_DIR = "artillery-manifests"


class ArtillerySettings(BaseSettings):
    """Configuration loaded from environment variables and `.env` files.

    Command line flags always take precedence over these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="KUBECTL_ARTILLERY_", env_file=".env", extra="ignore"
    )

    namespace: str | None = Field(
        default=None,
        description="Namespace to query; falls back to the kubeconfig context namespace",
    )
    kubeconfig: str | None = Field(default=None, description="Path to a kubeconfig file")
    context: str | None = Field(default=None, description="Kubeconfig context to use")
    query_timeout: float = Field(
        default=30.0, description="Overall deadline for a service query, in seconds", gt=0
    )
    max_workers: int = Field(
        default=4, description="Concurrent service lookups per query", ge=1, le=32
    )
    worker_image: str = Field(
        default=DEFAULT_WORKER_IMAGE, description="Artillery image run by test workers"
    )
    scripts_dir: str = Field(
        default=DEFAULT_SCRIPTS_DIR, description="Default output directory for test scripts"
    )
    manifests_dir: str = Field(
        default=DEFAULT_MANIFESTS_DIR, description="Default output directory for Job manifests"
    )
    log_level: str = Field(default="WARNING", description="CLI log level")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper_value = value.upper()
        if upper_value not in allowed:
            msg = f"Invalid log level '{value}'. Choose one of: {', '.join(sorted(allowed))}."
            raise ValueError(msg)
        return upper_value


def get_settings() -> ArtillerySettings:
    """Load settings from the current environment."""
    return ArtillerySettings()
