"""
Configuration management for the cloud-account reconciler.

Non-secret configuration loaded from YAML file, secrets from environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = "/etc/cloudaccount/config.yaml"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(os.environ.get("CLOUDACCOUNT_CONFIG_FILE", DEFAULT_CONFIG_PATH))
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Remote API Configuration ---


class APIConfig(BaseModel):
    """vRA IaaS API connection configuration."""

    url: str = Field(
        default="https://localhost",
        description="Base URL of the vRA appliance (without /iaas/api)",
    )
    api_version: str = Field(
        default="2021-07-15",
        description="IaaS API version sent as the apiVersion query parameter",
    )
    access_token: str = Field(
        default="",
        description="Bearer token. Takes precedence over refresh_token when set.",
    )
    refresh_token: str = Field(
        default="",
        description="Refresh token exchanged for a bearer token via /iaas/api/login",
    )
    verify_tls: bool = Field(default=True, description="Verify the appliance TLS certificate")
    request_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for read, update and delete requests",
    )
    create_timeout_seconds: float = Field(
        default=60.0,
        description="Timeout for create requests. Registration validates the vCenter "
        "connection and enumerates datacenters, which can take a while.",
    )


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLOUDACCOUNT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    # Remote API
    api: APIConfig = Field(default_factory=APIConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
