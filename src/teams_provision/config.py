"""Configuration management for teams-provision."""

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


class GraphConfig(BaseSettings):
    """Microsoft Graph connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tenant_id: str = Field(default="", description="Entra ID tenant ID")
    client_id: str = Field(default="", description="App registration client ID")
    client_secret: str = Field(default="", description="App registration client secret")
    base_url: str = Field(default=GRAPH_BASE_URL, description="Graph API base URL")
    timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")

    def missing(self) -> list[str]:
        """Return the env var names of required settings that are not set."""
        names = []
        for field_name in ("tenant_id", "client_id", "client_secret"):
            if not getattr(self, field_name):
                names.append(f"GRAPH_{field_name.upper()}")
        return names


class ProvisionSettings(BaseSettings):
    """Batch provisioning behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="PROVISION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    input_path: Path = Field(default=Path("classes.csv"), description="Input CSV path")
    error_log_path: Path = Field(
        default=Path("provision-errors.csv"),
        description="Error log CSV path (recreated on every run)",
    )
    settle_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Wait between membership changes and team creation",
    )
    recheck_delay_seconds: float = Field(
        default=30.0,
        ge=0,
        description="Wait before re-checking a team after a failed create",
    )


class AppConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    graph: GraphConfig = Field(default_factory=GraphConfig)
    provision: ProvisionSettings = Field(default_factory=ProvisionSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from a YAML file."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        return cls(**data)


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load application configuration from environment and optional YAML file."""
    if config_path:
        return AppConfig.from_yaml(config_path)
    return AppConfig()
