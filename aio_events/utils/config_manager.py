"""
config_manager.py

Configuration management for the AIO events client.
Loads and validates settings from a YAML file with environment variable substitution.

Features:
- YAML configuration loading with validation
- Environment variable substitution (${VAR_NAME} and ${VAR_NAME:default} syntax)
- Singleton pattern for global settings access
- Type-safe configuration with Pydantic models
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = "AIO_EVENTS_CONFIG"


# =============================================================================
# Configuration Models (Pydantic)
# =============================================================================

class WorkspaceSettings(BaseModel):
    """Workspace context and JWT credential material."""
    ims_url: str = Field(default="https://ims-na1.adobelogin.com")
    ims_org_id: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    consumer_org_id: Optional[str] = Field(default=None)
    project_id: Optional[str] = Field(default=None)
    workspace_id: Optional[str] = Field(default=None)
    credential_id: Optional[str] = Field(default=None)
    technical_account_id: Optional[str] = Field(default=None)
    client_secret: Optional[str] = Field(default=None)
    private_key: Optional[str] = Field(default=None, description="PEM-encoded private key")
    private_key_path: Optional[str] = Field(default=None, description="Path to a PEM file")
    meta_scopes: List[str] = Field(default_factory=list)
    access_token: Optional[str] = Field(
        default=None,
        description="Pre-obtained access token; skips the JWT exchange"
    )

    @field_validator("meta_scopes", mode="before")
    @classmethod
    def split_meta_scopes(cls, v: Any) -> Any:
        """Accept a comma separated string, as env substitution produces."""
        if isinstance(v, str):
            return [scope.strip() for scope in v.split(",") if scope.strip()]
        return v or []


class PublishSettings(BaseModel):
    """Ingress endpoint settings."""
    url: Optional[str] = Field(default=None, description="Override of the ingress URL")


class ManagementSettings(BaseModel):
    """Management endpoint settings."""
    url: Optional[str] = Field(default=None, description="Override of the management URL")


class TransportSettings(BaseModel):
    """HTTP transport settings."""
    timeout_seconds: float = Field(default=30.0, gt=0)
    pool_connections: int = Field(default=10, ge=1)
    pool_maxsize: int = Field(default=10, ge=1)
    verify_ssl: bool = Field(default=True)


class LoggingSettings(BaseModel):
    """Logging settings."""
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text", description="json or text")
    log_file: Optional[str] = Field(default=None)

    @field_validator("log_format")
    @classmethod
    def check_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError(f"log_format must be 'json' or 'text', got {v!r}")
        return v.lower()


class Settings(BaseModel):
    """Root configuration model."""
    workspace: WorkspaceSettings = Field(default_factory=WorkspaceSettings)
    publish: PublishSettings = Field(default_factory=PublishSettings)
    management: ManagementSettings = Field(default_factory=ManagementSettings)
    transport: TransportSettings = Field(default_factory=TransportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# =============================================================================
# Configuration Manager (Singleton)
# =============================================================================

class ConfigManager:
    """
    Singleton configuration manager that loads and caches settings.

    Default lookup order: $AIO_EVENTS_CONFIG, ./config/settings.yaml,
    ~/.aio-events/settings.yaml.
    """

    _instance: Optional['ConfigManager'] = None
    _settings: Optional[Settings] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    @classmethod
    def load_config(cls, config_path: Optional[str] = None) -> Settings:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to configuration file. If None, uses default paths.

        Returns:
            Settings object with validated configuration

        Raises:
            FileNotFoundError: If configuration file not found
            ValueError: If configuration is invalid
        """
        if cls._settings is not None:
            return cls._settings

        if config_path is None:
            possible_paths = [
                Path("config/settings.yaml"),
                Path.home() / ".aio-events" / "settings.yaml",
            ]
            if os.getenv(ENV_CONFIG_PATH):
                possible_paths.insert(0, Path(os.environ[ENV_CONFIG_PATH]))

            config_path_obj = next((p for p in possible_paths if p.exists()), None)
            if config_path_obj is None:
                raise FileNotFoundError(
                    f"Configuration file not found in any of: {[str(p) for p in possible_paths]}"
                )
        else:
            config_path_obj = Path(config_path)
            if not config_path_obj.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

        logger.info(f"Loading configuration from: {config_path_obj}")

        try:
            with open(config_path_obj, 'r') as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML configuration: {e}") from e

        cls._settings = cls.from_dict(raw_config)
        logger.info("Configuration loaded and validated successfully")
        return cls._settings

    @classmethod
    def from_dict(cls, raw_config: Any) -> Settings:
        """
        Validate a raw mapping after environment substitution.

        Raises:
            ValueError: If the configuration is invalid
        """
        config_dict = cls._substitute_env_vars(raw_config)
        try:
            return Settings(**config_dict)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    @classmethod
    def get_settings(cls) -> Settings:
        """Get cached settings, loading from the default paths on first use."""
        if cls._settings is None:
            cls.load_config()
        return cls._settings

    @classmethod
    def _substitute_env_vars(cls, config: Any) -> Any:
        """
        Recursively substitute environment variables in configuration.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.
        """
        if isinstance(config, dict):
            return {k: cls._substitute_env_vars(v) for k, v in config.items()}
        elif isinstance(config, list):
            return [cls._substitute_env_vars(item) for item in config]
        elif isinstance(config, str):
            pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

            def replace_var(match):
                var_name = match.group(1)
                default_value = match.group(2) if match.group(2) is not None else ""
                return os.getenv(var_name, default_value)

            return re.sub(pattern, replace_var, config)
        else:
            return config

    @classmethod
    def reload_config(cls, config_path: Optional[str] = None) -> Settings:
        """Drop the cached settings and load again."""
        cls._settings = None
        return cls.load_config(config_path)

    @classmethod
    def reset(cls) -> None:
        """Forget cached settings (used by tests)."""
        cls._settings = None


def get_settings() -> Settings:
    """Get application settings (convenience function)."""
    return ConfigManager.get_settings()
