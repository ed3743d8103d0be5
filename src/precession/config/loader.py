"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..definition.models import Layout
from ..utils.logging import ConfigurationError, LogContext, get_logger

logger = get_logger(__name__, LogContext.CONFIG)

ENV_PREFIX = "PRECESSION_"


class PrecessionConfig(BaseModel):
    """Configuration model for precession."""

    # Window indexing
    base_index: int = Field(
        default=1, ge=0, description="Index of the first window of a rendered session"
    )
    placeholder_index: int = Field(
        default=999, description="Sentinel index of the placeholder window"
    )

    # Definitions
    default_layout: str = Field(
        default=Layout.EVEN_HORIZONTAL.value,
        description="Layout for windows that do not declare one",
    )
    definitions_dir: str | None = Field(
        default=None, description="Directory holding <session>.yaml definitions"
    )

    # tmux
    tmux_socket_name: str | None = Field(default=None, description="tmux -L socket name")
    tmux_socket_path: str | None = Field(default=None, description="tmux -S socket path")
    attach: bool = Field(default=True, description="Attach once the session is built")

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: str | None = Field(default=None, description="Log file path")
    structured_logging: bool = Field(
        default=False, description="Emit JSON structured log records"
    )

    @field_validator("default_layout")
    @classmethod
    def _known_layout(cls, value: str) -> str:
        accepted = [layout.value for layout in Layout]
        if value not in accepted:
            raise ValueError(f"unknown layout {value!r} (expected one of: {', '.join(accepted)})")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @model_validator(mode="after")
    def _placeholder_above_base(self) -> "PrecessionConfig":
        if self.placeholder_index <= self.base_index:
            raise ValueError("placeholder_index must be greater than base_index")
        return self

    @property
    def layout(self) -> Layout:
        return Layout.from_string(self.default_layout)


def find_config_file(custom_path: str | None = None) -> Path | None:
    """Find configuration file in standard locations."""
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise ConfigurationError(f"Config file not found: {custom_path}")

    search_paths = [
        Path.cwd() / "precession.yaml",
        Path.home() / ".config" / "precession.yaml",
        Path.home() / ".precession.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return data


def load_env_vars() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    env_mappings = {
        f"{ENV_PREFIX}BASE_INDEX": "base_index",
        f"{ENV_PREFIX}PLACEHOLDER_INDEX": "placeholder_index",
        f"{ENV_PREFIX}DEFAULT_LAYOUT": "default_layout",
        f"{ENV_PREFIX}DEFINITIONS_DIR": "definitions_dir",
        f"{ENV_PREFIX}TMUX_SOCKET_NAME": "tmux_socket_name",
        f"{ENV_PREFIX}TMUX_SOCKET_PATH": "tmux_socket_path",
        f"{ENV_PREFIX}ATTACH": "attach",
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
        f"{ENV_PREFIX}STRUCTURED_LOGGING": "structured_logging",
    }

    for env_var, config_key in env_mappings.items():
        if env_var in os.environ:
            env_value = os.environ[env_var]
            if config_key in ["base_index", "placeholder_index"]:
                try:
                    config[config_key] = int(env_value)
                except ValueError:
                    logger.warning(
                        "Ignoring non-integer environment value", variable=env_var
                    )
                    continue
            elif config_key in ["attach", "structured_logging"]:
                config[config_key] = env_value.lower() in ("true", "1", "yes", "on")
            else:
                config[config_key] = env_value

    return config


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> PrecessionConfig:
    """Load configuration from file and environment variables.

    Precedence order (highest to lowest):
    1. CLI flag overrides
    2. Environment variables
    3. Configuration file
    4. Default values
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file(config_path)
    if config_file:
        config_data.update(load_config_file(config_file))
        logger.debug("Configuration file loaded", path=str(config_file))

    config_data.update(load_env_vars())

    if cli_overrides:
        config_data.update(cli_overrides)

    try:
        return PrecessionConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
