"""
Configuration management for cmdr.

Settings are loaded from a YAML or JSON file or from ``CMDR_*`` environment
variables and validated with pydantic.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cmdr.core.exceptions import ConfigError
from cmdr.core.runner import CommandRunner


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    level: str = Field("INFO", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file: Optional[str] = Field(None, description="JSON log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(
                f"Invalid logging level: {v}. Must be one of {valid_levels}"
            )
        return v.upper()


class RunnerConfig(BaseModel):
    """Settings applied to every invocation."""

    encoding: str = Field("utf-8", description="Encoding of captured output")
    errors: str = Field("replace", description="Decoding error handler")
    default_timeout: Optional[float] = Field(
        None, description="Deadline in seconds applied by the CLI"
    )

    @field_validator("default_timeout")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"Invalid timeout: {v}. Must be positive")
        return v


class CmdrConfig(BaseModel):
    """Main configuration class for cmdr."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    runner: RunnerConfig = Field(default_factory=RunnerConfig)
    catalog: Optional[str] = Field(None, description="Command catalog file")

    @classmethod
    def load_from_file(cls, config_path: Union[str, Path]) -> "CmdrConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            CmdrConfig instance

        Raises:
            ConfigError: If configuration file cannot be loaded or parsed
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigError(f"Unsupported configuration file format: {suffix}")

        try:
            with open(config_path, "r") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def load_from_env(cls) -> "CmdrConfig":
        """
        Load configuration from environment variables.

        Returns:
            CmdrConfig instance with values from environment variables
        """
        config_data = {}

        logging_config = {}
        if os.getenv("CMDR_LOG_LEVEL"):
            logging_config["level"] = os.getenv("CMDR_LOG_LEVEL")
        if os.getenv("CMDR_LOG_FILE"):
            logging_config["file"] = os.getenv("CMDR_LOG_FILE")
        if logging_config:
            config_data["logging"] = logging_config

        runner_config = {}
        if os.getenv("CMDR_ENCODING"):
            runner_config["encoding"] = os.getenv("CMDR_ENCODING")
        if os.getenv("CMDR_TIMEOUT"):
            runner_config["default_timeout"] = os.getenv("CMDR_TIMEOUT")
        if runner_config:
            config_data["runner"] = runner_config

        if os.getenv("CMDR_CATALOG"):
            config_data["catalog"] = os.getenv("CMDR_CATALOG")

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e


def runner_from_config(config: CmdrConfig) -> CommandRunner:
    """Build a CommandRunner using the configured decoding settings."""
    return CommandRunner(encoding=config.runner.encoding, errors=config.runner.errors)
