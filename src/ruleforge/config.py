"""Configuration management for ruleforge using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".ruleforge.json"


class CascadeMode(str, Enum):
    """Whether evaluation carries on after a failure."""
    CONTINUE = "continue"
    STOP = "stop"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class CascadeConfig(BaseModel):
    """Cascade configuration section."""
    rule_level: CascadeMode = Field(alias="ruleLevel", default=CascadeMode.CONTINUE)
    class_level: CascadeMode = Field(alias="classLevel", default=CascadeMode.CONTINUE)

    model_config = ConfigDict(populate_by_name=True)


class MessagesConfig(BaseModel):
    """Message template configuration section."""
    overrides: dict[str, str] = Field(default_factory=dict)
    split_display_names: bool = Field(alias="splitDisplayNames", default=True)

    @field_validator("overrides")
    @classmethod
    def validate_overrides(cls, v):
        for code, template in v.items():
            if not template.strip():
                raise ValueError(f"message override for '{code}' must not be blank")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class RuleforgeConfig(BaseModel):
    """Complete ruleforge configuration model."""
    cascade: CascadeConfig = Field(default_factory=CascadeConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> RuleforgeConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .ruleforge.json

    Returns:
        RuleforgeConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return RuleforgeConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    return create_default_config()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .ruleforge.json by searching up the directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> RuleforgeConfig:
    """Create default configuration: continue cascading, built-in messages."""
    return RuleforgeConfig()
