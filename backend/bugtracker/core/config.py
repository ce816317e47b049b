"""
Application configuration module.

Provides centralized, environment-safe configuration management
with sensible defaults.
"""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables
    prefixed with BUGTRACKER_.

    Attributes:
        app_name: Application name.
        environment: Deployment environment name.
        log_level: Logging level.
        log_format: "json" for production, "console" for development.
        transition_rule_set: Which bug status transition table to enforce.
    """

    app_name: str = Field(default="Bug Tracker Workflow Core")
    environment: str = Field(default="development")

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    # Workflow configuration
    transition_rule_set: Literal["standard", "extended"] = Field(
        default="standard",
        description="standard: role table used by the UI; "
                    "extended: adds code review and QA testing stages",
    )

    model_config = {
        "env_prefix": "BUGTRACKER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        logger.info(
            f"Settings loaded: environment={_settings.environment}, "
            f"transition_rule_set={_settings.transition_rule_set}"
        )
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
