"""
Configuration Module
====================

Loads runtime settings from environment variables and an optional ``.env``
file. Every variable carries the ``BANKSTATEMENT_`` prefix, e.g.
``BANKSTATEMENT_LOG_LEVEL=DEBUG``.

Heuristic thresholds for the extraction engine live separately in
:mod:`bankstatement.extractors.excel.config`.
"""

import logging

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """
    Process-level settings.

    Attributes:
        LOG_LEVEL: level name for the ``bankstatement`` logger
        FAILURE_EXIT_CODE: exit status of the CLI when parsing fails
            (set to 0 to report failures only through stderr)
        JSON_INDENT: indentation of the emitted JSON document
        WRITE_OUTPUT_FILE: write ``<input>.json`` next to the input file
    """

    model_config = SettingsConfigDict(
        env_prefix="BANKSTATEMENT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"
    FAILURE_EXIT_CODE: int = 1
    JSON_INDENT: int = 2
    WRITE_OUTPUT_FILE: bool = True

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = (v or "").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(
                f"Unknown log level {v!r}; expected one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
            )
        return level

    @field_validator("JSON_INDENT")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if v < 0:
            raise ValueError("JSON_INDENT must not be negative")
        return v


_settings_instance = None


def get_settings() -> Settings:
    """Return the cached :class:`Settings`, creating it on first use."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
