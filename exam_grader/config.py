"""
Configuration management for the exam grader.

Uses Pydantic Settings for type-safe configuration loading from environment variables.
All configuration is validated at startup to fail fast on misconfiguration.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a default, so an empty environment yields the
    standard grading policy.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXAM_GRADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Grading Policy
    # ==========================================================================
    default_numeric_tolerance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Tolerance applied to numeric questions that define none",
    )

    short_text_case_sensitive: bool = Field(
        default=False,
        description="Compare short text answers case-sensitively",
    )

    short_text_collapse_whitespace: bool = Field(
        default=False,
        description="Collapse internal runs of whitespace before comparing short text",
    )

    short_text_allow_regex: bool = Field(
        default=True,
        description="Treat short text references written as /pattern/ as regular expressions",
    )

    # ==========================================================================
    # File Processing Configuration
    # ==========================================================================
    max_file_size_mb: float = Field(
        default=10.0,
        ge=0.1,
        le=100.0,
        description="Maximum allowed exam file size in megabytes",
    )

    # ==========================================================================
    # Output Configuration
    # ==========================================================================
    output_directory: Path = Field(
        default=Path("./output"),
        description="Directory for reports saved under a bare file name",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Log level used by the command-line interface",
    )

    @field_validator("default_numeric_tolerance", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        """Convert numeric values to Decimal for precision."""
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v))

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept lowercase log level names."""
        return v.upper() if isinstance(v, str) else v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    """
    return Settings()
