"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).

Every setting has a default, so the query pipeline runs with an empty environment. The values only
tune advisory thresholds; they never change which queries are valid.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Limits must be positive and the warning penalty must stay in [0, 1) so that confidence remains
    a probability-like score.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    max_operators: int = Field(default=10, alias="QUERY_MAX_OPERATORS")
    max_query_length: int = Field(default=200, alias="QUERY_MAX_LENGTH")
    max_nesting_depth: int = Field(default=5, alias="QUERY_MAX_NESTING_DEPTH")

    warning_confidence_penalty: float = Field(default=0.1, alias="WARNING_CONFIDENCE_PENALTY")
    refinement_result_threshold: int = Field(default=100, alias="REFINEMENT_RESULT_THRESHOLD")
    suggestion_max_distance: int = Field(default=2, alias="SUGGESTION_MAX_DISTANCE")

    @field_validator(
        "max_operators",
        "max_query_length",
        "max_nesting_depth",
        "refinement_result_threshold",
        "suggestion_max_distance",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("query limits must be positive")
        return value

    @field_validator("warning_confidence_penalty")
    @classmethod
    def validate_penalty(cls, value: float) -> float:
        """Reject penalties that would zero out (or invert) confidence for a single warning."""

        if not 0 <= value < 1:
            raise ValueError("WARNING_CONFIDENCE_PENALTY must be in [0, 1)")
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
