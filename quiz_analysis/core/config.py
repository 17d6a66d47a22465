"""
Application configuration settings.
"""
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quiz_analysis.schemas.engine import ScoringConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Quiz Analysis Engine"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Batch analysis
    # Bounds how many analyses (and their upstream lookups) run at once
    ANALYSIS_BATCH_CONCURRENCY: int = Field(
        default=5,
        ge=1,
        description="Maximum number of concurrent analyses in a batch",
    )

    # Default scoring configuration
    # Used when seeding engines and by the command line tool when an engine
    # payload omits its scoring config.
    ANALYSIS_PRIMARY_POINT_VALUE: float = 10.0
    ANALYSIS_SECONDARY_POINT_VALUE: float = 5.0
    ANALYSIS_PRIMARY_POINT_WEIGHT: float = 1.0
    ANALYSIS_SECONDARY_POINT_WEIGHT: float = 1.0
    ANALYSIS_PRIMARY_DISTANCE_FALLOFF: float = 0.1  # 10% decay per step
    ANALYSIS_SECONDARY_DISTANCE_FALLOFF: float = 0.5  # 50% decay per step
    ANALYSIS_BETA: float = 1.0
    ANALYSIS_DISABLE_SECONDARY_POINTS: bool = False
    ANALYSIS_PRIMARY_MIN_POINTS: float = 0.0
    ANALYSIS_SECONDARY_MIN_POINTS: float = 0.0
    ANALYSIS_MIN_PERCENTAGE_THRESHOLD: float = 0.0
    ANALYSIS_ENABLE_QUESTION_BREAKDOWN: bool = True
    ANALYSIS_MAX_ENDING_RESULTS: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_scoring_defaults(self) -> Self:
        """Fail at startup when the default scoring config is out of range."""
        self.default_scoring_config()
        return self

    def default_scoring_config(self) -> ScoringConfig:
        """Build the default ScoringConfig from the ANALYSIS_* settings."""
        return ScoringConfig(
            primary_point_value=self.ANALYSIS_PRIMARY_POINT_VALUE,
            secondary_point_value=self.ANALYSIS_SECONDARY_POINT_VALUE,
            primary_point_weight=self.ANALYSIS_PRIMARY_POINT_WEIGHT,
            secondary_point_weight=self.ANALYSIS_SECONDARY_POINT_WEIGHT,
            primary_distance_falloff=self.ANALYSIS_PRIMARY_DISTANCE_FALLOFF,
            secondary_distance_falloff=self.ANALYSIS_SECONDARY_DISTANCE_FALLOFF,
            beta=self.ANALYSIS_BETA,
            disable_secondary_points=self.ANALYSIS_DISABLE_SECONDARY_POINTS,
            primary_min_points=self.ANALYSIS_PRIMARY_MIN_POINTS,
            secondary_min_points=self.ANALYSIS_SECONDARY_MIN_POINTS,
            min_percentage_threshold=self.ANALYSIS_MIN_PERCENTAGE_THRESHOLD,
            enable_question_breakdown=self.ANALYSIS_ENABLE_QUESTION_BREAKDOWN,
            max_ending_results=self.ANALYSIS_MAX_ENDING_RESULTS,
        )


settings = Settings()


def default_scoring_config() -> ScoringConfig:
    """Default scoring configuration from the process settings."""
    return settings.default_scoring_config()
