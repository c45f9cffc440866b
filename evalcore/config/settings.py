from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EvaluationSettings(BaseSettings):
    """
    Evaluation engine settings using Pydantic BaseSettings.
    Loaded automatically from environment variables and `.env`.
    """

    PROJECT_NAME: str = "evalcore"
    VERSION: str = "0.1.0"

    # Aggregation defaults
    EVALUATION_PASSING_THRESHOLD: float = Field(
        0.7, description="Default passing threshold for preset suites (0.0-1.0)"
    )

    # Concurrency
    EVALUATION_DEFAULT_PARALLELISM: int = Field(5, description="Max subjects evaluated concurrently in a batch")
    EVALUATION_PARALLEL_EXECUTION: bool = Field(
        True, description="Run evaluators of a comprehensive request concurrently"
    )
    EVALUATION_CONCURRENT_CRITERIA: bool = Field(True, description="Score criteria of one subject concurrently")
    EVALUATION_CRITERION_TIMEOUT: float | None = Field(
        None, description="Timeout in seconds for a single criterion scorer (None = no timeout)"
    )

    # History and reporting
    EVALUATION_HISTORY_MAX_SIZE: int = Field(1000, description="Max results kept in the evaluation history")
    EVALUATION_PERFORMER_LIMIT: int = Field(5, description="Max top/bottom performers listed in a batch summary")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Log level")
    LOG_FORMAT: str = Field("colored", description="Log format: colored, json or plain")

    ENVIRONMENT: str = Field("production", description="Runtime environment")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("EVALUATION_PASSING_THRESHOLD")
    @classmethod
    def validate_passing_threshold(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("EVALUATION_PASSING_THRESHOLD must be between 0 and 1")
        return v

    @field_validator("EVALUATION_DEFAULT_PARALLELISM")
    @classmethod
    def validate_parallelism(cls, v):
        if v < 1:
            raise ValueError("EVALUATION_DEFAULT_PARALLELISM must be at least 1")
        if v > 256:
            raise ValueError("EVALUATION_DEFAULT_PARALLELISM should not exceed 256")
        return v

    @field_validator("EVALUATION_CRITERION_TIMEOUT")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("EVALUATION_CRITERION_TIMEOUT must be positive")
        return v

    @field_validator("EVALUATION_HISTORY_MAX_SIZE", "EVALUATION_PERFORMER_LIMIT")
    @classmethod
    def validate_positive_int(cls, v):
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in {"colored", "json", "plain"}:
            raise ValueError("LOG_FORMAT must be one of: colored, json, plain")
        return v

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT in {"development", "test"}


_settings_instance: EvaluationSettings | None = None


def get_settings() -> EvaluationSettings:
    """
    Return a cached settings instance.
    Components accept an explicit instance; this is only the default.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = EvaluationSettings()
    return _settings_instance
