"""
Evaluation Models.

Shared models for the criterion aggregation engine: criteria, configs,
subjects, per-criterion results and per-subject reports.
"""

import math
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator

CustomAggregator = Callable[[list[float], list[float]], float]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class AggregationMethod(str, Enum):
    """Rules for combining per-criterion scores into one overall score."""

    WEIGHTED_AVERAGE = "weighted_average"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    CUSTOM = "custom"


class Criterion(BaseModel):
    """One named, weighted dimension of evaluation."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique criterion name within a config")
    description: str = Field(default="", description="What the scorer should look for")
    weight: float = Field(default=1.0, description="Relative importance (0.0 to 1.0)")
    threshold: float | None = Field(default=None, description="Per-criterion passing threshold (0.0 to 1.0)")
    required: bool = Field(default=False, description="Report fails whenever this criterion fails")


class EvaluationConfig(BaseModel):
    """Criteria plus the rules used to aggregate and judge them."""

    model_config = ConfigDict(frozen=True)

    criteria: list[Criterion] = Field(default_factory=list, description="Criteria in declaration order")
    passing_threshold: float = Field(default=0.7, description="Minimum overall score to pass")
    aggregation_method: AggregationMethod = Field(
        default=AggregationMethod.WEIGHTED_AVERAGE, description="How criterion scores are combined"
    )
    custom_aggregator: CustomAggregator | None = Field(
        default=None, exclude=True, description="fn(scores, weights) -> score, required for 'custom'"
    )

    @property
    def criterion_names(self) -> list[str]:
        return [criterion.name for criterion in self.criteria]

    @property
    def total_weight(self) -> float:
        return sum(criterion.weight for criterion in self.criteria)


class EvaluationContext(BaseModel):
    """
    The subject being judged.

    An opaque bag at the engine level; concrete scorers decide which fields
    they read. Unknown keys are kept.
    """

    model_config = ConfigDict(extra="allow")

    input: Any = Field(default=None, description="Input given to the system under evaluation")
    output: Any = Field(default=None, description="Output produced by the system under evaluation")
    expected: Any = Field(default=None, description="Reference output, when one exists")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form subject metadata")
    environment: dict[str, Any] = Field(default_factory=dict, description="Execution environment data")
    custom_criteria: list[Criterion] | None = Field(
        default=None, description="Suite criteria attached by the orchestration service"
    )


class EvaluationResult(BaseModel):
    """Standard evaluation result structure."""

    score: float = Field(..., description="Evaluation score, clamped to 0.0-1.0")
    passed: bool = Field(..., description="Whether the score met its threshold")
    feedback: str | None = Field(default=None, description="Human-readable explanation of the score")
    details: dict[str, JsonValue] = Field(default_factory=dict, description="Diagnostic key/value data")
    timestamp: datetime = Field(default_factory=utc_now, description="When the result was produced")

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, value: Any) -> float:
        score = float(value)
        if math.isnan(score):
            return 0.0
        return max(0.0, min(1.0, score))


class EvaluatorInfo(BaseModel):
    """Identity of the evaluator that produced a report."""

    name: str
    version: str
    config: EvaluationConfig


class EvaluationReport(BaseModel):
    """Full per-subject evaluation outcome."""

    overall_score: float = Field(..., description="Aggregated score (0.0 to 1.0)")
    passed: bool = Field(..., description="Threshold met and every required criterion passed")
    criteria_results: dict[str, EvaluationResult] = Field(
        default_factory=dict, description="Per-criterion results in criteria order"
    )
    summary: str = Field(..., description="One-sentence outcome summary")
    recommendations: list[str] = Field(default_factory=list, description="One line per failed criterion")
    timestamp: datetime = Field(default_factory=utc_now)
    evaluator_info: EvaluatorInfo

    @property
    def criterion_scores(self) -> dict[str, float]:
        return {name: result.score for name, result in self.criteria_results.items()}

    @property
    def passed_count(self) -> int:
        return sum(1 for result in self.criteria_results.values() if result.passed)
