"""
Metrics Data Models.

Shared models and enums for the statistical analysis engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TrendDirection(Enum):
    """Trend classes for a time series of scores."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"


@dataclass
class MetricValue:
    """A single metric measurement."""

    timestamp: datetime
    value: float
    metadata: dict[str, Any] = field(default_factory=dict)


class Quartiles(BaseModel):
    q1: float
    q2: float
    q3: float
    iqr: float


class StatisticalSummary(BaseModel):
    """Descriptive statistics for a score set."""

    count: int = Field(..., description="Number of data points")
    mean: float
    median: float
    mode: list[float] = Field(..., description="All values sharing the highest frequency")
    standard_deviation: float = Field(..., description="Population standard deviation")
    variance: float = Field(..., description="Population variance")
    min: float
    max: float
    range: float
    quartiles: Quartiles
    percentiles: dict[int, float] = Field(..., description="Percentile -> value")
    skewness: float
    kurtosis: float = Field(..., description="Excess kurtosis")


class RegressionFit(BaseModel):
    slope: float
    intercept: float
    r_squared: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


class MetricScore(BaseModel):
    """A named metric value with its reading."""

    name: str
    value: float
    description: str
    interpretation: str


class ConfusionMatrix(BaseModel):
    true_positives: int = 0
    true_negatives: int = 0
    false_positives: int = 0
    false_negatives: int = 0

    @property
    def total(self) -> int:
        return self.true_positives + self.true_negatives + self.false_positives + self.false_negatives


class PerformanceMetrics(BaseModel):
    """Confusion-matrix metrics from thresholded scores versus passed flags."""

    threshold: float
    confusion_matrix: ConfusionMatrix
    accuracy: MetricScore
    precision: MetricScore
    recall: MetricScore
    f1_score: MetricScore
    specificity: MetricScore
    sensitivity: MetricScore
    mcc: MetricScore


class QualityMetrics(BaseModel):
    consistency: MetricScore
    reliability: MetricScore
    validity: MetricScore
    robustness: MetricScore


class EfficiencyMetrics(BaseModel):
    throughput: MetricScore
    latency: MetricScore
    sample_size: int = Field(..., description="Results carrying an execution_time detail")


class ComprehensiveMetrics(BaseModel):
    performance: PerformanceMetrics
    quality: QualityMetrics
    efficiency: EfficiencyMetrics


class CorrelationPair(BaseModel):
    metric1: str
    metric2: str
    correlation: float
    strength: str


class CorrelationMatrix(BaseModel):
    metrics: list[str]
    matrix: list[list[float]]
    significant_correlations: list[CorrelationPair] = Field(default_factory=list)


class TrendPrediction(BaseModel):
    period: int
    predicted: float
    confidence_interval: tuple[float, float]


class TrendAnalysis(BaseModel):
    """Regression-based trend of a score time series."""

    trend: TrendDirection
    slope: float
    intercept: float
    r_squared: float
    volatility: float
    confidence: float = Field(..., description="R-squared of the fitted line")
    predictions: list[TrendPrediction] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    """Baseline versus treatment score sets."""

    baseline_mean: float
    treatment_mean: float
    improvement: float = Field(..., description="Relative change of the mean versus baseline")
    effect_size: float = Field(..., description="Cohen's d with pooled standard deviation")
    t_statistic: float
    significant_difference: bool = Field(..., description="|t| > 1.96 (normal approximation)")
    interpretation: str


class ConfidenceInterval(BaseModel):
    mean: float
    lower: float
    upper: float
    margin: float
    critical_value: float
    degrees_of_freedom: int
