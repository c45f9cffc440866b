"""
Metrics Module.

Statistical analysis engine for evaluation results.

Components:
- statistics: Descriptive estimators, correlation and regression
- EvaluationMetrics: Performance, quality, efficiency, correlation and trend metrics
- comparison: Baseline/treatment comparison and confidence intervals
"""

from evalcore.evaluation.metrics.analyzer import EvaluationMetrics, analyze_trends
from evalcore.evaluation.metrics.comparison import (
    calculate_confidence_interval,
    compare_results,
    compare_scores,
    get_t_critical_value,
)
from evalcore.evaluation.metrics.models import (
    ComparisonResult,
    ComprehensiveMetrics,
    ConfidenceInterval,
    ConfusionMatrix,
    CorrelationMatrix,
    CorrelationPair,
    EfficiencyMetrics,
    MetricScore,
    MetricValue,
    PerformanceMetrics,
    QualityMetrics,
    StatisticalSummary,
    TrendAnalysis,
    TrendDirection,
    TrendPrediction,
)
from evalcore.evaluation.metrics.statistics import (
    calculate_median,
    calculate_mode,
    calculate_percentile,
    calculate_statistical_summary,
    linear_regression,
    pearson_correlation,
)

__all__ = [
    # Models
    "MetricValue",
    "MetricScore",
    "StatisticalSummary",
    "ConfusionMatrix",
    "PerformanceMetrics",
    "QualityMetrics",
    "EfficiencyMetrics",
    "ComprehensiveMetrics",
    "CorrelationPair",
    "CorrelationMatrix",
    "TrendDirection",
    "TrendPrediction",
    "TrendAnalysis",
    "ComparisonResult",
    "ConfidenceInterval",
    # Estimators
    "calculate_statistical_summary",
    "calculate_percentile",
    "calculate_median",
    "calculate_mode",
    "pearson_correlation",
    "linear_regression",
    # Analysis
    "EvaluationMetrics",
    "analyze_trends",
    "compare_scores",
    "compare_results",
    "calculate_confidence_interval",
    "get_t_critical_value",
]
