"""
Result Set Analyzer.

Derives performance, quality, efficiency, correlation and trend metrics from a
sequence of already-produced evaluation results.
"""

import math
from collections.abc import Sequence

from evalcore.core.domain.exceptions import InsufficientDataException
from evalcore.core.shared.logger import get_logger
from evalcore.evaluation.metrics.interpretation import (
    interpret,
    interpret_correlation_strength,
    interpret_latency,
)
from evalcore.evaluation.metrics.models import (
    ComprehensiveMetrics,
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
    calculate_statistical_summary,
    coefficient_of_variation,
    linear_regression,
    pearson_correlation,
    residual_standard_error,
)
from evalcore.evaluation.models import EvaluationResult

logger = get_logger(__name__)

DEFAULT_PREDICTION_THRESHOLD = 0.7
SIGNIFICANT_CORRELATION = 0.3
TREND_MIN_POINTS = 3
TREND_SLOPE_THRESHOLD = 0.01
TREND_VOLATILITY_THRESHOLD = 0.3
FORECAST_PERIODS = 5
FORECAST_Z = 1.96
OUTLIER_SIGMAS = 2


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


class EvaluationMetrics:
    """
    Analyzes a result set.

    Responsibilities:
    - Summarize score distributions
    - Score thresholded predictions against passed flags
    - Correlate detail metrics
    - Fit and classify score trends
    """

    def __init__(self, results: Sequence[EvaluationResult]):
        self.results = list(results)

    @property
    def scores(self) -> list[float]:
        return [result.score for result in self.results]

    def calculate_statistical_summary(self, values: Sequence[float] | None = None) -> StatisticalSummary:
        return calculate_statistical_summary(self.scores if values is None else values)

    def calculate_performance_metrics(self, threshold: float = DEFAULT_PREDICTION_THRESHOLD) -> PerformanceMetrics:
        """
        Build a confusion matrix and derive classification metrics.

        A result is predicted positive when score >= threshold and actually
        positive when its `passed` flag is set. Metrics with a zero
        denominator are 0.
        """
        if not self.results:
            raise InsufficientDataException("performance metrics", required=1, available=0)

        matrix = ConfusionMatrix()
        for result in self.results:
            predicted = result.score >= threshold
            if predicted and result.passed:
                matrix.true_positives += 1
            elif not predicted and not result.passed:
                matrix.true_negatives += 1
            elif predicted:
                matrix.false_positives += 1
            else:
                matrix.false_negatives += 1

        tp = matrix.true_positives
        tn = matrix.true_negatives
        fp = matrix.false_positives
        fn = matrix.false_negatives

        accuracy = _ratio(tp + tn, matrix.total)
        precision = _ratio(tp, tp + fp)
        recall = _ratio(tp, tp + fn)
        f1_score = _ratio(2 * precision * recall, precision + recall)
        specificity = _ratio(tn, tn + fp)
        mcc_denominator = math.sqrt((tp + fp) * (tp + fn) * (tn + fp) * (tn + fn))
        mcc = _ratio(tp * tn - fp * fn, mcc_denominator)

        return PerformanceMetrics(
            threshold=threshold,
            confusion_matrix=matrix,
            accuracy=MetricScore(
                name="Accuracy",
                value=accuracy,
                description="Proportion of correct predictions",
                interpretation=interpret("accuracy", accuracy),
            ),
            precision=MetricScore(
                name="Precision",
                value=precision,
                description="Proportion of positive predictions that were correct",
                interpretation=interpret("precision", precision),
            ),
            recall=MetricScore(
                name="Recall",
                value=recall,
                description="Proportion of actual positives that were correctly identified",
                interpretation=interpret("recall", recall),
            ),
            f1_score=MetricScore(
                name="F1 Score",
                value=f1_score,
                description="Harmonic mean of precision and recall",
                interpretation=interpret("f1_score", f1_score),
            ),
            specificity=MetricScore(
                name="Specificity",
                value=specificity,
                description="Proportion of actual negatives that were correctly identified",
                interpretation=interpret("specificity", specificity),
            ),
            sensitivity=MetricScore(
                name="Sensitivity",
                value=recall,
                description="Same as recall - proportion of actual positives correctly identified",
                interpretation=interpret("recall", recall),
            ),
            mcc=MetricScore(
                name="Matthews Correlation Coefficient",
                value=mcc,
                description="Correlation between predicted and actual classifications",
                interpretation=interpret("mcc", mcc),
            ),
        )

    def calculate_quality_metrics(self) -> QualityMetrics:
        summary = self.calculate_statistical_summary()
        consistency = max(0.0, 1 - _ratio(summary.standard_deviation, summary.mean)) if summary.mean else 0.0
        reliability = consistency
        validity = _ratio(sum(1 for r in self.results if r.passed), len(self.results))
        robustness = self._calculate_robustness(summary)

        return QualityMetrics(
            consistency=MetricScore(
                name="Consistency",
                value=consistency,
                description="How consistent the evaluation results are",
                interpretation=interpret("consistency", consistency),
            ),
            reliability=MetricScore(
                name="Reliability",
                value=reliability,
                description="Internal consistency of the scores (1 - coefficient of variation)",
                interpretation=interpret("reliability", reliability),
            ),
            validity=MetricScore(
                name="Validity",
                value=validity,
                description="Share of results that passed",
                interpretation=interpret("validity", validity),
            ),
            robustness=MetricScore(
                name="Robustness",
                value=robustness,
                description="How resistant the mean score is to outliers",
                interpretation=interpret("robustness", robustness),
            ),
        )

    def _calculate_robustness(self, summary: StatisticalSummary) -> float:
        limit = OUTLIER_SIGMAS * summary.standard_deviation
        kept = [score for score in self.scores if abs(score - summary.mean) <= limit]
        if not kept or summary.mean == 0:
            return 0.0
        kept_mean = sum(kept) / len(kept)
        return max(0.0, 1 - abs(summary.mean - kept_mean) / summary.mean)

    def calculate_efficiency_metrics(self) -> EfficiencyMetrics:
        """Latency and throughput from the `execution_time` detail (milliseconds)."""
        times = [
            float(result.details["execution_time"])
            for result in self.results
            if isinstance(result.details.get("execution_time"), (int, float))
            and not isinstance(result.details.get("execution_time"), bool)
        ]
        latency = sum(times) / len(times) if times else 0.0
        throughput = 1000 / latency if latency > 0 else 0.0

        return EfficiencyMetrics(
            throughput=MetricScore(
                name="Throughput",
                value=throughput,
                description="Number of evaluations per second",
                interpretation=interpret("throughput", throughput),
            ),
            latency=MetricScore(
                name="Latency",
                value=latency,
                description="Average evaluation time in milliseconds",
                interpretation=interpret_latency(latency),
            ),
            sample_size=len(times),
        )

    def calculate_comprehensive_metrics(self, threshold: float = DEFAULT_PREDICTION_THRESHOLD) -> ComprehensiveMetrics:
        return ComprehensiveMetrics(
            performance=self.calculate_performance_metrics(threshold),
            quality=self.calculate_quality_metrics(),
            efficiency=self.calculate_efficiency_metrics(),
        )

    def _metric_series(self, name: str) -> list[float]:
        values = []
        for result in self.results:
            value = result.details.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                values.append(float(value))
            else:
                values.append(result.score)
        return values

    def calculate_correlation_matrix(self, metric_names: Sequence[str]) -> CorrelationMatrix:
        """
        Pearson correlation between detail metrics.

        Each result contributes `details[name]` when it is numeric, else its
        score. Off-diagonal pairs with |r| > 0.3 are listed as significant.
        """
        names = list(metric_names)
        series = {name: self._metric_series(name) for name in names}

        matrix: list[list[float]] = []
        significant: list[CorrelationPair] = []
        for i, first in enumerate(names):
            row = []
            for j, second in enumerate(names):
                if i == j:
                    row.append(1.0)
                    continue
                correlation = pearson_correlation(series[first], series[second])
                row.append(correlation)
                if abs(correlation) > SIGNIFICANT_CORRELATION:
                    significant.append(
                        CorrelationPair(
                            metric1=first,
                            metric2=second,
                            correlation=correlation,
                            strength=interpret_correlation_strength(abs(correlation)),
                        )
                    )
            matrix.append(row)

        return CorrelationMatrix(metrics=names, matrix=matrix, significant_correlations=significant)

    def analyze_trends(self, time_series: Sequence[MetricValue] | None = None) -> TrendAnalysis:
        """
        Fit a least-squares line through a time-ordered series.

        Defaults to the analyzed results' scores ordered by timestamp.
        """
        if time_series is None:
            time_series = [MetricValue(timestamp=r.timestamp, value=r.score) for r in self.results]
        return analyze_trends(time_series)


def analyze_trends(time_series: Sequence[MetricValue]) -> TrendAnalysis:
    if len(time_series) < TREND_MIN_POINTS:
        raise InsufficientDataException(
            "trend analysis",
            required=TREND_MIN_POINTS,
            available=len(time_series),
            message=f"Need at least {TREND_MIN_POINTS} data points for trend analysis",
        )

    ordered = sorted(time_series, key=lambda point: point.timestamp)
    n = len(ordered)
    x = [float(i) for i in range(n)]
    y = [float(point.value) for point in ordered]

    fit = linear_regression(x, y)
    volatility = coefficient_of_variation(y)

    if volatility > TREND_VOLATILITY_THRESHOLD:
        trend = TrendDirection.VOLATILE
    elif abs(fit.slope) < TREND_SLOPE_THRESHOLD:
        trend = TrendDirection.STABLE
    elif fit.slope > 0:
        trend = TrendDirection.INCREASING
    else:
        trend = TrendDirection.DECREASING

    margin = FORECAST_Z * residual_standard_error(x, y, fit)
    predictions = []
    for period in range(1, FORECAST_PERIODS + 1):
        predicted = fit.predict(n + period - 1)
        predictions.append(
            TrendPrediction(period=period, predicted=predicted, confidence_interval=(predicted - margin, predicted + margin))
        )

    logger.debug(
        "Trend analyzed", points=n, trend=trend.value, slope=round(fit.slope, 4), r_squared=round(fit.r_squared, 3)
    )

    return TrendAnalysis(
        trend=trend,
        slope=fit.slope,
        intercept=fit.intercept,
        r_squared=fit.r_squared,
        volatility=volatility,
        confidence=fit.r_squared,
        predictions=predictions,
    )
