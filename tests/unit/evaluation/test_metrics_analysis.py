"""Unit tests for the statistical analysis engine."""

from datetime import UTC, datetime, timedelta

import pytest

from evalcore.core.domain.exceptions import InsufficientDataException
from evalcore.evaluation.metrics import (
    EvaluationMetrics,
    MetricValue,
    TrendDirection,
    analyze_trends,
    calculate_confidence_interval,
    calculate_mode,
    calculate_percentile,
    calculate_statistical_summary,
    compare_results,
    compare_scores,
    get_t_critical_value,
    pearson_correlation,
)
from evalcore.evaluation.models import EvaluationResult


def series(values, start=None) -> list[MetricValue]:
    start = start or datetime(2024, 1, 1, tzinfo=UTC)
    return [MetricValue(timestamp=start + timedelta(hours=i), value=value) for i, value in enumerate(values)]


class TestDescriptiveStatistics:
    """Tests for descriptive estimators."""

    def test_percentile_odd_count(self) -> None:
        assert calculate_percentile([5, 1, 4, 2, 3], 50) == 3

    def test_percentile_interpolates(self) -> None:
        assert calculate_percentile([1, 2, 3, 4], 50) == pytest.approx(2.5)

    def test_mode_keeps_all_ties(self) -> None:
        assert calculate_mode([3, 1, 3, 1, 2]) == [3, 1]

    def test_population_standard_deviation(self) -> None:
        summary = calculate_statistical_summary([2, 4, 4, 4, 5, 5, 7, 9])

        assert summary.mean == 5.0
        assert summary.standard_deviation == pytest.approx(2.0)
        assert summary.variance == pytest.approx(4.0)
        assert summary.median == 4.5
        assert summary.mode == [4]
        assert summary.range == 7
        assert summary.quartiles.q2 == summary.median
        assert set(summary.percentiles) == {5, 10, 25, 50, 75, 90, 95, 99}

    def test_single_value(self) -> None:
        summary = calculate_statistical_summary([0.7])

        assert summary.standard_deviation == 0.0
        assert summary.skewness == 0.0
        assert summary.kurtosis == 0.0

    def test_constant_values_have_zero_shape(self) -> None:
        summary = calculate_statistical_summary([0.5, 0.5, 0.5, 0.5, 0.5])
        assert summary.skewness == 0.0
        assert summary.kurtosis == 0.0

    def test_right_skew_is_positive(self) -> None:
        summary = calculate_statistical_summary([1, 1, 1, 2, 2, 3, 10])
        assert summary.skewness > 0

    def test_empty_input_raises(self) -> None:
        with pytest.raises(InsufficientDataException) as exc_info:
            calculate_statistical_summary([])
        assert exc_info.value.code == "INSUFFICIENT_DATA"

    def test_pearson_without_spread_is_zero(self) -> None:
        assert pearson_correlation([1, 1, 1], [1, 2, 3]) == 0.0


class TestPerformanceMetrics:
    """Tests for confusion-matrix metrics."""

    def test_perfect_agreement(self) -> None:
        results = [
            EvaluationResult(score=0.9, passed=True),
            EvaluationResult(score=0.8, passed=True),
            EvaluationResult(score=0.2, passed=False),
            EvaluationResult(score=0.1, passed=False),
        ]

        metrics = EvaluationMetrics(results).calculate_performance_metrics()

        assert metrics.accuracy.value == 1.0
        assert metrics.precision.value == 1.0
        assert metrics.recall.value == 1.0
        assert metrics.f1_score.value == 1.0
        assert metrics.mcc.value == pytest.approx(1.0)
        assert metrics.confusion_matrix.total == 4

    def test_full_disagreement(self) -> None:
        results = [EvaluationResult(score=0.9, passed=False), EvaluationResult(score=0.2, passed=True)]

        metrics = EvaluationMetrics(results).calculate_performance_metrics()

        assert metrics.accuracy.value == 0.0
        assert metrics.precision.value == 0.0
        assert metrics.f1_score.value == 0.0
        assert metrics.mcc.value == pytest.approx(-1.0)

    def test_zero_denominators(self) -> None:
        """Should report 0 instead of dividing by zero."""
        results = [EvaluationResult(score=0.1, passed=False), EvaluationResult(score=0.2, passed=False)]

        metrics = EvaluationMetrics(results).calculate_performance_metrics()

        assert metrics.accuracy.value == 1.0
        assert metrics.precision.value == 0.0
        assert metrics.recall.value == 0.0
        assert metrics.mcc.value == 0.0
        assert metrics.specificity.value == 1.0

    def test_custom_threshold(self) -> None:
        results = [EvaluationResult(score=0.6, passed=True)]
        assert EvaluationMetrics(results).calculate_performance_metrics(threshold=0.5).accuracy.value == 1.0
        assert EvaluationMetrics(results).calculate_performance_metrics(threshold=0.7).accuracy.value == 0.0

    def test_empty_results_raise(self) -> None:
        with pytest.raises(InsufficientDataException):
            EvaluationMetrics([]).calculate_performance_metrics()


class TestQualityAndEfficiency:
    """Tests for quality and efficiency metrics."""

    def test_quality_metrics(self, sample_results) -> None:
        quality = EvaluationMetrics(sample_results).calculate_quality_metrics()

        assert quality.validity.value == pytest.approx(0.4)
        assert 0.0 <= quality.consistency.value <= 1.0
        assert 0.0 <= quality.robustness.value <= 1.0

    def test_efficiency_uses_execution_time(self, sample_results) -> None:
        efficiency = EvaluationMetrics(sample_results).calculate_efficiency_metrics()

        assert efficiency.latency.value == pytest.approx(30.0)
        assert efficiency.sample_size == 5

    def test_comprehensive_bundle(self, sample_results) -> None:
        metrics = EvaluationMetrics(sample_results).calculate_comprehensive_metrics()

        assert metrics.performance.threshold == 0.7
        assert metrics.quality.validity.value == pytest.approx(0.4)


class TestCorrelationMatrix:
    """Tests for the correlation matrix."""

    def test_detail_metrics(self) -> None:
        results = [
            EvaluationResult(score=0.5, passed=True, details={"latency": x, "quality": 2 * x, "noise": n})
            for x, n in [(1, 3), (2, 1), (3, 4), (4, 2)]
        ]

        matrix = EvaluationMetrics(results).calculate_correlation_matrix(["latency", "quality"])

        assert matrix.matrix[0][0] == 1.0
        assert matrix.matrix[0][1] == pytest.approx(1.0)
        assert len(matrix.significant_correlations) == 2
        assert matrix.significant_correlations[0].strength == "very strong"

    def test_falls_back_to_score(self) -> None:
        results = [EvaluationResult(score=s, passed=True, details={"latency": s * 10}) for s in (0.2, 0.4, 0.9)]

        matrix = EvaluationMetrics(results).calculate_correlation_matrix(["latency", "missing"])

        assert matrix.matrix[0][1] == pytest.approx(1.0)

    def test_identical_scores_have_no_correlation(self) -> None:
        results = [EvaluationResult(score=0.7, passed=True) for _ in range(10)]

        matrix = EvaluationMetrics(results).calculate_correlation_matrix(["a", "b"])

        assert matrix.matrix == [[1.0, 0.0], [0.0, 1.0]]
        assert matrix.significant_correlations == []

    def test_flat_series_without_exact_mean(self) -> None:
        assert pearson_correlation([0.7] * 10, [0.7] * 10) == 0.0
        assert pearson_correlation([0.1] * 7, [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7]) == 0.0

    def test_perfect_negative_correlation(self) -> None:
        assert pearson_correlation([0.1, 0.2, 0.3], [0.3, 0.2, 0.1]) == pytest.approx(-1.0)


class TestTrendAnalysis:
    """Tests for trend analysis."""

    def test_increasing_series(self) -> None:
        trend = analyze_trends(series([0.80, 0.82, 0.84, 0.86, 0.88]))

        assert trend.trend == TrendDirection.INCREASING
        assert trend.slope == pytest.approx(0.02)
        assert trend.r_squared == pytest.approx(1.0)
        assert trend.confidence == trend.r_squared
        assert len(trend.predictions) == 5
        assert trend.predictions[0].predicted == pytest.approx(0.90)

    def test_sorts_by_timestamp(self) -> None:
        points = series([0.88, 0.86, 0.84, 0.82, 0.80])
        reversed_points = list(reversed(points))
        assert analyze_trends(reversed_points).trend == TrendDirection.DECREASING

    def test_stable_series(self) -> None:
        trend = analyze_trends(series([0.5, 0.5, 0.5]))

        assert trend.trend == TrendDirection.STABLE
        assert trend.r_squared == 1.0
        assert trend.volatility == 0.0

    def test_volatile_series(self) -> None:
        assert analyze_trends(series([0.1, 0.9, 0.1, 0.9])).trend == TrendDirection.VOLATILE

    def test_needs_three_points(self) -> None:
        with pytest.raises(InsufficientDataException, match="at least 3"):
            analyze_trends(series([0.5, 0.6]))

    def test_analyzer_defaults_to_scores(self, sample_results) -> None:
        trend = EvaluationMetrics(sample_results).analyze_trends()
        assert trend.slope < 0


class TestComparison:
    """Tests for comparison and confidence intervals."""

    def test_improvement(self) -> None:
        comparison = compare_scores([0.5, 0.6, 0.7], [0.7, 0.8, 0.9])

        assert comparison.improvement == pytest.approx(1 / 3)
        assert comparison.effect_size == pytest.approx(2.0)
        assert comparison.t_statistic == pytest.approx(2.449, abs=1e-3)
        assert comparison.significant_difference is True
        assert comparison.interpretation == "Large difference (improvement)"

    def test_t_statistic_follows_effect_direction(self) -> None:
        regression = compare_scores([0.7, 0.8, 0.9], [0.5, 0.6, 0.7])

        assert regression.effect_size == pytest.approx(-2.0)
        assert regression.t_statistic == pytest.approx(-2.449, abs=1e-3)
        assert regression.improvement < 0

    def test_identical_groups(self) -> None:
        comparison = compare_scores([0.5, 0.5], [0.5, 0.5])

        assert comparison.effect_size == 0.0
        assert comparison.significant_difference is False
        assert comparison.interpretation == "Negligible difference"

    def test_zero_baseline_mean(self) -> None:
        comparison = compare_scores([0.0, 0.0], [0.4, 0.6])
        assert comparison.improvement == 0.0

    def test_compare_results(self) -> None:
        baseline = [EvaluationResult(score=s, passed=False) for s in (0.6, 0.7)]
        treatment = [EvaluationResult(score=s, passed=True) for s in (0.5, 0.6)]

        comparison = compare_results(baseline, treatment)

        assert comparison.improvement < 0
        assert comparison.interpretation.endswith("(degradation)")

    def test_comparison_needs_data(self) -> None:
        with pytest.raises(InsufficientDataException):
            compare_scores([], [0.5])
        with pytest.raises(InsufficientDataException):
            compare_scores([0.4], [0.5])

    def test_confidence_interval(self) -> None:
        interval = calculate_confidence_interval([1, 2, 3, 4, 5])

        assert interval.mean == 3.0
        assert interval.degrees_of_freedom == 4
        assert interval.critical_value == 2.571
        assert interval.margin == pytest.approx(2.571 * (2.5**0.5) / (5**0.5))
        assert interval.lower == pytest.approx(3.0 - interval.margin)

    def test_confidence_interval_needs_two_values(self) -> None:
        with pytest.raises(InsufficientDataException):
            calculate_confidence_interval([0.5])

    def test_t_table_steps(self) -> None:
        assert get_t_critical_value(30) == 1.96
        assert get_t_critical_value(25) == 2.086
        assert get_t_critical_value(10) == 2.228
        assert get_t_critical_value(9) == 2.571


class TestPublicApi:
    """Tests for the metrics package exports."""

    def test_every_export_resolves(self) -> None:
        import evalcore.evaluation.metrics as metrics

        assert all(hasattr(metrics, name) for name in metrics.__all__)
        assert "TrendDirection" in metrics.__all__
        assert "MetricType" not in metrics.__all__
