"""
Score Set Comparison.

Baseline-versus-treatment comparison and confidence intervals.

Significance here is approximate: the t statistic is checked against the
normal 1.96 cutoff, and confidence intervals use a coarse step table of
two-sided 95% Student-t critical values instead of an inverse-t function.
"""

import math
from collections.abc import Sequence

from evalcore.core.domain.exceptions import InsufficientDataException
from evalcore.evaluation.metrics.interpretation import interpret_effect_size
from evalcore.evaluation.metrics.models import ComparisonResult, ConfidenceInterval
from evalcore.evaluation.metrics.statistics import mean, sample_std
from evalcore.evaluation.models import EvaluationResult

SIGNIFICANCE_CUTOFF = 1.96

# (minimum degrees of freedom, critical value), checked top-down
T_CRITICAL_TABLE: tuple[tuple[int, float], ...] = (
    (30, 1.96),
    (20, 2.086),
    (10, 2.228),
)
T_CRITICAL_FLOOR = 2.571


def get_t_critical_value(degrees_of_freedom: int) -> float:
    for minimum_df, critical_value in T_CRITICAL_TABLE:
        if degrees_of_freedom >= minimum_df:
            return critical_value
    return T_CRITICAL_FLOOR


def pooled_standard_deviation(group1: Sequence[float], group2: Sequence[float]) -> float:
    n1 = len(group1)
    n2 = len(group2)
    if n1 == 0 or n2 == 0 or n1 + n2 <= 2:
        raise InsufficientDataException("pooled standard deviation", required=3, available=n1 + n2)

    mean1 = mean(group1)
    mean2 = mean(group2)
    ss1 = sum((value - mean1) ** 2 for value in group1)
    ss2 = sum((value - mean2) ** 2 for value in group2)
    return math.sqrt((ss1 + ss2) / (n1 + n2 - 2))


def t_statistic(group1: Sequence[float], group2: Sequence[float]) -> float:
    """Two-sample t with pooled variance; 0 when both groups have no spread."""
    pooled = pooled_standard_deviation(group1, group2)
    standard_error = pooled * math.sqrt(1 / len(group1) + 1 / len(group2))
    if standard_error == 0:
        return 0.0
    return (mean(group1) - mean(group2)) / standard_error


def compare_scores(baseline: Sequence[float], treatment: Sequence[float]) -> ComparisonResult:
    """
    Compare two score sets.

    Args:
        baseline: Scores before the change
        treatment: Scores after the change

    Returns:
        ComparisonResult with improvement ratio, Cohen's d and a significance flag
    """
    if not baseline or not treatment:
        raise InsufficientDataException(
            "score comparison",
            required=1,
            available=min(len(baseline), len(treatment)),
            message="Both baseline and treatment need at least one score",
        )

    baseline_mean = mean(baseline)
    treatment_mean = mean(treatment)
    difference = treatment_mean - baseline_mean

    improvement = difference / baseline_mean if baseline_mean != 0 else 0.0
    pooled = pooled_standard_deviation(baseline, treatment)
    effect_size = difference / pooled if pooled != 0 else 0.0
    t_value = t_statistic(treatment, baseline)

    return ComparisonResult(
        baseline_mean=baseline_mean,
        treatment_mean=treatment_mean,
        improvement=improvement,
        effect_size=effect_size,
        t_statistic=t_value,
        significant_difference=abs(t_value) > SIGNIFICANCE_CUTOFF,
        interpretation=interpret_effect_size(effect_size, improvement),
    )


def compare_results(baseline: Sequence[EvaluationResult], treatment: Sequence[EvaluationResult]) -> ComparisonResult:
    return compare_scores([r.score for r in baseline], [r.score for r in treatment])


def calculate_confidence_interval(values: Sequence[float]) -> ConfidenceInterval:
    """mean ± t·(s/√n) with sample standard deviation s and the step-table t."""
    n = len(values)
    if n < 2:
        raise InsufficientDataException("confidence interval", required=2, available=n)

    center = mean(values)
    standard_error = sample_std(values) / math.sqrt(n)
    degrees_of_freedom = n - 1
    critical_value = get_t_critical_value(degrees_of_freedom)
    margin = critical_value * standard_error

    return ConfidenceInterval(
        mean=center,
        lower=center - margin,
        upper=center + margin,
        margin=margin,
        critical_value=critical_value,
        degrees_of_freedom=degrees_of_freedom,
    )
