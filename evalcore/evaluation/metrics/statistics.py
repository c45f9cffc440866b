"""
Descriptive Statistics.

Pure, stateless estimators over sequences of scores. Variance and standard
deviation are population estimators (divide by N) unless stated otherwise.
"""

import math
from collections.abc import Sequence

from evalcore.core.domain.exceptions import InsufficientDataException
from evalcore.evaluation.metrics.models import Quartiles, RegressionFit, StatisticalSummary

SUMMARY_PERCENTILES = (5, 10, 25, 50, 75, 90, 95, 99)


def mean(values: Sequence[float]) -> float:
    if not values:
        raise InsufficientDataException("mean", required=1, available=0)
    return sum(values) / len(values)


def population_variance(values: Sequence[float], center: float | None = None) -> float:
    center = mean(values) if center is None else center
    return sum((value - center) ** 2 for value in values) / len(values)


def population_std(values: Sequence[float], center: float | None = None) -> float:
    return math.sqrt(population_variance(values, center))


def sample_std(values: Sequence[float]) -> float:
    """Standard deviation with Bessel's correction (divide by N-1)."""
    if len(values) < 2:
        raise InsufficientDataException("sample standard deviation", required=2, available=len(values))
    center = mean(values)
    return math.sqrt(sum((value - center) ** 2 for value in values) / (len(values) - 1))


def calculate_median(values: Sequence[float]) -> float:
    if not values:
        raise InsufficientDataException("median", required=1, available=0)
    ordered = sorted(values)
    count = len(ordered)
    middle = count // 2
    if count % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def calculate_mode(values: Sequence[float]) -> list[float]:
    """Every value sharing the highest frequency, in first-seen order."""
    frequency: dict[float, int] = {}
    for value in values:
        frequency[value] = frequency.get(value, 0) + 1
    if not frequency:
        return []
    max_frequency = max(frequency.values())
    return [value for value, count in frequency.items() if count == max_frequency]


def calculate_percentile(values: Sequence[float], percentile: float) -> float:
    """
    Linear-interpolation percentile.

    index = p/100 * (n-1); the result interpolates between the values at
    floor(index) and ceil(index) of the sorted data.
    """
    if not values:
        raise InsufficientDataException("percentile", required=1, available=0)
    if not 0 <= percentile <= 100:
        raise ValueError(f"Percentile must be between 0 and 100, got {percentile}")

    ordered = sorted(values)
    index = (percentile / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if upper >= len(ordered):
        return ordered[-1]
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def calculate_skewness(values: Sequence[float], center: float, std: float) -> float:
    """Bias-adjusted sample skewness; 0 when undefined (n < 3 or zero spread)."""
    n = len(values)
    if n < 3 or std == 0:
        return 0.0
    cubed = sum(((value - center) / std) ** 3 for value in values)
    return (n / ((n - 1) * (n - 2))) * cubed


def calculate_kurtosis(values: Sequence[float], center: float, std: float) -> float:
    """Bias-adjusted excess kurtosis; 0 when undefined (n < 4 or zero spread)."""
    n = len(values)
    if n < 4 or std == 0:
        return 0.0
    fourth = sum(((value - center) / std) ** 4 for value in values)
    return (n * (n + 1)) / ((n - 1) * (n - 2) * (n - 3)) * fourth - (3 * (n - 1) ** 2) / ((n - 2) * (n - 3))


def calculate_statistical_summary(values: Sequence[float]) -> StatisticalSummary:
    """Full descriptive summary of a score set."""
    if not values:
        raise InsufficientDataException(
            "statistical analysis", required=1, available=0, message="No data available for statistical analysis"
        )

    scores = [float(value) for value in values]
    count = len(scores)
    center = sum(scores) / count
    variance = population_variance(scores, center)
    std = math.sqrt(variance)
    median = calculate_median(scores)

    q1 = calculate_percentile(scores, 25)
    q3 = calculate_percentile(scores, 75)
    low = min(scores)
    high = max(scores)

    return StatisticalSummary(
        count=count,
        mean=center,
        median=median,
        mode=calculate_mode(scores),
        standard_deviation=std,
        variance=variance,
        min=low,
        max=high,
        range=high - low,
        quartiles=Quartiles(q1=q1, q2=median, q3=q3, iqr=q3 - q1),
        percentiles={p: calculate_percentile(scores, p) for p in SUMMARY_PERCENTILES},
        skewness=calculate_skewness(scores, center, std),
        kurtosis=calculate_kurtosis(scores, center, std),
    )


def is_flat(values: Sequence[float]) -> bool:
    """True when every value is identical."""
    return max(values) == min(values)


def _centered_sums(x: Sequence[float], y: Sequence[float]) -> tuple[float, float, float, float, float]:
    x_mean = mean(x)
    y_mean = mean(y)
    dx = [xi - x_mean for xi in x]
    dy = [yi - y_mean for yi in y]
    sxy = sum(a * b for a, b in zip(dx, dy))
    sxx = sum(a * a for a in dx)
    syy = sum(b * b for b in dy)
    return x_mean, y_mean, sxy, sxx, syy


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson r; 0 when either series has no spread."""
    if len(x) != len(y):
        raise ValueError("Arrays must have the same length")
    if not x or is_flat(x) or is_flat(y):
        return 0.0

    _, _, sxy, sxx, syy = _centered_sums(x, y)
    return max(-1.0, min(1.0, sxy / math.sqrt(sxx * syy)))


def linear_regression(x: Sequence[float], y: Sequence[float]) -> RegressionFit:
    """Ordinary least-squares fit of y on x."""
    if len(x) != len(y):
        raise ValueError("Arrays must have the same length")
    n = len(x)
    if n < 2:
        raise InsufficientDataException("linear regression", required=2, available=n)
    if is_flat(x):
        raise ValueError("Cannot fit a regression line when all x values are identical")

    x_mean, y_mean, sxy, sxx, syy = _centered_sums(x, y)
    slope = sxy / sxx
    intercept = y_mean - slope * x_mean

    # A flat series is fitted exactly by a flat line
    if is_flat(y):
        return RegressionFit(slope=0.0, intercept=y[0], r_squared=1.0)

    residual_ss = sum((yi - (slope * xi + intercept)) ** 2 for xi, yi in zip(x, y))
    return RegressionFit(slope=slope, intercept=intercept, r_squared=1 - residual_ss / syy)


def residual_standard_error(x: Sequence[float], y: Sequence[float], fit: RegressionFit) -> float:
    n = len(x)
    if n < 3:
        raise InsufficientDataException("residual standard error", required=3, available=n)
    residual_ss = sum((yi - (fit.slope * xi + fit.intercept)) ** 2 for xi, yi in zip(x, y))
    return math.sqrt(residual_ss / (n - 2))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """std/mean. A zero mean gives 0 for a flat series and infinity otherwise."""
    center = mean(values)
    std = population_std(values, center)
    if center == 0:
        return 0.0 if std == 0 else math.inf
    return std / center
