"""
Result Reporting.

Filtering, grouping and summary reports over result collections.
"""

import re
from collections import Counter
from collections.abc import Callable, Sequence
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from evalcore.evaluation.metrics.statistics import population_std
from evalcore.evaluation.models import EvaluationResult, as_utc

SCORE_BANDS: tuple[tuple[str, float], ...] = (
    ("excellent", 0.8),
    ("good", 0.6),
    ("fair", 0.4),
    ("poor", 0.0),
)

DISTRIBUTION_LABELS = {
    "excellent": "excellent (0.8-1.0)",
    "good": "good (0.6-0.8)",
    "fair": "fair (0.4-0.6)",
    "poor": "poor (0.0-0.4)",
}


class ResultFilters(BaseModel):
    min_score: float | None = None
    max_score: float | None = None
    passed: bool | None = None
    evaluation_type: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    custom_filter: Callable[[EvaluationResult], bool] | None = Field(default=None, exclude=True)

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return None if v is None else as_utc(v)


class GroupStatistics(BaseModel):
    count: int
    average_score: float
    pass_rate: float
    min_score: float
    max_score: float
    standard_deviation: float


class ReportOverview(BaseModel):
    total_evaluations: int
    average_score: float
    pass_rate: float
    score_distribution: dict[str, int]


class SummaryReport(BaseModel):
    overview: ReportOverview
    groups: dict[str, GroupStatistics] | None = None
    recommendations: list[str] = Field(default_factory=list)


def score_band(score: float) -> str:
    for band, lower in SCORE_BANDS:
        if score >= lower:
            return band
    return "poor"


def _result_time(result: EvaluationResult) -> datetime:
    stamp = result.details.get("timestamp")
    if isinstance(stamp, str):
        try:
            return as_utc(datetime.fromisoformat(stamp))
        except ValueError:
            pass
    return as_utc(result.timestamp)


def filter_results(results: Sequence[EvaluationResult], filters: ResultFilters) -> list[EvaluationResult]:
    selected = []
    for result in results:
        if filters.min_score is not None and result.score < filters.min_score:
            continue
        if filters.max_score is not None and result.score > filters.max_score:
            continue
        if filters.passed is not None and result.passed != filters.passed:
            continue
        if filters.evaluation_type and result.details.get("evaluation_type") != filters.evaluation_type:
            continue
        if filters.start is not None and _result_time(result) < filters.start:
            continue
        if filters.end is not None and _result_time(result) > filters.end:
            continue
        if filters.custom_filter is not None and not filters.custom_filter(result):
            continue
        selected.append(result)
    return selected


def group_results(results: Sequence[EvaluationResult], group_by: str) -> dict[str, list[EvaluationResult]]:
    """
    Group results by `passed`, `evaluation_type`, `score_range`, `date`, or any
    other details key.
    """
    groups: dict[str, list[EvaluationResult]] = {}
    for result in results:
        if group_by == "passed":
            key = "passed" if result.passed else "failed"
        elif group_by == "score_range":
            key = score_band(result.score)
        elif group_by == "date":
            key = _result_time(result).date().isoformat()
        else:
            value = result.details.get(group_by)
            key = str(value) if value is not None else "unknown"
        groups.setdefault(key, []).append(result)
    return groups


def calculate_group_statistics(grouped: dict[str, list[EvaluationResult]]) -> dict[str, GroupStatistics]:
    statistics = {}
    for group, results in grouped.items():
        scores = [result.score for result in results]
        statistics[group] = GroupStatistics(
            count=len(results),
            average_score=sum(scores) / len(scores),
            pass_rate=sum(1 for result in results if result.passed) / len(results),
            min_score=min(scores),
            max_score=max(scores),
            standard_deviation=population_std(scores),
        )
    return statistics


def analyze_failure_patterns(failed_results: Sequence[EvaluationResult]) -> list[str]:
    """Words recurring across failed feedback (longer than 3 characters)."""
    words = Counter()
    for result in failed_results:
        for word in re.split(r"\s+", (result.feedback or "").lower()):
            if len(word) > 3:
                words[word] += 1

    minimum = max(2, len(failed_results) * 0.3)
    common = [word for word, count in words.most_common() if count >= minimum][:5]
    if not common:
        return []
    return [f"frequent issues with: {', '.join(common)}"]


def _generate_recommendations(results: Sequence[EvaluationResult], overview: ReportOverview) -> list[str]:
    recommendations = []

    if overview.average_score < 0.6:
        recommendations.append(
            "Overall performance is below acceptable levels. Consider reviewing evaluation criteria or improving the system."
        )
    elif overview.average_score < 0.8:
        recommendations.append(
            "Performance is acceptable but has room for improvement. Focus on addressing common failure patterns."
        )

    if overview.pass_rate < 0.7:
        recommendations.append("Low pass rate indicates systematic issues. Review failed evaluations for common patterns.")

    poor = overview.score_distribution[DISTRIBUTION_LABELS["poor"]]
    if poor / overview.total_evaluations > 0.2:
        recommendations.append(
            "High proportion of poor-performing evaluations. Consider additional training or system improvements."
        )

    if population_std([result.score for result in results]) > 0.3:
        recommendations.append(
            "High variability in scores suggests inconsistent performance. Review evaluation criteria for clarity."
        )

    failed = [result for result in results if not result.passed]
    patterns = analyze_failure_patterns(failed)
    if patterns:
        recommendations.append(f"Common failure patterns identified: {', '.join(patterns)}")

    return recommendations


def generate_summary_report(results: Sequence[EvaluationResult], group_by: str | None = None) -> SummaryReport:
    if not results:
        return SummaryReport(
            overview=ReportOverview(
                total_evaluations=0,
                average_score=0.0,
                pass_rate=0.0,
                score_distribution={label: 0 for label in DISTRIBUTION_LABELS.values()},
            )
        )

    distribution = {label: 0 for label in DISTRIBUTION_LABELS.values()}
    for result in results:
        distribution[DISTRIBUTION_LABELS[score_band(result.score)]] += 1

    overview = ReportOverview(
        total_evaluations=len(results),
        average_score=sum(result.score for result in results) / len(results),
        pass_rate=sum(1 for result in results if result.passed) / len(results),
        score_distribution=distribution,
    )

    groups = calculate_group_statistics(group_results(results, group_by)) if group_by else None

    return SummaryReport(
        overview=overview,
        groups=groups,
        recommendations=_generate_recommendations(results, overview),
    )
