"""
Base Evaluator.

Criterion aggregation engine shared by every concrete evaluator.

A concrete evaluator only knows how to score one named criterion for one
subject (the CriterionScorer protocol). The engine validates the config,
runs every criterion with per-criterion fault isolation, aggregates the
scores and decides pass/fail.
"""

import asyncio
import inspect
import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from evalcore.config.settings import EvaluationSettings, get_settings
from evalcore.core.domain.exceptions import ConfigurationException, CriterionTimeoutException
from evalcore.core.shared.logger import get_evaluator_logger
from evalcore.evaluation.models import (
    AggregationMethod,
    Criterion,
    EvaluationConfig,
    EvaluationContext,
    EvaluationReport,
    EvaluationResult,
    EvaluatorInfo,
)

WEIGHT_TOLERANCE = 0.001
DEFAULT_RESULT_THRESHOLD = 0.5

ScoreOutcome = EvaluationResult | Mapping[str, Any] | float
ScoringFunction = Callable[[Criterion, EvaluationContext], ScoreOutcome | Awaitable[ScoreOutcome]]


@runtime_checkable
class CriterionScorer(Protocol):
    """Scores one named criterion for one subject. May be sync or async."""

    def score_criterion(
        self, criterion: Criterion, subject: EvaluationContext
    ) -> EvaluationResult | Awaitable[EvaluationResult]: ...


@runtime_checkable
class Evaluator(Protocol):
    """Anything the orchestration service can register and run."""

    name: str
    version: str

    async def evaluate(self, subject: EvaluationContext) -> EvaluationReport: ...


def clamp_unit(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def normalize_score(value: float, min_value: float = 0.0, max_value: float = 1.0) -> float:
    """Linearly rescale a value to 0-1. A degenerate range maps to 1."""
    if max_value == min_value:
        return 1.0
    return clamp_unit((value - min_value) / (max_value - min_value))


def create_result(
    score: float,
    feedback: str | None = None,
    details: dict[str, Any] | None = None,
    threshold: float | None = None,
) -> EvaluationResult:
    """Build a clamped result; passes at `threshold`, or at 0.5 when none is given."""
    normalized = clamp_unit(float(score))
    cutoff = threshold if threshold is not None else DEFAULT_RESULT_THRESHOLD
    return EvaluationResult(
        score=normalized,
        passed=normalized >= cutoff,
        feedback=feedback,
        details=details or {},
    )


def failed_result(error: BaseException) -> EvaluationResult:
    """Zero-score result standing in for a criterion whose scorer raised."""
    message = str(error) or error.__class__.__name__
    return EvaluationResult(
        score=0.0,
        passed=False,
        feedback=f"Evaluation failed: {message}",
        details={"error": message, "error_type": error.__class__.__name__},
    )


def coerce_config(config: EvaluationConfig | Mapping[str, Any]) -> EvaluationConfig:
    if isinstance(config, EvaluationConfig):
        return config
    try:
        return EvaluationConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationException(f"Invalid evaluation config: {e}") from e


def validate_config(config: EvaluationConfig | Mapping[str, Any]) -> EvaluationConfig:
    """
    Validate a config and return a copy with normalized weights.

    Raises:
        ConfigurationException: naming the criterion or field at fault
    """
    config = coerce_config(config)

    if not config.criteria:
        raise ConfigurationException("At least one evaluation criterion is required", field="criteria")

    seen: set[str] = set()
    for criterion in config.criteria:
        if not criterion.name or not criterion.name.strip():
            raise ConfigurationException("Criterion name is required", field="name")
        if criterion.name in seen:
            raise ConfigurationException(
                f"Criterion names must be unique: {criterion.name}", field="name", criterion=criterion.name
            )
        seen.add(criterion.name)
        if not 0.0 <= criterion.weight <= 1.0:
            raise ConfigurationException(
                f"Criterion weight must be between 0 and 1: {criterion.name}",
                field="weight",
                criterion=criterion.name,
            )
        if criterion.threshold is not None and not 0.0 <= criterion.threshold <= 1.0:
            raise ConfigurationException(
                f"Criterion threshold must be between 0 and 1: {criterion.name}",
                field="threshold",
                criterion=criterion.name,
            )

    if not 0.0 <= config.passing_threshold <= 1.0:
        raise ConfigurationException("Passing threshold must be between 0 and 1", field="passing_threshold")

    if config.aggregation_method == AggregationMethod.CUSTOM and config.custom_aggregator is None:
        raise ConfigurationException(
            "Custom aggregator function not provided for 'custom' aggregation", field="custom_aggregator"
        )

    total_weight = config.total_weight
    if total_weight <= 0:
        raise ConfigurationException("Criterion weights must not all be zero", field="weight")

    criteria = list(config.criteria)
    if abs(total_weight - 1.0) > WEIGHT_TOLERANCE:
        criteria = [criterion.model_copy(update={"weight": criterion.weight / total_weight}) for criterion in criteria]

    return config.model_copy(update={"criteria": criteria})


def aggregate_scores(config: EvaluationConfig, scores: list[float], weights: list[float]) -> float:
    """Combine per-criterion scores according to the config's aggregation method."""
    if not scores:
        return 0.0

    method = config.aggregation_method
    if method == AggregationMethod.MINIMUM:
        return min(scores)
    if method == AggregationMethod.MAXIMUM:
        return max(scores)
    if method == AggregationMethod.CUSTOM:
        if config.custom_aggregator is None:
            raise ConfigurationException("Custom aggregator function not provided", field="custom_aggregator")
        return float(config.custom_aggregator(list(scores), list(weights)))
    return sum(score * weight for score, weight in zip(scores, weights))


def generate_summary(overall_score: float, passed: bool, results: Mapping[str, EvaluationResult]) -> str:
    score_percentage = math.floor(overall_score * 100 + 0.5)
    status = "PASSED" if passed else "FAILED"
    passed_criteria = sum(1 for result in results.values() if result.passed)
    return (
        f"Evaluation {status} with overall score of {score_percentage}%. "
        f"{passed_criteria}/{len(results)} criteria passed."
    )


def generate_recommendations(results: Mapping[str, EvaluationResult]) -> list[str]:
    return [f"{name}: {result.feedback}" for name, result in results.items() if not result.passed and result.feedback]


class CriteriaEvaluator:
    """
    Weighted multi-criterion evaluator.

    Scoring is delegated to a CriterionScorer passed at construction, or to
    an overriding `score_criterion` in a subclass.

    Example:
        ```python
        evaluator = CriteriaEvaluator(
            "response",
            EvaluationConfig(criteria=[Criterion(name="relevance", weight=0.6), ...]),
            scorer=FunctionScorer({"relevance": score_relevance, ...}),
        )
        report = await evaluator.evaluate(EvaluationContext(input=..., output=...))
        ```
    """

    def __init__(
        self,
        name: str,
        config: EvaluationConfig | Mapping[str, Any],
        scorer: CriterionScorer | None = None,
        version: str = "1.0.0",
        settings: EvaluationSettings | None = None,
    ):
        if not name or not name.strip():
            raise ConfigurationException("Evaluator name is required", field="name")

        settings = settings or get_settings()
        self.name = name
        self.version = version
        self.config = validate_config(config)
        self.concurrent_criteria = settings.EVALUATION_CONCURRENT_CRITERIA
        self.criterion_timeout = settings.EVALUATION_CRITERION_TIMEOUT
        self._scorer = scorer
        self.logger = get_evaluator_logger(name, version)

        self.logger.debug("Evaluator initialized", criteria=len(self.config.criteria))

    normalize_score = staticmethod(normalize_score)
    create_result = staticmethod(create_result)

    def score_criterion(
        self, criterion: Criterion, subject: EvaluationContext
    ) -> EvaluationResult | Awaitable[EvaluationResult]:
        if self._scorer is None:
            raise NotImplementedError(f"{type(self).__name__} needs a scorer or a score_criterion override")
        return self._scorer.score_criterion(criterion, subject)

    async def evaluate(self, subject: EvaluationContext | Mapping[str, Any]) -> EvaluationReport:
        """Evaluate one subject against every criterion of the current config."""
        if not isinstance(subject, EvaluationContext):
            subject = EvaluationContext.model_validate(dict(subject))

        # Snapshot so a concurrent update_config cannot change criteria mid-run
        config = self.config
        criteria = config.criteria

        if self.concurrent_criteria and len(criteria) > 1:
            outcomes = await asyncio.gather(*(self._run_criterion(criterion, subject) for criterion in criteria))
        else:
            outcomes = [await self._run_criterion(criterion, subject) for criterion in criteria]

        criteria_results = {criterion.name: result for criterion, result in zip(criteria, outcomes)}
        scores = [result.score for result in outcomes]
        weights = [criterion.weight for criterion in criteria]

        overall_score = clamp_unit(aggregate_scores(config, scores, weights))
        passed = overall_score >= config.passing_threshold and self._required_criteria_passed(
            config, criteria_results
        )

        report = EvaluationReport(
            overall_score=overall_score,
            passed=passed,
            criteria_results=criteria_results,
            summary=generate_summary(overall_score, passed, criteria_results),
            recommendations=generate_recommendations(criteria_results),
            evaluator_info=EvaluatorInfo(name=self.name, version=self.version, config=config),
        )

        self.logger.debug("Evaluation finished", score=overall_score, passed=passed)
        return report

    async def _run_criterion(self, criterion: Criterion, subject: EvaluationContext) -> EvaluationResult:
        try:
            outcome = self.score_criterion(criterion, subject)
            if inspect.isawaitable(outcome):
                if self.criterion_timeout is not None:
                    try:
                        outcome = await asyncio.wait_for(outcome, timeout=self.criterion_timeout)
                    except asyncio.TimeoutError as e:
                        raise CriterionTimeoutException(criterion.name, self.criterion_timeout) from e
                else:
                    outcome = await outcome
            return self._coerce_result(criterion, outcome)
        except Exception as e:
            self.logger.error("Criterion scoring failed", criterion=criterion.name, error=str(e))
            return failed_result(e)

    @staticmethod
    def _coerce_result(criterion: Criterion, outcome: Any) -> EvaluationResult:
        if isinstance(outcome, EvaluationResult):
            return outcome
        if isinstance(outcome, Mapping):
            return EvaluationResult.model_validate(dict(outcome))
        if isinstance(outcome, (int, float)) and not isinstance(outcome, bool):
            return create_result(outcome, threshold=criterion.threshold)
        raise TypeError(f"Scorer for '{criterion.name}' returned {type(outcome).__name__}, expected a result")

    @staticmethod
    def _required_criteria_passed(config: EvaluationConfig, results: Mapping[str, EvaluationResult]) -> bool:
        for criterion in config.criteria:
            if criterion.required:
                result = results.get(criterion.name)
                if result is None or not result.passed:
                    return False
        return True

    def get_info(self) -> EvaluatorInfo:
        return EvaluatorInfo(name=self.name, version=self.version, config=self.config)

    def update_config(self, **changes: Any) -> None:
        """Apply config changes; the current config stays if validation fails."""
        unknown = sorted(set(changes) - set(EvaluationConfig.model_fields))
        if unknown:
            raise ConfigurationException(f"Unknown config option(s): {', '.join(unknown)}", field=unknown[0])
        data = dict(self.config)
        data.update(changes)
        self.config = validate_config(data)

    def add_criterion(self, criterion: Criterion | Mapping[str, Any]) -> None:
        if not isinstance(criterion, Criterion):
            criterion = Criterion.model_validate(dict(criterion))
        self.update_config(criteria=[*self.config.criteria, criterion])

    def remove_criterion(self, name: str) -> bool:
        """Remove a criterion by name. Returns False when it does not exist."""
        remaining = [criterion for criterion in self.config.criteria if criterion.name != name]
        if len(remaining) == len(self.config.criteria):
            return False
        self.update_config(criteria=remaining)
        return True

    def get_criterion(self, name: str) -> Criterion | None:
        return next((criterion for criterion in self.config.criteria if criterion.name == name), None)

    def list_criteria(self) -> list[str]:
        return self.config.criterion_names


class FunctionScorer:
    """
    CriterionScorer backed by one scoring function per criterion name.

    Functions receive (criterion, subject) and may be plain or async. They can
    return an EvaluationResult, a mapping with result fields, or a bare number
    (turned into a result using the criterion's threshold).
    """

    def __init__(
        self,
        functions: Mapping[str, ScoringFunction],
        default: ScoringFunction | None = None,
    ):
        self._functions = dict(functions)
        self._default = default

    @property
    def criterion_names(self) -> list[str]:
        return list(self._functions)

    async def score_criterion(self, criterion: Criterion, subject: EvaluationContext) -> EvaluationResult:
        function = self._functions.get(criterion.name, self._default)
        if function is None:
            raise LookupError(f"No scoring function registered for criterion '{criterion.name}'")

        outcome = function(criterion, subject)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return CriteriaEvaluator._coerce_result(criterion, outcome)
