"""
Shared pytest fixtures for all tests.

This module provides settings, evaluator builders and sample results used
across the engine, service and metrics tests.
"""

import os
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

import pytest

from evalcore.config.settings import EvaluationSettings
from evalcore.evaluation.base_evaluator import CriteriaEvaluator, FunctionScorer
from evalcore.evaluation.models import Criterion, EvaluationConfig, EvaluationContext, EvaluationResult
from evalcore.evaluation.service import EvaluationHistory, EvaluationService, EvaluatorRegistry

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def settings() -> EvaluationSettings:
    """Settings with concurrency on and no criterion timeout."""
    return EvaluationSettings(
        EVALUATION_DEFAULT_PARALLELISM=5,
        EVALUATION_PARALLEL_EXECUTION=True,
        EVALUATION_CONCURRENT_CRITERIA=True,
        EVALUATION_CRITERION_TIMEOUT=None,
        EVALUATION_HISTORY_MAX_SIZE=100,
        EVALUATION_PERFORMER_LIMIT=5,
    )


# ============================================================================
# EVALUATOR FIXTURES
# ============================================================================


def fixed_scores_evaluator(
    name: str,
    scores: Mapping[str, float],
    settings: EvaluationSettings,
    weights: Mapping[str, float] | None = None,
    passing_threshold: float = 0.7,
) -> CriteriaEvaluator:
    """Evaluator whose criteria always return the given scores."""
    weights = weights or {}
    config = EvaluationConfig(
        criteria=[Criterion(name=criterion, weight=weights.get(criterion, 1.0)) for criterion in scores],
        passing_threshold=passing_threshold,
    )
    scorer = FunctionScorer({criterion: (lambda c, s, value=value: value) for criterion, value in scores.items()})
    return CriteriaEvaluator(name, config, scorer=scorer, settings=settings)


class FailingSubjectEvaluator(CriteriaEvaluator):
    """Raises for subjects flagged with metadata['fail']."""

    async def evaluate(self, subject):
        if subject.metadata.get("fail"):
            raise RuntimeError(f"cannot evaluate subject {subject.input}")
        return await super().evaluate(subject)


@pytest.fixture
def make_evaluator(settings):
    """Factory for fixed-score evaluators bound to the test settings."""

    def factory(name, scores, weights=None, passing_threshold=0.7):
        return fixed_scores_evaluator(name, scores, settings, weights=weights, passing_threshold=passing_threshold)

    return factory


@pytest.fixture
def failing_evaluator(settings) -> CriteriaEvaluator:
    config = EvaluationConfig(criteria=[Criterion(name="quality")])
    scorer = FunctionScorer({"quality": lambda c, s: 0.8})
    return FailingSubjectEvaluator("flaky", config, scorer=scorer, settings=settings)


@pytest.fixture
def response_evaluator(settings) -> CriteriaEvaluator:
    return fixed_scores_evaluator(
        "response",
        {"relevance": 0.9, "clarity": 0.8},
        settings,
        weights={"relevance": 0.5, "clarity": 0.5},
    )


@pytest.fixture
def safety_evaluator(settings) -> CriteriaEvaluator:
    return fixed_scores_evaluator("safety", {"toxicity": 0.6}, settings)


@pytest.fixture
def service(settings, response_evaluator, safety_evaluator) -> EvaluationService:
    return EvaluationService(
        registry=EvaluatorRegistry({"response": response_evaluator, "safety": safety_evaluator}),
        history=EvaluationHistory(max_size=settings.EVALUATION_HISTORY_MAX_SIZE),
        settings=settings,
    )


@pytest.fixture
def subject() -> EvaluationContext:
    return EvaluationContext(input="What is the capital of France?", output="Paris", expected="Paris")


# ============================================================================
# RESULT FIXTURES
# ============================================================================


@pytest.fixture
def sample_results() -> list[EvaluationResult]:
    """Five results spread across score bands, one day apart."""
    start = datetime(2024, 1, 1, tzinfo=UTC)
    rows = [
        (0.95, True, "Excellent answer", "response"),
        (0.85, True, "Good answer", "response"),
        (0.65, False, "Missing context details", "safety"),
        (0.45, False, "Missing context and sources", "safety"),
        (0.30, False, "Missing context entirely", "response"),
    ]
    return [
        EvaluationResult(
            score=score,
            passed=passed,
            feedback=feedback,
            details={"evaluation_type": evaluation_type, "execution_time": 10.0 * (i + 1)},
            timestamp=start + timedelta(days=i),
        )
        for i, (score, passed, feedback, evaluation_type) in enumerate(rows)
    ]
