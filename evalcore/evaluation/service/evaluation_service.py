"""
Evaluation Service.

Orchestrates named, comprehensive and batch evaluations over a registry of
evaluators and keeps a bounded history of results.
"""

import asyncio
import math
import time
from collections.abc import Mapping
from typing import Any

from evalcore.config.settings import EvaluationSettings, get_settings
from evalcore.core.domain.exceptions import ConfigurationException, EvaluatorNotFoundException
from evalcore.core.shared.logger import get_service_logger
from evalcore.evaluation.base_evaluator import Evaluator, validate_config
from evalcore.evaluation.metrics.statistics import calculate_statistical_summary
from evalcore.evaluation.models import EvaluationContext, EvaluationReport, EvaluationResult, utc_now
from evalcore.evaluation.reporting import generate_summary_report
from evalcore.evaluation.service.history import EvaluationHistory
from evalcore.evaluation.service.models import (
    COMPREHENSIVE,
    BatchError,
    BatchEvaluationRequest,
    BatchPerformer,
    BatchResult,
    BatchSummary,
    EvaluationOptions,
    EvaluationRequest,
    EvaluationStatistics,
)
from evalcore.evaluation.service.registry import EvaluatorRegistry

logger = get_service_logger("evaluation")

_SKIPPED = object()


class EvaluationService:
    """
    Entry point for running evaluations.

    Example:
        ```python
        service = EvaluationService(evaluators={"response": response_evaluator})
        result = await service.evaluate(EvaluationRequest(type="response", subject=subject))
        batch = await service.evaluate_batch(BatchEvaluationRequest(suite=suite, subjects=subjects))
        ```
    """

    def __init__(
        self,
        registry: EvaluatorRegistry | None = None,
        history: EvaluationHistory | None = None,
        settings: EvaluationSettings | None = None,
        evaluators: Mapping[str, Evaluator] | None = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else EvaluatorRegistry()
        self.history = history if history is not None else EvaluationHistory(self.settings.EVALUATION_HISTORY_MAX_SIZE)
        for name, evaluator in (evaluators or {}).items():
            self.registry.add(name, evaluator)

    # Registry management

    def add_evaluator(self, name: str, evaluator: Evaluator) -> None:
        self.registry.add(name, evaluator)

    def remove_evaluator(self, name: str) -> bool:
        return self.registry.remove(name)

    def get_available_evaluators(self) -> list[str]:
        return self.registry.names()

    # Single evaluations

    async def evaluate(self, request: EvaluationRequest) -> EvaluationResult:
        """
        Evaluate one subject with a named evaluator or comprehensively.

        Raises:
            ConfigurationException: unknown evaluator or empty evaluator set
            Exception: whatever the evaluator raised
        """
        start_time = time.perf_counter()
        subject = request.subject
        if request.custom_criteria:
            subject = subject.model_copy(update={"custom_criteria": list(request.custom_criteria)})

        try:
            if request.type == COMPREHENSIVE:
                result = await self._evaluate_comprehensive(subject, request.evaluators, request.options)
            else:
                result = await self._evaluate_named(request.type, subject, request.options)
        except Exception as e:
            logger.error("Evaluation failed", evaluation_type=request.type, error=str(e))
            raise

        execution_time = (time.perf_counter() - start_time) * 1000
        result = result.model_copy(
            update={
                "details": {
                    **result.details,
                    "evaluation_type": request.type,
                    "execution_time": execution_time,
                    "timestamp": utc_now().isoformat(),
                }
            }
        )

        if request.options.save_results:
            self.history.record(result)

        logger.debug(
            "Evaluation finished",
            evaluation_type=request.type,
            execution_time=round(execution_time, 1),
            score=result.score,
            passed=result.passed,
        )
        return result

    async def _evaluate_named(
        self, name: str, subject: EvaluationContext, options: EvaluationOptions
    ) -> EvaluationResult:
        evaluator = self.registry.get(name)
        report = await evaluator.evaluate(subject)

        details: dict[str, Any] = {
            "evaluator": name,
            "evaluators": [name],
            "criterion_scores": report.criterion_scores,
            "recommendations": list(report.recommendations),
        }
        if options.include_details:
            details["criteria_results"] = {
                criterion: result.model_dump(mode="json") for criterion, result in report.criteria_results.items()
            }
        if options.generate_report:
            details["report"] = generate_summary_report(list(report.criteria_results.values())).model_dump(mode="json")

        return EvaluationResult(
            score=report.overall_score,
            passed=report.passed,
            feedback=report.summary,
            details=details,
        )

    async def _evaluate_comprehensive(
        self, subject: EvaluationContext, names: list[str] | None, options: EvaluationOptions
    ) -> EvaluationResult:
        names = list(names) if names else self.registry.names()
        if not names:
            raise ConfigurationException("No evaluators available for comprehensive evaluation", field="evaluators")
        evaluators = [(name, self.registry.get(name)) for name in names]

        if self.settings.EVALUATION_PARALLEL_EXECUTION and len(evaluators) > 1:
            outcomes = await asyncio.gather(
                *(evaluator.evaluate(subject) for _, evaluator in evaluators), return_exceptions=True
            )
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            reports: list[EvaluationReport] = list(outcomes)
        else:
            reports = [await evaluator.evaluate(subject) for _, evaluator in evaluators]

        score = sum(report.overall_score for report in reports) / len(reports)
        passed = all(report.passed for report in reports)
        feedback = "; ".join(f"{name}: {report.summary}" for (name, _), report in zip(evaluators, reports))

        details: dict[str, Any] = {
            "evaluators": names,
            "criterion_scores": _average_criterion_scores(reports),
            "recommendations": [
                f"{name}: {line}" for (name, _), report in zip(evaluators, reports) for line in report.recommendations
            ],
        }
        if options.include_details:
            details["evaluator_results"] = {
                name: {
                    "score": report.overall_score,
                    "passed": report.passed,
                    "summary": report.summary,
                    "criterion_scores": report.criterion_scores,
                }
                for (name, _), report in zip(evaluators, reports)
            }
        if options.generate_report:
            per_evaluator = [
                EvaluationResult(score=report.overall_score, passed=report.passed, feedback=report.summary)
                for report in reports
            ]
            details["report"] = generate_summary_report(per_evaluator).model_dump(mode="json")

        return EvaluationResult(score=score, passed=passed, feedback=feedback, details=details)

    # Batch evaluations

    async def evaluate_batch(self, request: BatchEvaluationRequest) -> BatchResult:
        """
        Run every subject through the suite's evaluators with bounded concurrency.

        Per-subject failures are collected in `errors`; the batch itself only
        raises for an invalid suite or options.
        """
        suite = request.suite
        options = request.options
        parallelism = self._validate_batch(request)

        start_time = time.perf_counter()
        total = len(request.subjects)
        outcomes: list[Any] = [_SKIPPED] * total
        semaphore = asyncio.Semaphore(parallelism)
        finished = 0

        batch_logger = logger.bind(suite_id=suite.id)
        batch_logger.info("Batch started", subjects=total, parallelism=parallelism)

        def aborted() -> bool:
            return options.abort_event is not None and options.abort_event.is_set()

        async def run(index: int, subject: EvaluationContext) -> None:
            nonlocal finished
            if aborted():
                return
            async with semaphore:
                # Re-check once a slot is free so queued subjects are not started after abort
                if aborted():
                    return
                try:
                    outcomes[index] = await self.evaluate(
                        EvaluationRequest(
                            type=COMPREHENSIVE,
                            subject=subject,
                            evaluators=list(suite.evaluators),
                            custom_criteria=list(suite.criteria) or None,
                        )
                    )
                except Exception as e:
                    batch_logger.warning(
                        "Subject evaluation failed", subject_index=index, error_type=type(e).__name__, error=str(e)
                    )
                    outcomes[index] = BatchError(index=index, error=str(e), error_type=type(e).__name__, subject=subject)
                    self._notify(options.error_callback, e, subject, index)

                finished += 1
                self._notify(options.progress_callback, finished / total * 100, finished, total)

        await asyncio.gather(*(run(index, subject) for index, subject in enumerate(request.subjects)))

        completed = [(index, outcome) for index, outcome in enumerate(outcomes) if isinstance(outcome, EvaluationResult)]
        errors = [outcome for outcome in outcomes if isinstance(outcome, BatchError)]
        skipped = sum(1 for outcome in outcomes if outcome is _SKIPPED)
        results = [result for _, result in completed]

        batch = BatchResult(
            suite_id=suite.id,
            total_subjects=total,
            completed=len(completed),
            failed=len(errors),
            skipped=skipped,
            aborted=aborted(),
            results=results,
            aggregated_scores=self._aggregate_scores(results, [criterion.name for criterion in suite.criteria]),
            summary=self._summarize(completed),
            execution_time=(time.perf_counter() - start_time) * 1000,
            errors=sorted(errors, key=lambda error: error.index),
        )

        batch_logger.info(
            "Batch finished",
            completed=batch.completed,
            failed=batch.failed,
            skipped=batch.skipped,
            aborted=batch.aborted,
        )
        return batch

    def _validate_batch(self, request: BatchEvaluationRequest) -> int:
        suite = request.suite
        if not suite.evaluators:
            raise ConfigurationException(f"Suite '{suite.id}' has no evaluators", field="evaluators")
        for name in suite.evaluators:
            if name not in self.registry:
                raise EvaluatorNotFoundException(name)
        if suite.criteria:
            validate_config({"criteria": suite.criteria})

        parallelism = request.options.parallelism
        if parallelism is None:
            parallelism = self.settings.EVALUATION_DEFAULT_PARALLELISM
        if parallelism < 1:
            raise ConfigurationException("Batch parallelism must be at least 1", field="parallelism")
        return parallelism

    @staticmethod
    def _notify(callback, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            name = getattr(callback, "__name__", repr(callback))
            logger.warning("Batch callback raised", callback=name, error=str(e))

    @staticmethod
    def _aggregate_scores(results: list[EvaluationResult], criterion_names: list[str]) -> dict[str, float]:
        if not results:
            return {}

        summary = calculate_statistical_summary([result.score for result in results])
        aggregated = {
            "overall": summary.mean,
            "median": summary.median,
            "standard_deviation": summary.standard_deviation,
            "min": summary.min,
            "max": summary.max,
        }

        for name in criterion_names:
            values = []
            for result in results:
                scores = result.details.get("criterion_scores")
                if isinstance(scores, dict) and isinstance(scores.get(name), (int, float)):
                    values.append(float(scores[name]))
            if values:
                aggregated[name] = sum(values) / len(values)

        return aggregated

    def _summarize(self, completed: list[tuple[int, EvaluationResult]]) -> BatchSummary:
        if not completed:
            return BatchSummary()

        count = len(completed)
        limit = min(self.settings.EVALUATION_PERFORMER_LIMIT, math.ceil(count * 0.1))
        performers = [
            BatchPerformer(index=index, score=result.score, passed=result.passed, feedback=result.feedback)
            for index, result in completed
        ]

        return BatchSummary(
            average_score=sum(performer.score for performer in performers) / count,
            pass_rate=sum(1 for performer in performers if performer.passed) / count,
            top_performers=sorted(performers, key=lambda p: (-p.score, p.index))[:limit],
            bottom_performers=sorted(performers, key=lambda p: (p.score, p.index))[:limit],
        )

    # History

    def get_evaluation_history(self, limit: int | None = None) -> list[EvaluationResult]:
        return self.history.recent(limit)

    def clear_history(self) -> None:
        self.history.clear()
        logger.info("Evaluation history cleared")

    def get_statistics(self) -> EvaluationStatistics:
        return self.history.statistics()


def _average_criterion_scores(reports: list[EvaluationReport]) -> dict[str, float]:
    totals: dict[str, list[float]] = {}
    for report in reports:
        for name, score in report.criterion_scores.items():
            totals.setdefault(name, []).append(score)
    return {name: sum(scores) / len(scores) for name, scores in totals.items()}
