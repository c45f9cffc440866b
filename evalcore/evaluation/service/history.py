"""
Evaluation History.

Append-only, size-bounded log of results produced by the evaluation service.
"""

import threading
from collections import deque

from evalcore.evaluation.models import EvaluationResult
from evalcore.evaluation.service.models import EvaluationStatistics


class EvaluationHistory:
    """
    Bounded result log; the oldest entries drop off once `max_size` is reached.

    Thread-safe for concurrent writers.
    """

    def __init__(self, max_size: int = 1000):
        if max_size < 1:
            raise ValueError("History max_size must be at least 1")
        self._lock = threading.Lock()
        self._results: deque[EvaluationResult] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._results.maxlen or 0

    def record(self, result: EvaluationResult) -> None:
        with self._lock:
            self._results.append(result)

    def recent(self, limit: int | None = None) -> list[EvaluationResult]:
        """Most recent results, oldest first. No limit (or 0) returns everything."""
        if limit is not None and limit < 0:
            raise ValueError("History limit must not be negative")
        with self._lock:
            results = list(self._results)
        if limit:
            return results[-limit:]
        return results

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def statistics(self) -> EvaluationStatistics:
        results = self.recent()
        total = len(results)
        if total == 0:
            return EvaluationStatistics()

        evaluator_usage: dict[str, int] = {}
        evaluation_types: dict[str, int] = {}
        for result in results:
            evaluators = result.details.get("evaluators")
            if isinstance(evaluators, list):
                for name in evaluators:
                    evaluator_usage[str(name)] = evaluator_usage.get(str(name), 0) + 1
            evaluation_type = result.details.get("evaluation_type")
            if isinstance(evaluation_type, str):
                evaluation_types[evaluation_type] = evaluation_types.get(evaluation_type, 0) + 1

        return EvaluationStatistics(
            total_evaluations=total,
            average_score=sum(result.score for result in results) / total,
            pass_rate=sum(1 for result in results if result.passed) / total,
            evaluator_usage=evaluator_usage,
            evaluation_types=evaluation_types,
        )

    def __len__(self) -> int:
        return len(self._results)
