"""
Evaluator Registry.

Named evaluator instances shared by the orchestration service.
"""

import threading
from collections.abc import Mapping

from evalcore.core.domain.exceptions import ConfigurationException, EvaluatorNotFoundException
from evalcore.core.shared.logger import get_logger
from evalcore.evaluation.base_evaluator import Evaluator

logger = get_logger(__name__)


class EvaluatorRegistry:
    """
    Mapping of evaluator name to evaluator instance.

    Writers serialize on a lock and swap in a fresh mapping, so readers
    always see a complete snapshot without locking.
    """

    def __init__(self, evaluators: Mapping[str, Evaluator] | None = None):
        self._lock = threading.Lock()
        self._evaluators: dict[str, Evaluator] = {}
        for name, evaluator in (evaluators or {}).items():
            self.add(name, evaluator)

    def add(self, name: str, evaluator: Evaluator) -> None:
        if not name or not name.strip():
            raise ConfigurationException("Evaluator name is required", field="name")
        if name == "comprehensive":
            raise ConfigurationException("'comprehensive' is reserved and cannot name an evaluator", field="name")

        with self._lock:
            replaced = name in self._evaluators
            self._evaluators = {**self._evaluators, name: evaluator}

        if replaced:
            logger.warning("Evaluator replaced", evaluator=name)
        else:
            logger.info("Evaluator registered", evaluator=name)

    def remove(self, name: str) -> bool:
        with self._lock:
            if name not in self._evaluators:
                return False
            self._evaluators = {key: value for key, value in self._evaluators.items() if key != name}
        logger.info("Evaluator removed", evaluator=name)
        return True

    def get(self, name: str) -> Evaluator:
        evaluator = self._evaluators.get(name)
        if evaluator is None:
            raise EvaluatorNotFoundException(name)
        return evaluator

    def names(self) -> list[str]:
        return list(self._evaluators)

    def snapshot(self) -> dict[str, Evaluator]:
        return dict(self._evaluators)

    def __contains__(self, name: object) -> bool:
        return name in self._evaluators

    def __len__(self) -> int:
        return len(self._evaluators)
