"""
Evaluation service: registry, history and batch orchestration.
"""

from .evaluation_service import EvaluationService
from .history import EvaluationHistory
from .models import (
    COMPREHENSIVE,
    BatchError,
    BatchEvaluationRequest,
    BatchOptions,
    BatchPerformer,
    BatchResult,
    BatchSummary,
    EvaluationOptions,
    EvaluationRequest,
    EvaluationStatistics,
    EvaluationSuite,
)
from .registry import EvaluatorRegistry
from .suites import STANDARD_SUITES, build_suite_config, create_standard_suite

__all__ = [
    "EvaluationService",
    "EvaluatorRegistry",
    "EvaluationHistory",
    # Models
    "COMPREHENSIVE",
    "EvaluationOptions",
    "EvaluationRequest",
    "EvaluationSuite",
    "BatchOptions",
    "BatchEvaluationRequest",
    "BatchError",
    "BatchPerformer",
    "BatchSummary",
    "BatchResult",
    "EvaluationStatistics",
    # Presets
    "STANDARD_SUITES",
    "create_standard_suite",
    "build_suite_config",
]
