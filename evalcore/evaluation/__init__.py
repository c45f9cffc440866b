"""
Evaluation module.

This module provides:
- A weighted multi-criterion aggregation engine
- Batch orchestration over registered evaluators
- Statistical analysis of evaluation results
- Reporting and JSON/CSV export helpers
- Dataset construction, merging and splitting
"""

from .models import (
    AggregationMethod,
    Criterion,
    EvaluationConfig,
    EvaluationContext,
    EvaluationReport,
    EvaluationResult,
    EvaluatorInfo,
)
from .base_evaluator import (
    CriteriaEvaluator,
    CriterionScorer,
    Evaluator,
    FunctionScorer,
    create_result,
    normalize_score,
    validate_config,
)
from .datasets import DatasetSplit, EvaluationDataset, create_dataset, merge_datasets, split_dataset
from .export import ImportValidation, export_results, import_results
from .metrics import EvaluationMetrics, analyze_trends, calculate_confidence_interval, compare_results
from .reporting import ResultFilters, filter_results, generate_summary_report, group_results
from .service import (
    BatchEvaluationRequest,
    BatchOptions,
    BatchResult,
    EvaluationRequest,
    EvaluationService,
    EvaluationSuite,
    create_standard_suite,
)

__all__ = [
    # Models
    "AggregationMethod",
    "Criterion",
    "EvaluationConfig",
    "EvaluationContext",
    "EvaluationReport",
    "EvaluationResult",
    "EvaluatorInfo",
    # Engine
    "CriterionScorer",
    "Evaluator",
    "CriteriaEvaluator",
    "FunctionScorer",
    "create_result",
    "normalize_score",
    "validate_config",
    # Service
    "EvaluationService",
    "EvaluationRequest",
    "EvaluationSuite",
    "BatchOptions",
    "BatchEvaluationRequest",
    "BatchResult",
    "create_standard_suite",
    # Metrics
    "EvaluationMetrics",
    "analyze_trends",
    "compare_results",
    "calculate_confidence_interval",
    # Reporting and export
    "ResultFilters",
    "filter_results",
    "group_results",
    "generate_summary_report",
    "ImportValidation",
    "export_results",
    "import_results",
    # Datasets
    "EvaluationDataset",
    "DatasetSplit",
    "create_dataset",
    "merge_datasets",
    "split_dataset",
]
