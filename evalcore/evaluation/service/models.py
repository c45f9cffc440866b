"""
Orchestration Models.

Requests, suites and batch outcomes handled by the evaluation service.
"""

import asyncio
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from evalcore.evaluation.models import Criterion, EvaluationContext, EvaluationResult

COMPREHENSIVE = "comprehensive"

ProgressCallback = Callable[[float, int, int], None]
ErrorCallback = Callable[[Exception, EvaluationContext, int], None]


class EvaluationOptions(BaseModel):
    include_details: bool = Field(default=True, description="Keep per-evaluator detail blocks")
    generate_report: bool = Field(default=False, description="Attach a summary report to the result details")
    save_results: bool = Field(default=True, description="Record the result in the evaluation history")


class EvaluationRequest(BaseModel):
    """One subject evaluated by a named evaluator or comprehensively."""

    type: str = Field(..., description="Registered evaluator name or 'comprehensive'")
    subject: EvaluationContext
    evaluators: list[str] | None = Field(default=None, description="Evaluators for a comprehensive request")
    custom_criteria: list[Criterion] | None = None
    options: EvaluationOptions = Field(default_factory=EvaluationOptions)


class EvaluationSuite(BaseModel):
    """A named bundle of evaluators and criteria applied uniformly to many subjects."""

    id: str
    name: str
    description: str = ""
    evaluators: list[str] = Field(default_factory=list)
    criteria: list[Criterion] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)


class BatchOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    parallelism: int | None = Field(default=None, description="Max subjects in flight (defaults to settings)")
    progress_callback: ProgressCallback | None = None
    error_callback: ErrorCallback | None = None
    abort_event: asyncio.Event | None = Field(default=None, description="Once set, no new subject is started")


class BatchEvaluationRequest(BaseModel):
    suite: EvaluationSuite
    subjects: list[EvaluationContext]
    options: BatchOptions = Field(default_factory=BatchOptions)


class BatchError(BaseModel):
    index: int
    error: str
    error_type: str
    subject: EvaluationContext


class BatchPerformer(BaseModel):
    index: int = Field(..., description="Position of the subject in the batch input")
    score: float
    passed: bool
    feedback: str | None = None


class BatchSummary(BaseModel):
    average_score: float = 0.0
    pass_rate: float = 0.0
    top_performers: list[BatchPerformer] = Field(default_factory=list)
    bottom_performers: list[BatchPerformer] = Field(default_factory=list)


class BatchResult(BaseModel):
    suite_id: str
    total_subjects: int
    completed: int
    failed: int
    skipped: int = 0
    aborted: bool = False
    results: list[EvaluationResult] = Field(default_factory=list)
    aggregated_scores: dict[str, float] = Field(default_factory=dict)
    summary: BatchSummary = Field(default_factory=BatchSummary)
    execution_time: float = Field(..., description="Wall-clock milliseconds for the whole batch")
    errors: list[BatchError] = Field(default_factory=list)


class EvaluationStatistics(BaseModel):
    total_evaluations: int = 0
    average_score: float = 0.0
    pass_rate: float = 0.0
    evaluator_usage: dict[str, int] = Field(default_factory=dict)
    evaluation_types: dict[str, int] = Field(default_factory=dict)
