"""
Evaluation Datasets.

Named collections of subjects, optionally paired with ground truth. A dataset
feeds a batch run directly and can be merged with others or partitioned into
train/validation/test splits.
"""

import math
import random
import uuid
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, Field, JsonValue, model_validator

from evalcore.core.domain.exceptions import ConfigurationException
from evalcore.core.shared.logger import get_logger
from evalcore.evaluation.models import EvaluationContext, utc_now
from evalcore.evaluation.service.models import BatchEvaluationRequest, BatchOptions, EvaluationSuite

logger = get_logger(__name__)

DATASET_VERSION = "1.0.0"
SPLIT_TOLERANCE = 0.001


class DatasetSource(BaseModel):
    id: str
    name: str
    size: int


class DatasetMetadata(BaseModel):
    created_at: datetime = Field(default_factory=utc_now)
    version: str = DATASET_VERSION
    size: int = 0
    domain: str | None = None
    difficulty: str | None = None
    tags: list[str] = Field(default_factory=list)
    split: str | None = Field(default=None, description="train, validation or test for split children")
    parent_dataset: str | None = None
    source_datasets: list[DatasetSource] = Field(default_factory=list, description="Inputs of a merge")


class EvaluationDataset(BaseModel):
    """Subjects to evaluate; `ground_truth[i]` belongs to `contexts[i]`."""

    id: str
    name: str
    description: str = ""
    contexts: list[EvaluationContext] = Field(default_factory=list)
    ground_truth: list[JsonValue] | None = None
    metadata: DatasetMetadata = Field(default_factory=DatasetMetadata)

    @model_validator(mode="after")
    def check_ground_truth_alignment(self) -> "EvaluationDataset":
        if self.ground_truth is not None and len(self.ground_truth) != len(self.contexts):
            raise ValueError(
                f"Ground truth has {len(self.ground_truth)} entries for {len(self.contexts)} contexts"
            )
        return self

    def __len__(self) -> int:
        return len(self.contexts)

    def to_batch_request(self, suite: EvaluationSuite, options: BatchOptions | None = None) -> BatchEvaluationRequest:
        return BatchEvaluationRequest(suite=suite, subjects=list(self.contexts), options=options or BatchOptions())


class DatasetSplit(BaseModel):
    train: EvaluationDataset
    validation: EvaluationDataset
    test: EvaluationDataset


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def create_dataset(
    name: str,
    contexts: Sequence[EvaluationContext],
    description: str | None = None,
    ground_truth: Sequence[JsonValue] | None = None,
    domain: str | None = None,
    difficulty: str | None = None,
    tags: Sequence[str] | None = None,
) -> EvaluationDataset:
    """
    Build a dataset from evaluation subjects.

    Args:
        name: Human readable dataset name
        contexts: Subjects in evaluation order
        description: Defaults to a size summary
        ground_truth: Reference values aligned with `contexts`
        domain: Optional domain label
        difficulty: Optional difficulty label
        tags: Optional free-form tags

    Returns:
        EvaluationDataset with a fresh id
    """
    if not name or not name.strip():
        raise ConfigurationException("Dataset name is required", field="name")

    dataset = EvaluationDataset(
        id=_new_id("dataset"),
        name=name,
        description=description or f"Dataset with {len(contexts)} evaluation contexts",
        contexts=list(contexts),
        ground_truth=list(ground_truth) if ground_truth is not None else None,
        metadata=DatasetMetadata(
            size=len(contexts),
            domain=domain,
            difficulty=difficulty,
            tags=list(tags or []),
        ),
    )
    logger.debug("Dataset created", dataset=dataset.id, size=len(dataset))
    return dataset


def merge_datasets(datasets: Sequence[EvaluationDataset], name: str) -> EvaluationDataset:
    """
    Concatenate datasets in order.

    Ground truth is kept only when every source has it, so entries stay
    aligned with their contexts. Tags are de-duplicated in first-seen order.
    """
    if not datasets:
        raise ConfigurationException("At least one dataset is required to merge", field="datasets")

    contexts = [context for dataset in datasets for context in dataset.contexts]
    ground_truth = None
    if all(dataset.ground_truth is not None for dataset in datasets):
        ground_truth = [value for dataset in datasets for value in dataset.ground_truth]

    tags = list(dict.fromkeys(tag for dataset in datasets for tag in dataset.metadata.tags))

    merged = EvaluationDataset(
        id=_new_id("merged-dataset"),
        name=name,
        description=f"Merged dataset from {len(datasets)} source datasets",
        contexts=contexts,
        ground_truth=ground_truth,
        metadata=DatasetMetadata(
            size=len(contexts),
            difficulty="mixed",
            tags=tags,
            source_datasets=[
                DatasetSource(id=dataset.id, name=dataset.name, size=len(dataset)) for dataset in datasets
            ],
        ),
    )
    logger.debug("Datasets merged", dataset=merged.id, sources=len(datasets), size=len(merged))
    return merged


def split_dataset(
    dataset: EvaluationDataset,
    train: float,
    validation: float,
    test: float,
    seed: int | None = None,
) -> DatasetSplit:
    """
    Shuffle and partition a dataset by ratio.

    Train and validation sizes are floored; test takes the remainder. Ratios
    must each lie in [0, 1] and sum to 1 within 0.001. A seed makes the
    shuffle reproducible.
    """
    ratios = {"train": train, "validation": validation, "test": test}
    for split_name, ratio in ratios.items():
        if not 0 <= ratio <= 1:
            raise ConfigurationException(f"Split ratio must be between 0 and 1: {split_name}", field=split_name)
    if abs(sum(ratios.values()) - 1.0) > SPLIT_TOLERANCE:
        raise ConfigurationException("Split ratios must sum to 1.0", field="splits")

    order = list(range(len(dataset)))
    random.Random(seed).shuffle(order)

    size = len(order)
    train_size = math.floor(size * train)
    validation_size = math.floor(size * validation)
    partitions = {
        "train": order[:train_size],
        "validation": order[train_size : train_size + validation_size],
        "test": order[train_size + validation_size :],
    }

    children = {}
    for split_name, indices in partitions.items():
        children[split_name] = dataset.model_copy(
            update={
                "id": f"{dataset.id}-{split_name}",
                "name": f"{dataset.name} ({split_name.capitalize()})",
                "contexts": [dataset.contexts[i] for i in indices],
                "ground_truth": (
                    [dataset.ground_truth[i] for i in indices] if dataset.ground_truth is not None else None
                ),
                "metadata": dataset.metadata.model_copy(
                    update={"size": len(indices), "split": split_name, "parent_dataset": dataset.id}
                ),
            }
        )

    logger.debug(
        "Dataset split",
        dataset=dataset.id,
        train=len(partitions["train"]),
        validation=len(partitions["validation"]),
        test=len(partitions["test"]),
    )
    return DatasetSplit(**children)
