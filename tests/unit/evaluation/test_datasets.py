"""Unit tests for evaluation datasets."""

import pytest
from pydantic import ValidationError

from evalcore.core.domain.exceptions import ConfigurationException
from evalcore.evaluation.datasets import EvaluationDataset, create_dataset, merge_datasets, split_dataset
from evalcore.evaluation.models import EvaluationContext
from evalcore.evaluation.service import BatchOptions, EvaluationSuite


def build_contexts(count: int, offset: int = 0) -> list[EvaluationContext]:
    return [EvaluationContext(input=i, output=f"answer {i}") for i in range(offset, offset + count)]


class TestCreateDataset:
    """Tests for create_dataset."""

    def test_defaults(self) -> None:
        dataset = create_dataset("qa", build_contexts(3), tags=["faq"])

        assert dataset.id.startswith("dataset-")
        assert dataset.description == "Dataset with 3 evaluation contexts"
        assert dataset.metadata.size == 3
        assert dataset.metadata.version == "1.0.0"
        assert dataset.metadata.tags == ["faq"]
        assert dataset.ground_truth is None
        assert len(dataset) == 3

    def test_ids_are_unique(self) -> None:
        assert create_dataset("a", []).id != create_dataset("a", []).id

    def test_rejects_misaligned_ground_truth(self) -> None:
        with pytest.raises(ValidationError, match="Ground truth has 1 entries for 2 contexts"):
            create_dataset("qa", build_contexts(2), ground_truth=["yes"])

    def test_rejects_blank_name(self) -> None:
        with pytest.raises(ConfigurationException):
            create_dataset("  ", build_contexts(1))

    def test_to_batch_request(self) -> None:
        dataset = create_dataset("qa", build_contexts(2))
        suite = EvaluationSuite(id="suite-1", name="Suite", evaluators=["response"])

        request = dataset.to_batch_request(suite, BatchOptions(parallelism=2))

        assert [subject.input for subject in request.subjects] == [0, 1]
        assert request.options.parallelism == 2
        assert request.suite.id == "suite-1"

    @pytest.mark.asyncio
    async def test_runs_as_batch(self, service) -> None:
        splits = split_dataset(create_dataset("qa", build_contexts(4)), train=0.5, validation=0.0, test=0.5, seed=2)
        suite = EvaluationSuite(id="suite-1", name="Suite", evaluators=["response"])

        batch = await service.evaluate_batch(splits.test.to_batch_request(suite))

        assert batch.total_subjects == 2
        assert batch.completed == 2
        assert batch.aggregated_scores["overall"] == pytest.approx(0.85)


class TestMergeDatasets:
    """Tests for merge_datasets."""

    def test_concatenates_in_order(self) -> None:
        first = create_dataset("a", build_contexts(2), ground_truth=["x", "y"], tags=["faq", "billing"])
        second = create_dataset("b", build_contexts(1, offset=2), ground_truth=["z"], tags=["billing", "safety"])

        merged = merge_datasets([first, second], "all")

        assert merged.id.startswith("merged-dataset-")
        assert [c.input for c in merged.contexts] == [0, 1, 2]
        assert merged.ground_truth == ["x", "y", "z"]
        assert merged.metadata.tags == ["faq", "billing", "safety"]
        assert merged.metadata.difficulty == "mixed"
        assert [(s.name, s.size) for s in merged.metadata.source_datasets] == [("a", 2), ("b", 1)]
        assert merged.description == "Merged dataset from 2 source datasets"

    def test_drops_partial_ground_truth(self) -> None:
        first = create_dataset("a", build_contexts(2), ground_truth=["x", "y"])
        second = create_dataset("b", build_contexts(1))

        assert merge_datasets([first, second], "all").ground_truth is None

    def test_requires_a_source(self) -> None:
        with pytest.raises(ConfigurationException, match="At least one dataset"):
            merge_datasets([], "empty")


class TestSplitDataset:
    """Tests for split_dataset."""

    @pytest.fixture
    def dataset(self) -> EvaluationDataset:
        return create_dataset("qa", build_contexts(10), ground_truth=[f"gt-{i}" for i in range(10)])

    def test_sizes_floor_train_and_validation(self, dataset) -> None:
        splits = split_dataset(dataset, train=0.65, validation=0.15, test=0.2, seed=7)

        assert len(splits.train) == 6
        assert len(splits.validation) == 1
        assert len(splits.test) == 3

    def test_partitions_cover_every_context_once(self, dataset) -> None:
        splits = split_dataset(dataset, train=0.6, validation=0.2, test=0.2, seed=1)

        inputs = [c.input for part in (splits.train, splits.validation, splits.test) for c in part.contexts]
        assert sorted(inputs) == list(range(10))

    def test_ground_truth_follows_contexts(self, dataset) -> None:
        splits = split_dataset(dataset, train=0.5, validation=0.3, test=0.2, seed=3)

        for part in (splits.train, splits.validation, splits.test):
            assert part.ground_truth == [f"gt-{c.input}" for c in part.contexts]

    def test_child_metadata(self, dataset) -> None:
        splits = split_dataset(dataset, train=0.8, validation=0.1, test=0.1, seed=0)

        assert splits.test.id == f"{dataset.id}-test"
        assert splits.test.name == "qa (Test)"
        assert splits.test.metadata.split == "test"
        assert splits.test.metadata.parent_dataset == dataset.id
        assert splits.test.metadata.size == len(splits.test)
        assert dataset.metadata.split is None

    def test_seed_is_reproducible(self, dataset) -> None:
        first = split_dataset(dataset, train=0.5, validation=0.25, test=0.25, seed=42)
        second = split_dataset(dataset, train=0.5, validation=0.25, test=0.25, seed=42)

        assert [c.input for c in first.train.contexts] == [c.input for c in second.train.contexts]

    @pytest.mark.parametrize(
        "train, validation, test",
        [(0.5, 0.5, 0.5), (0.7, 0.2, 0.05), (1.2, -0.1, -0.1)],
    )
    def test_rejects_bad_ratios(self, dataset, train, validation, test) -> None:
        with pytest.raises(ConfigurationException):
            split_dataset(dataset, train=train, validation=validation, test=test)
