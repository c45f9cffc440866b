"""Unit tests for result reporting, export and import."""

import json
from datetime import UTC, datetime

import pytest

from evalcore.core.domain.exceptions import ResultImportException, UnsupportedFormatException
from evalcore.evaluation.export import ImportValidation, export_results, import_results
from evalcore.evaluation.models import EvaluationResult
from evalcore.evaluation.reporting import (
    ResultFilters,
    analyze_failure_patterns,
    calculate_group_statistics,
    filter_results,
    generate_summary_report,
    group_results,
    score_band,
)


class TestFilterResults:
    """Tests for filter_results."""

    def test_score_and_pass_filters(self, sample_results) -> None:
        selected = filter_results(sample_results, ResultFilters(min_score=0.4, passed=False))
        assert [r.score for r in selected] == [0.65, 0.45]

    def test_evaluation_type_filter(self, sample_results) -> None:
        selected = filter_results(sample_results, ResultFilters(evaluation_type="safety"))
        assert len(selected) == 2

    def test_time_window(self, sample_results) -> None:
        filters = ResultFilters(start=datetime(2024, 1, 2, tzinfo=UTC), end=datetime(2024, 1, 3, tzinfo=UTC))
        assert [r.score for r in filter_results(sample_results, filters)] == [0.85, 0.65]

    def test_naive_bounds_are_utc(self, sample_results) -> None:
        filters = ResultFilters(start=datetime(2024, 1, 2), end=datetime(2024, 1, 3))
        assert [r.score for r in filter_results(sample_results, filters)] == [0.85, 0.65]

    def test_naive_detail_timestamp(self) -> None:
        result = EvaluationResult(score=0.5, passed=True, details={"timestamp": "2024-01-02T12:00:00"})

        assert filter_results([result], ResultFilters(start=datetime(2024, 1, 2, tzinfo=UTC))) == [result]
        assert filter_results([result], ResultFilters(start=datetime(2024, 1, 3))) == []

    def test_custom_filter(self, sample_results) -> None:
        filters = ResultFilters(custom_filter=lambda r: "answer" in (r.feedback or ""))
        assert len(filter_results(sample_results, filters)) == 2


class TestGrouping:
    """Tests for grouping and group statistics."""

    def test_group_by_passed(self, sample_results) -> None:
        groups = group_results(sample_results, "passed")
        assert {key: len(value) for key, value in groups.items()} == {"passed": 2, "failed": 3}

    def test_group_by_score_range(self, sample_results) -> None:
        groups = group_results(sample_results, "score_range")
        assert set(groups) == {"excellent", "good", "fair", "poor"}

    def test_group_by_detail_key(self, sample_results) -> None:
        groups = group_results(sample_results, "evaluation_type")
        assert set(groups) == {"response", "safety"}
        assert set(group_results(sample_results, "model")) == {"unknown"}

    def test_group_by_date(self, sample_results) -> None:
        groups = group_results(sample_results, "date")
        assert "2024-01-01" in groups

    def test_group_statistics(self, sample_results) -> None:
        statistics = calculate_group_statistics(group_results(sample_results, "evaluation_type"))

        safety = statistics["safety"]
        assert safety.count == 2
        assert safety.average_score == pytest.approx(0.55)
        assert safety.pass_rate == 0.0
        assert safety.standard_deviation == pytest.approx(0.1)

    def test_score_band_edges(self) -> None:
        assert score_band(0.8) == "excellent"
        assert score_band(0.6) == "good"
        assert score_band(0.4) == "fair"
        assert score_band(0.0) == "poor"


class TestSummaryReport:
    """Tests for generate_summary_report."""

    def test_overview_and_recommendations(self, sample_results) -> None:
        report = generate_summary_report(sample_results, group_by="passed")

        assert report.overview.total_evaluations == 5
        assert report.overview.pass_rate == pytest.approx(0.4)
        assert report.overview.score_distribution["excellent (0.8-1.0)"] == 2
        assert report.overview.score_distribution["poor (0.0-0.4)"] == 1
        assert set(report.groups) == {"passed", "failed"}
        assert any("Low pass rate" in line for line in report.recommendations)
        assert any("missing, context" in line for line in report.recommendations)

    def test_empty_results(self) -> None:
        report = generate_summary_report([])

        assert report.overview.total_evaluations == 0
        assert report.groups is None
        assert report.recommendations == []

    def test_failure_patterns(self, sample_results) -> None:
        failed = [r for r in sample_results if not r.passed]
        assert analyze_failure_patterns(failed) == ["frequent issues with: missing, context"]
        assert analyze_failure_patterns([]) == []


class TestExport:
    """Tests for export_results."""

    def test_json_round_trip(self, sample_results) -> None:
        exported = export_results(sample_results)

        assert json.loads(exported)[0]["score"] == 0.95
        imported = import_results(exported)
        assert [r.score for r in imported] == [r.score for r in sample_results]
        assert imported[2].details["evaluation_type"] == "safety"
        assert imported[0].timestamp == sample_results[0].timestamp

    def test_json_without_details(self, sample_results) -> None:
        payload = json.loads(export_results(sample_results, include_details=False))
        assert "details" not in payload[0]

    def test_json_single_model(self, sample_results) -> None:
        payload = json.loads(export_results(sample_results[0]))
        assert payload["feedback"] == "Excellent answer"

    def test_csv_layout(self) -> None:
        results = [
            EvaluationResult(score=0.8, passed=True, feedback='Good, "clear"', details={"evaluation_type": "response"}),
            EvaluationResult(score=0.2, passed=False),
        ]

        lines = export_results(results, format="csv").split("\n")

        assert lines[0] == "score,passed,feedback,evaluation_type,execution_time,timestamp"
        assert lines[1] == '0.8,true,"Good, ""clear""",response,,'
        assert lines[2] == '0.2,false,"",,,'

    def test_csv_without_details(self) -> None:
        exported = export_results([EvaluationResult(score=0.5, passed=True, feedback="ok")], "csv", False)
        assert exported == 'score,passed,feedback\n0.5,true,"ok"'

    def test_csv_rejects_non_results(self, sample_results) -> None:
        with pytest.raises(UnsupportedFormatException):
            export_results(sample_results[0], format="csv")

    def test_unknown_format(self, sample_results) -> None:
        with pytest.raises(UnsupportedFormatException, match="Unsupported export format: xml"):
            export_results(sample_results, format="xml")


class TestImport:
    """Tests for import_results."""

    def test_csv(self) -> None:
        data = 'score,passed,feedback,evaluation_type,execution_time,timestamp\n0.8,true,"Good, clear",response,12.5,\n0.2,false,"",,,'

        results = import_results(data, format="csv")

        assert results[0].score == 0.8
        assert results[0].passed is True
        assert results[0].feedback == "Good, clear"
        assert results[0].details == {"evaluation_type": "response", "execution_time": 12.5}
        assert results[1].passed is False
        assert results[1].feedback is None

    def test_mapping_and_validation(self) -> None:
        data = json.dumps([{"rating": "0.9", "ok": "true", "comment": "fine"}])
        validation = ImportValidation(
            required=["score"], types={"score": "number", "passed": "boolean"}, ranges={"score": (0, 1)}
        )

        results = import_results(
            data, mapping={"rating": "score", "ok": "passed", "comment": "feedback"}, validation=validation
        )

        assert results[0].score == 0.9
        assert results[0].passed is True
        assert results[0].feedback == "fine"

    def test_missing_required_field(self) -> None:
        validation = ImportValidation(required=["score"])
        with pytest.raises(ResultImportException, match="Required field 'score'"):
            import_results(json.dumps([{"passed": True}]), validation=validation)

    def test_out_of_range(self) -> None:
        validation = ImportValidation(ranges={"score": (0, 1)})
        with pytest.raises(ResultImportException, match="outside valid range"):
            import_results(json.dumps([{"score": 3, "passed": True}]), validation=validation)

    def test_bad_number(self) -> None:
        validation = ImportValidation(types={"score": "number"})
        with pytest.raises(ResultImportException, match="is not a number"):
            import_results(json.dumps([{"score": "high"}]), validation=validation)

    def test_invalid_json(self) -> None:
        with pytest.raises(ResultImportException, match="Invalid JSON"):
            import_results("{not json")
        with pytest.raises(ResultImportException, match="array"):
            import_results(json.dumps({"score": 1}))

    def test_unknown_format(self) -> None:
        with pytest.raises(UnsupportedFormatException, match="Unsupported import format"):
            import_results("", format="yaml")
