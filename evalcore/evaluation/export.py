"""
Result Export and Import.

JSON and CSV serialization of evaluation results. CSV columns are fixed:
score, passed, feedback[, evaluation_type, execution_time, timestamp].
"""

import csv
import io
import json
from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from evalcore.core.domain.exceptions import ResultImportException, UnsupportedFormatException
from evalcore.core.shared.logger import get_logger
from evalcore.evaluation.models import EvaluationResult

logger = get_logger(__name__)

ExportFormat = Literal["json", "csv"]

CSV_BASE_COLUMNS = ["score", "passed", "feedback"]
CSV_DETAIL_COLUMNS = ["evaluation_type", "execution_time", "timestamp"]

Exportable = BaseModel | Sequence[BaseModel]


class ImportValidation(BaseModel):
    """Checks applied to every imported record after field mapping."""

    required: list[str] = Field(default_factory=list)
    types: dict[str, Literal["number", "boolean", "string"]] = Field(default_factory=dict)
    ranges: dict[str, tuple[float, float]] = Field(default_factory=dict)


def export_results(data: Exportable, format: ExportFormat = "json", include_details: bool = True) -> str:
    """
    Serialize results, reports or batch results.

    Raises:
        UnsupportedFormatException: for formats other than json/csv
    """
    if format == "json":
        return _export_json(data, include_details)
    if format == "csv":
        if isinstance(data, BaseModel) or not all(isinstance(item, EvaluationResult) for item in data):
            raise UnsupportedFormatException("csv (only result lists can be exported to CSV)")
        return _export_csv(data, include_details)
    raise UnsupportedFormatException(format)


def _export_json(data: Exportable, include_details: bool) -> str:
    exclude = None if include_details else {"details"}
    if isinstance(data, BaseModel):
        payload: Any = data.model_dump(mode="json", exclude=exclude)
    else:
        payload = [item.model_dump(mode="json", exclude=exclude) for item in data]
    return json.dumps(payload, indent=2)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    if any(char in text for char in ',"\n\r'):
        return _quote(text)
    return text


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _export_csv(results: Sequence[EvaluationResult], include_details: bool) -> str:
    columns = CSV_BASE_COLUMNS + (CSV_DETAIL_COLUMNS if include_details else [])
    lines = [",".join(columns)]

    for result in results:
        # Feedback is always quoted
        row = [_format_cell(result.score), _format_cell(result.passed), _quote(result.feedback or "")]
        if include_details:
            row.extend(_format_cell(result.details.get(column)) for column in CSV_DETAIL_COLUMNS)
        lines.append(",".join(row))

    return "\n".join(lines)


def import_results(
    data: str,
    format: ExportFormat = "json",
    mapping: Mapping[str, str] | None = None,
    validation: ImportValidation | None = None,
) -> list[EvaluationResult]:
    """
    Parse results previously written by `export_results` (or compatible data).

    Args:
        data: Serialized results
        format: 'json' (array of objects) or 'csv' (header row first)
        mapping: source field name -> result field name
        validation: Required fields, type coercions and value ranges

    Raises:
        ResultImportException: malformed data or failed validation
        UnsupportedFormatException: unknown format
    """
    if format == "json":
        records = _parse_json(data)
    elif format == "csv":
        records = _parse_csv(data)
    else:
        raise UnsupportedFormatException(format, operation="import")

    results = [_map_and_validate(record, mapping or {}, validation) for record in records]
    logger.debug("Results imported", count=len(results), format=format)
    return results


def _parse_json(data: str) -> list[dict[str, Any]]:
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as e:
        raise ResultImportException(f"Invalid JSON: {e}") from e
    if not isinstance(parsed, list):
        raise ResultImportException("JSON data must be an array of evaluation results")
    if not all(isinstance(item, dict) for item in parsed):
        raise ResultImportException("Every JSON item must be an object")
    return parsed


def _parse_csv(data: str) -> list[dict[str, Any]]:
    reader = csv.DictReader(io.StringIO(data.strip()))
    records = []
    for row in reader:
        record: dict[str, Any] = {key.strip(): value for key, value in row.items() if key is not None}
        details: dict[str, Any] = {}
        for column in CSV_DETAIL_COLUMNS:
            value = record.pop(column, None)
            if value:
                details[column] = value
        if "execution_time" in details:
            try:
                details["execution_time"] = float(details["execution_time"])
            except ValueError as e:
                raise ResultImportException("Column 'execution_time' must be numeric", field="execution_time") from e
        if details:
            record["details"] = details
        record["feedback"] = record.get("feedback") or None
        record["passed"] = str(record.get("passed") or "false").strip().lower() == "true"
        records.append(record)
    return records


def _coerce(value: Any, expected: str, field: str) -> Any:
    if expected == "number" and isinstance(value, str):
        try:
            return float(value)
        except ValueError as e:
            raise ResultImportException(f"Field '{field}' value {value!r} is not a number", field=field) from e
    if expected == "boolean" and isinstance(value, str):
        return value.strip().lower() == "true"
    if expected == "string" and value is not None and not isinstance(value, str):
        return str(value)
    return value


def _map_and_validate(
    item: dict[str, Any], mapping: Mapping[str, str], validation: ImportValidation | None
) -> EvaluationResult:
    record = dict(item)
    for source, target in mapping.items():
        if source in item:
            record[target] = item[source]

    if validation is not None:
        for field in validation.required:
            if record.get(field) is None:
                raise ResultImportException(f"Required field '{field}' is missing", field=field)
        for field, expected in validation.types.items():
            if field in record:
                record[field] = _coerce(record[field], expected, field)
        for field, (low, high) in validation.ranges.items():
            value = record.get(field)
            if value is None:
                continue
            if not isinstance(value, (int, float)):
                raise ResultImportException(f"Field '{field}' must be numeric for a range check", field=field)
            if not low <= value <= high:
                raise ResultImportException(
                    f"Field '{field}' value {value} is outside valid range [{low}, {high}]", field=field
                )

    payload = {
        "score": record.get("score") or 0.0,
        "passed": bool(record.get("passed") or False),
        "feedback": record.get("feedback"),
        "details": record.get("details") or {},
    }
    if record.get("timestamp"):
        payload["timestamp"] = record["timestamp"]

    try:
        return EvaluationResult.model_validate(payload)
    except (ValidationError, ValueError, TypeError) as e:
        raise ResultImportException(f"Invalid evaluation result: {e}") from e
