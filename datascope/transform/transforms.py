"""Apply transformation steps to a list of records."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

from datascope.core.values import ValueKind, kind_of, parse_number
from datascope.transform.formula import Formula
from datascope.transform.models import (
    FilterOperator,
    Operation,
    TargetType,
    Transformation,
)

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("true", "1")


def to_boolean(value: Any) -> bool:
    """Convert a value to a boolean.

    Strings are true only for "true" (any case) or "1"; other values use
    Python truthiness, with missing values false.
    """
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if kind_of(value) == ValueKind.NULL:
        return False
    return bool(value)


def to_date(value: Any) -> str | None:
    """Convert a value to an ISO date string, or None if it is not a date."""
    if kind_of(value) == ValueKind.NULL:
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def _convert(value: Any, target: TargetType) -> Any:
    if target == TargetType.NUMBER:
        return parse_number(value)
    if target == TargetType.STRING:
        return None if kind_of(value) == ValueKind.NULL else str(value)
    if target == TargetType.BOOLEAN:
        return to_boolean(value)
    return to_date(value)


def _loosely_equal(value: Any, expected: Any) -> bool:
    left, right = parse_number(value), parse_number(expected)
    if left is not None and right is not None:
        return left == right
    if kind_of(value) == ValueKind.NULL:
        return False
    return str(value) == str(expected)


def _keep(value: Any, operator: FilterOperator, expected: Any) -> bool:
    if operator == FilterOperator.EQUALS:
        return _loosely_equal(value, expected)
    if operator == FilterOperator.NOT_EQUALS:
        return not _loosely_equal(value, expected)
    if operator == FilterOperator.CONTAINS:
        return kind_of(value) != ValueKind.NULL and str(expected) in str(value)

    left, right = parse_number(value), parse_number(expected)
    if left is None or right is None:
        return False
    if operator == FilterOperator.GREATER_THAN:
        return left > right
    return left < right


def apply_transformation(
    records: list[dict[str, Any]], step: Transformation
) -> list[dict[str, Any]]:
    """Apply one step to records already copied by the caller."""
    params = step.params

    if step.operation == Operation.RENAME:
        new_name = params["new_name"]
        for record in records:
            if step.column in record:
                record[new_name] = record.pop(step.column)
        return records

    if step.operation == Operation.CONVERT:
        for record in records:
            if step.column in record:
                record[step.column] = _convert(record[step.column], params["type"])
        return records

    if step.operation == Operation.FILTER:
        return [
            r
            for r in records
            if _keep(r.get(step.column), params["operator"], params["value"])
        ]

    formula = Formula.parse(str(params["formula"]))
    for record in records:
        record[params["new_column"]] = formula.evaluate(record)
    return records


def _known_columns(records: list[dict[str, Any]]) -> set[str]:
    return {column for record in records for column in record}


def _check_columns(step: Transformation, known: set[str]) -> None:
    if step.operation == Operation.CALCULATE:
        referenced = Formula.parse(str(step.params["formula"])).columns
    else:
        referenced = (step.column,)

    unknown = [c for c in referenced if c not in known]
    if unknown:
        raise ValueError(
            f"{step.describe()}: unknown column(s) {', '.join(unknown)}. "
            f"Available: {', '.join(sorted(known))}"
        )


def apply_transformations(
    records: Iterable[Mapping[str, Any]],
    transformations: Sequence[Transformation],
) -> list[dict[str, Any]]:
    """Apply transformation steps in order.

    Args:
        records: Input records (never mutated)
        transformations: Validated steps

    Returns:
        New list of new record dicts

    Raises:
        ValueError: If a step references a column that does not exist at
            that point in the pipeline

    Example:
        >>> apply_transformations(
        ...     [{"a": "1"}, {"a": "5"}],
        ...     [Transformation(column="a", operation="convert", params={"type": "number"})],
        ... )
        [{'a': 1.0}, {'a': 5.0}]
    """
    result = [dict(record) for record in records]

    for step in transformations:
        if result:
            _check_columns(step, _known_columns(result))
        before = len(result)
        result = apply_transformation(result, step)
        logger.debug(f"{step.describe()}: {before} -> {len(result)} records")

    return result
