"""Validated transformation models.

A transformation is a single step applied to every record of an upload
before analysis. Steps are validated up front so a malformed pipeline is
rejected before any record is touched.

Example:
    >>> steps = [
    ...     Transformation(column="Price", operation="rename", params={"new_name": "price"}),
    ...     Transformation(column="price", operation="filter",
    ...                    params={"operator": "greater_than", "value": 10}),
    ...     Transformation(column="total", operation="calculate",
    ...                    params={"formula": "{price} * {qty}", "new_column": "total"}),
    ... ]
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from datascope.transform.formula import Formula, FormulaError


class Operation(str, Enum):
    """Transformation operations."""

    RENAME = "rename"
    CONVERT = "convert"
    FILTER = "filter"
    CALCULATE = "calculate"


class TargetType(str, Enum):
    """Target types for the convert operation."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"


class FilterOperator(str, Enum):
    """Row filter operators."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"

    @classmethod
    def is_numeric(cls, op: FilterOperator) -> bool:
        """Check if operator compares values as numbers."""
        return op in (cls.GREATER_THAN, cls.LESS_THAN)


# Dashboard clients send camelCase parameter names
_PARAM_ALIASES = {"newName": "new_name", "newColumn": "new_column"}

_REQUIRED_PARAMS: dict[Operation, tuple[str, ...]] = {
    Operation.RENAME: ("new_name",),
    Operation.CONVERT: ("type",),
    Operation.FILTER: ("operator", "value"),
    Operation.CALCULATE: ("formula", "new_column"),
}


class Transformation(BaseModel):
    """A single transformation step.

    Attributes:
        column: Column the step acts on (for calculate, informational only)
        operation: rename, convert, filter or calculate
        params: Operation parameters:
            rename: new_name
            convert: type (number, string, boolean, date)
            filter: operator, value
            calculate: formula, new_column
    """

    model_config = ConfigDict(use_enum_values=False)

    column: str = Field(..., min_length=1, description="Column to transform")
    operation: Operation = Field(..., description="Transformation operation")
    params: dict[str, Any] = Field(default_factory=dict, description="Operation parameters")

    @field_validator("params", mode="before")
    @classmethod
    def normalize_param_names(cls, v: Any) -> Any:
        """Accept camelCase parameter names."""
        if isinstance(v, dict):
            return {_PARAM_ALIASES.get(k, k): value for k, value in v.items()}
        return v

    @model_validator(mode="after")
    def validate_params_for_operation(self) -> Self:
        """Validate that params are complete and well-formed for the operation."""
        missing = [p for p in _REQUIRED_PARAMS[self.operation] if p not in self.params]
        if missing:
            raise ValueError(
                f"Operation '{self.operation.value}' requires params: {', '.join(missing)}"
            )

        if self.operation == Operation.CONVERT:
            self.params["type"] = TargetType(self.params["type"])
        elif self.operation == Operation.FILTER:
            operator = FilterOperator(self.params["operator"])
            self.params["operator"] = operator
            if self.params["value"] is None:
                raise ValueError("Filter value cannot be null")
        elif self.operation == Operation.CALCULATE:
            if not str(self.params["new_column"]).strip():
                raise ValueError("Calculated column name cannot be empty")
            try:
                Formula.parse(str(self.params["formula"]))
            except FormulaError as e:
                raise ValueError(str(e)) from e
        elif not str(self.params["new_name"]).strip():
            raise ValueError("New column name cannot be empty")

        return self

    def describe(self) -> str:
        """One-line human-readable description of the step."""
        p = self.params
        if self.operation == Operation.RENAME:
            return f"Rename '{self.column}' to '{p['new_name']}'"
        if self.operation == Operation.CONVERT:
            return f"Convert '{self.column}' to {p['type'].value}"
        if self.operation == Operation.FILTER:
            return f"Keep rows where '{self.column}' {p['operator'].value} {p['value']!r}"
        return f"Calculate '{p['new_column']}' = {p['formula']}"
