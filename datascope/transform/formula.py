"""Arithmetic formulas over record columns.

Formulas reference columns with braces, e.g. ``{price} * {quantity}``.
They are parsed once with ``ast`` and validated against a whitelist of
arithmetic nodes, then evaluated per record without ``eval``.

Example:
    >>> formula = Formula.parse("({high} + {low}) / 2")
    >>> formula.columns
    ('high', 'low')
    >>> formula.evaluate({"high": 10, "low": 4})
    7.0
"""

from __future__ import annotations

import ast
import math
import operator
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from datascope.core.values import parse_number

COLUMN_REFERENCE = re.compile(r"\{([^}]+)\}")

_BINARY_OPS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class FormulaError(ValueError):
    """Raised when a formula cannot be parsed or uses unsupported syntax."""


def _placeholder(index: int) -> str:
    return f"_col{index}"


@dataclass(frozen=True)
class Formula:
    """A validated arithmetic formula.

    Attributes:
        source: Formula text as written
        columns: Referenced columns, in first-seen order
        tree: Parsed expression with columns replaced by placeholders
    """

    source: str
    columns: tuple[str, ...]
    tree: ast.Expression

    @classmethod
    def parse(cls, source: str) -> Formula:
        """Parse and validate a formula.

        Raises:
            FormulaError: If the formula is empty, malformed, or uses
                anything other than numbers, column references, parentheses
                and arithmetic operators
        """
        if not source or not source.strip():
            raise FormulaError("Formula is empty")

        columns: list[str] = []

        def substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in columns:
                columns.append(name)
            return _placeholder(columns.index(name))

        expression = COLUMN_REFERENCE.sub(substitute, source)

        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as e:
            raise FormulaError(f"Invalid formula '{source}': {e.msg}") from e

        placeholders = {_placeholder(i) for i in range(len(columns))}
        for node in ast.walk(tree):
            _check_node(node, placeholders, source)

        return cls(source=source, columns=tuple(columns), tree=tree)

    def evaluate(self, record: Mapping[str, Any]) -> float | None:
        """Evaluate the formula against one record.

        Returns:
            The result, or None when a referenced column is missing or not
            numeric, or the arithmetic is undefined (e.g. division by zero)
        """
        variables: dict[str, float] = {}
        for index, column in enumerate(self.columns):
            value = parse_number(record.get(column))
            if value is None:
                return None
            variables[_placeholder(index)] = value

        try:
            result = _evaluate(self.tree.body, variables)
        except (ZeroDivisionError, OverflowError, ValueError):
            return None

        if isinstance(result, complex) or not math.isfinite(result):
            return None
        return float(result)


def _check_node(node: ast.AST, placeholders: set[str], source: str) -> None:
    if isinstance(node, (ast.Expression, ast.operator, ast.unaryop, ast.Load)):
        if isinstance(node, ast.operator) and type(node) not in _BINARY_OPS:
            raise FormulaError(f"Unsupported operator in formula '{source}'")
        if isinstance(node, ast.unaryop) and type(node) not in _UNARY_OPS:
            raise FormulaError(f"Unsupported operator in formula '{source}'")
        return
    if isinstance(node, (ast.BinOp, ast.UnaryOp)):
        return
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(
                f"Only numeric constants are allowed in formula '{source}', "
                f"got: {node.value!r}"
            )
        return
    if isinstance(node, ast.Name):
        if node.id not in placeholders:
            raise FormulaError(
                f"Unknown name '{node.id}' in formula '{source}'. "
                "Reference columns as {column}"
            )
        return
    raise FormulaError(
        f"Unsupported expression in formula '{source}': {type(node).__name__}"
    )


def _evaluate(node: ast.expr, variables: dict[str, float]) -> float:
    if isinstance(node, ast.Constant):
        return float(node.value)
    if isinstance(node, ast.Name):
        return variables[node.id]
    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPS[type(node.op)](_evaluate(node.operand, variables))
    if isinstance(node, ast.BinOp):
        left = _evaluate(node.left, variables)
        right = _evaluate(node.right, variables)
        return _BINARY_OPS[type(node.op)](left, right)
    raise FormulaError(f"Unsupported expression: {type(node).__name__}")
