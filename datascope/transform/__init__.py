"""Record transformations applied to uploads before analysis.

This module contains:
- Validated transformation models (rename, convert, filter, calculate)
- A sandboxed arithmetic formula evaluator
- The transformation pipeline
"""

from datascope.transform.formula import Formula, FormulaError
from datascope.transform.models import (
    FilterOperator,
    Operation,
    TargetType,
    Transformation,
)
from datascope.transform.transforms import apply_transformations

__all__ = [
    "apply_transformations",
    "Transformation",
    "Operation",
    "TargetType",
    "FilterOperator",
    "Formula",
    "FormulaError",
]
