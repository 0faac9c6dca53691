"""Immutable dataset snapshots.

A dataset is an ordered sequence of records, each a mapping from column
name to a scalar value. The engine works on a read-only snapshot built by
``Dataset.from_records`` so that a caller replacing its data mid-run can
never race a calculator.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import numpy as np
import pandas as pd

from datascope.core.values import parse_number


class InvalidDatasetShape(ValueError):
    """Raised when input is not a sequence of mapping-like records."""


@dataclass(frozen=True, eq=False)
class Dataset:
    """Read-only tabular dataset.

    Attributes:
        records: Tuple of read-only records

    Example:
        >>> ds = Dataset.from_records([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])
        >>> len(ds)
        2
        >>> ds.numeric_values("a").tolist()
        [1.0, 2.0]
    """

    records: tuple[Mapping[str, Any], ...]

    @classmethod
    def from_records(cls, data: Any) -> Dataset:
        """Build a snapshot from caller-owned data.

        Args:
            data: A Dataset, a pandas DataFrame, or an iterable of mappings

        Returns:
            Dataset holding copies of the records

        Raises:
            InvalidDatasetShape: If data is not tabular
        """
        if isinstance(data, Dataset):
            return data

        if isinstance(data, pd.DataFrame):
            data = data.to_dict(orient="records")

        if data is None or isinstance(data, (str, bytes, bytearray, Mapping)):
            raise InvalidDatasetShape(
                f"Expected a sequence of records, got {type(data).__name__}"
            )
        if not isinstance(data, Iterable):
            raise InvalidDatasetShape(
                f"Expected a sequence of records, got {type(data).__name__}"
            )

        records = []
        for index, record in enumerate(data):
            if not isinstance(record, Mapping):
                raise InvalidDatasetShape(
                    f"Record {index} is {type(record).__name__}, expected a mapping"
                )
            records.append(
                MappingProxyType({str(key): value for key, value in record.items()})
            )

        return cls(records=tuple(records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return len(self.records) == 0

    @property
    def columns(self) -> list[str]:
        """All column names, in first-seen order across records."""
        seen: dict[str, None] = {}
        for record in self.records:
            for key in record:
                seen.setdefault(key, None)
        return list(seen)

    def values(self, column: str) -> list[Any]:
        """Raw values of a column, with None where a record lacks it."""
        return [record.get(column) for record in self.records]

    def numeric_values(self, column: str) -> np.ndarray:
        """Parseable values of a column, in row order.

        Values that do not parse as finite numbers are dropped, so the
        length is the column's filtered count, not the row count.
        """
        parsed = (parse_number(record.get(column)) for record in self.records)
        return np.array([v for v in parsed if v is not None], dtype=float)

    def paired_numeric_values(
        self, column_a: str, column_b: str
    ) -> tuple[np.ndarray, np.ndarray]:
        """Parallel values of two columns, keeping rows where both parse."""
        xs: list[float] = []
        ys: list[float] = []
        for record in self.records:
            x = parse_number(record.get(column_a))
            y = parse_number(record.get(column_b))
            if x is None or y is None:
                continue
            xs.append(x)
            ys.append(y)
        return np.array(xs, dtype=float), np.array(ys, dtype=float)

    def missing_counts(self) -> dict[str, int]:
        """Number of records lacking each column key."""
        counts = {column: 0 for column in self.columns}
        for record in self.records:
            for column in counts:
                if column not in record:
                    counts[column] += 1
        return counts

    def to_frame(self) -> pd.DataFrame:
        """Convert to a pandas DataFrame (missing keys become NaN)."""
        return pd.DataFrame.from_records(
            [dict(record) for record in self.records], columns=self.columns
        )
