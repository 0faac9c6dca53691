"""Pytest configuration and fixtures for Datascope tests."""

import pytest

from datascope.analysis.report import AnalysisReport, analyze
from datascope.core.dataset import Dataset


@pytest.fixture
def linear_records() -> list[dict]:
    """Return two perfectly correlated numeric columns."""
    return [{"a": 1, "b": 2}, {"a": 2, "b": 4}, {"a": 3, "b": 6}]


@pytest.fixture
def city_records() -> list[dict]:
    """Return a single categorical column with a repeated value."""
    return [{"city": "NY"}, {"city": "LA"}, {"city": "NY"}]


@pytest.fixture
def sales_records() -> list[dict]:
    """Return a mixed dataset resembling a dashboard upload."""
    prices = [10, 12, 11, 13, 12, 11, 10, 14, 12, 95]
    regions = ["north", "south", "north", "east", "north", "south", "east", "north", "south", "north"]
    return [
        {
            "price": price,
            "quantity": 100 - 3 * i,
            "revenue": price * (100 - 3 * i),
            "region": region,
        }
        for i, (price, region) in enumerate(zip(prices, regions))
    ]


@pytest.fixture
def sales_dataset(sales_records: list[dict]) -> Dataset:
    """Return the sales records as a Dataset snapshot."""
    return Dataset.from_records(sales_records)


@pytest.fixture
def sales_report(sales_records: list[dict]) -> AnalysisReport:
    """Return the analysis report for the sales records."""
    return analyze(sales_records)
