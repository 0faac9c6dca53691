"""Tests for the FastAPI application."""

import json
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from datascope.analysis.report import AnalysisSession
from datascope.api.app import app
from datascope.api.deps import get_session


@pytest.fixture
def session() -> Iterator[AnalysisSession]:
    """Create a fresh analysis session for each test."""
    session = AnalysisSession()
    yield session
    session.shutdown()


@pytest.fixture
def client(session: AnalysisSession) -> Iterator[TestClient]:
    """Create a test client bound to the test session."""
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def loaded_client(client: TestClient, sales_records: list[dict]) -> TestClient:
    """Create a test client with the sales dataset uploaded."""
    response = client.post("/datasets", json={"records": sales_records})
    assert response.status_code == 200
    return client


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_empty(self, client: TestClient) -> None:
        """Test health reports an empty session."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["session_state"] == "empty"
        assert data["row_count"] is None

    def test_health_loaded(self, loaded_client: TestClient) -> None:
        """Test health reports the current row count."""
        data = loaded_client.get("/health").json()
        assert data["session_state"] == "ready"
        assert data["row_count"] == 10


class TestAnalyzeEndpoint:
    """Tests for stateless analysis."""

    def test_analyze(self, client: TestClient, linear_records: list[dict]) -> None:
        """Test records are analyzed without becoming current."""
        response = client.post("/analyze", json={"records": linear_records})
        assert response.status_code == 200
        data = response.json()
        assert data["correlations"][0]["coefficient"] == 1.0
        assert data["summary"]["a"]["mean"] == 2.0
        assert client.get("/report").status_code == 404

    def test_analyze_empty(self, client: TestClient) -> None:
        """Test an empty dataset gives an empty report."""
        data = client.post("/analyze", json={"records": []}).json()
        assert data["row_count"] == 0
        assert data["notes"][0]["kind"] == "empty_dataset"

    def test_analyze_invalid_shape(self, client: TestClient) -> None:
        """Test non-record payloads are rejected."""
        response = client.post("/analyze", json={"records": [1, 2, 3]})
        assert response.status_code == 422

    def test_too_many_records(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test uploads over the configured cap are rejected."""
        from datascope.config import settings

        monkeypatch.setattr(settings, "max_records", 2)
        response = client.post("/analyze", json={"records": [{"a": 1}] * 3})
        assert response.status_code == 413


class TestDatasetEndpoints:
    """Tests for upload and report endpoints."""

    def test_upload(self, client: TestClient, sales_records: list[dict]) -> None:
        """Test an upload returns the report, preview and types."""
        response = client.post("/datasets", json={"records": sales_records})
        assert response.status_code == 200
        data = response.json()
        assert data["run_id"] == 1
        assert data["row_count"] == 10
        assert data["column_types"] == {
            "price": "integer",
            "quantity": "integer",
            "revenue": "integer",
            "region": "string",
        }
        assert len(data["preview"]) == 10
        assert data["report"]["classification"]["region"] == "categorical"

    def test_upload_with_transformations(
        self, client: TestClient, sales_records: list[dict]
    ) -> None:
        """Test transformations run before analysis."""
        response = client.post(
            "/datasets",
            json={
                "records": sales_records,
                "transformations": [
                    {
                        "column": "price",
                        "operation": "filter",
                        "params": {"operator": "less_than", "value": 50},
                    },
                    {
                        "column": "unit",
                        "operation": "calculate",
                        "params": {"formula": "{revenue} / {quantity}", "newColumn": "unit"},
                    },
                ],
            },
        )
        assert response.status_code == 200
        report = response.json()["report"]
        assert report["row_count"] == 9
        assert report["summary"]["price"]["max"] == 14.0
        assert report["summary"]["unit"]["mean"] == pytest.approx(report["summary"]["price"]["mean"])

    def test_upload_invalid_transformation(
        self, client: TestClient, sales_records: list[dict]
    ) -> None:
        """Test a malformed step fails validation."""
        response = client.post(
            "/datasets",
            json={
                "records": sales_records,
                "transformations": [
                    {"column": "price", "operation": "convert", "params": {"type": "money"}}
                ],
            },
        )
        assert response.status_code == 422

    def test_upload_unknown_column(self, client: TestClient, sales_records: list[dict]) -> None:
        """Test a step naming a missing column is a bad request."""
        response = client.post(
            "/datasets",
            json={
                "records": sales_records,
                "transformations": [
                    {"column": "cost", "operation": "rename", "params": {"new_name": "c"}}
                ],
            },
        )
        assert response.status_code == 400
        assert "unknown column" in response.json()["detail"]

    def test_report(self, loaded_client: TestClient) -> None:
        """Test the current report is served."""
        data = loaded_client.get("/report").json()
        assert data["row_count"] == 10
        assert [o["column"] for o in data["outliers"]] == ["price", "revenue"]

    def test_report_display(self, loaded_client: TestClient) -> None:
        """Test display mode renders fixed decimals."""
        data = loaded_client.get("/report", params={"display": "true"}).json()
        assert data["summary"]["price"]["mean"] == "20.00"
        assert data["outliers"][0]["percentage"] == "10.0"

    def test_report_missing(self, client: TestClient) -> None:
        """Test no report before an upload."""
        assert client.get("/report").status_code == 404

    def test_clear(self, loaded_client: TestClient) -> None:
        """Test deleting the dataset drops the report."""
        assert loaded_client.delete("/datasets").status_code == 204
        assert loaded_client.get("/report").status_code == 404

    def test_insights(self, loaded_client: TestClient) -> None:
        """Test the insight narrative for the current dataset."""
        data = loaded_client.get("/insights").json()
        assert data["insights"][0]["title"] == "Dataset Overview"
        assert len(data["top_correlations"]) == 3


class TestTransformPreview:
    """Tests for the transformation preview endpoint."""

    def test_preview(self, client: TestClient) -> None:
        """Test transformed rows and types are returned without analysis."""
        response = client.post(
            "/transform/preview",
            json={
                "records": [{"n": "1"}, {"n": "2"}],
                "transformations": [
                    {"column": "n", "operation": "convert", "params": {"type": "number"}}
                ],
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["preview"] == [{"n": 1.0}, {"n": 2.0}]
        assert data["column_types"] == {"n": "integer"}
        assert client.get("/report").status_code == 404


class TestPlotEndpoint:
    """Tests for chart generation."""

    @pytest.mark.parametrize(
        "plot_type,options",
        [
            ("distribution", {"column": "region"}),
            ("correlations", {"top_n": 2}),
            ("outliers", {}),
            ("scatter", {"x_column": "price", "y_column": "revenue"}),
            ("trend", {"column": "quantity"}),
        ],
    )
    def test_plots(self, loaded_client: TestClient, plot_type: str, options: dict) -> None:
        """Test each chart type renders."""
        response = loaded_client.post("/plot", json={"plot_type": plot_type, "options": options})
        assert response.status_code == 200
        data = response.json()
        assert data["success"]
        assert "data" in json.loads(data["plot_json"])

    def test_unknown_plot_type(self, loaded_client: TestClient) -> None:
        """Test an unknown chart type is reported, not raised."""
        data = loaded_client.post("/plot", json={"plot_type": "pie"}).json()
        assert not data["success"]
        assert "Unknown plot type" in data["error"]

    def test_missing_option(self, loaded_client: TestClient) -> None:
        """Test a missing option is reported."""
        data = loaded_client.post("/plot", json={"plot_type": "distribution"}).json()
        assert not data["success"]
        assert "column" in data["error"]

    def test_no_dataset(self, client: TestClient) -> None:
        """Test charts need a dataset."""
        response = client.post("/plot", json={"plot_type": "outliers"})
        assert response.status_code == 404


class TestChatEndpoint:
    """Tests for the chat router."""

    def test_chat(self, loaded_client: TestClient) -> None:
        """Test the latest user message is answered."""
        response = loaded_client.post(
            "/chat/",
            json={
                "messages": [
                    {"role": "user", "content": "hi"},
                    {"role": "assistant", "content": "Hello!"},
                    {"role": "user", "content": "What's the average price?"},
                ]
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "The average price is 20.00."
        assert data["intent"] == "average"

    def test_chat_chart(self, loaded_client: TestClient) -> None:
        """Test chart data is passed through."""
        data = loaded_client.post(
            "/chat/",
            json={"messages": [{"role": "user", "content": "trend of revenue"}]},
        ).json()
        assert data["chart_type"] == "line"
        assert len(data["chart_data"]) == 10

    def test_chat_without_dataset(self, client: TestClient) -> None:
        """Test questions need a dataset."""
        response = client.post(
            "/chat/", json={"messages": [{"role": "user", "content": "average?"}]}
        )
        assert response.status_code == 404

    def test_chat_without_user_message(self, loaded_client: TestClient) -> None:
        """Test a conversation must contain a user message."""
        response = loaded_client.post(
            "/chat/", json={"messages": [{"role": "assistant", "content": "Hello!"}]}
        )
        assert response.status_code == 400

    def test_suggestions(self, loaded_client: TestClient) -> None:
        """Test example questions reference the current columns."""
        data = loaded_client.get("/chat/suggestions").json()
        assert "What's the average price?" in data["suggestions"]
        assert "Are there any outliers?" in data["suggestions"]
