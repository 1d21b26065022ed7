"""Tests for the FastAPI routers."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from civic_warehouse.api.main import create_app
from civic_warehouse.api.v1.etl import get_ingestion_pipeline
from civic_warehouse.db.warehouse_engine import get_warehouse_dependency
from civic_warehouse.errors import UpstreamFetchFailure
from civic_warehouse.etl.extractors.report_source import ReportSourceClient
from civic_warehouse.etl.loaders.reports import ReportLoader
from civic_warehouse.etl.pipeline import IngestionPipeline


@pytest.fixture
def app(warehouse):
    app = create_app()
    app.dependency_overrides[get_warehouse_dependency] = lambda: warehouse
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def use_source(app, warehouse, documents=None, error=None):
    source = MagicMock(spec=ReportSourceClient)
    if error is not None:
        source.list_reports.side_effect = error
    else:
        source.list_reports.return_value = documents or []
    app.dependency_overrides[get_ingestion_pipeline] = lambda: IngestionPipeline(warehouse, source)


class TestEtlRun:
    """Tests for POST /api/v1/etl/run."""

    def test_run_reports_batch_result(self, app, client, warehouse, report_factory):
        good = report_factory()
        bad = report_factory(type="banjir")
        use_source(app, warehouse, [good, bad])

        response = client.post("/api/v1/etl/run")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "ETL process finished"
        assert body["processed"] == 1
        assert body["status"] == "partial"
        assert body["succeeded"] == [good["report_id"]]
        assert body["failed"][0]["report_id"] == bad["report_id"]

    def test_upstream_failure_is_502(self, app, client, warehouse):
        use_source(app, warehouse, error=UpstreamFetchFailure("connection refused"))

        response = client.post("/api/v1/etl/run")

        assert response.status_code == 502
        assert response.json() == {
            "error": "Report service unavailable",
            "message": "connection refused",
        }

    def test_get_not_allowed(self, client):
        assert client.get("/api/v1/etl/run").status_code == 405


class TestAnalyticsEndpoints:
    """Tests for GET /api/v1/analytics/*."""

    @pytest.fixture(autouse=True)
    def _load(self, warehouse, report_factory):
        loader = ReportLoader(warehouse)
        loader.ingest(report_factory(created_at="2024-03-01T08:00:00Z"))
        loader.ingest(report_factory(
            created_at="2024-04-01T08:00:00Z",
            status={"current": "rejected", "updated_at": "2024-04-02T08:00:00Z"},
        ))

    @pytest.mark.parametrize("path", [
        "ranking",
        "heatmap",
        "escalation",
        "overview",
        "sla-compliance",
        "mttr-by-type",
        "report-type-distribution",
        "recent-reports",
    ])
    def test_endpoint_responds_with_timestamp(self, client, path):
        response = client.get(f"/api/v1/analytics/{path}")
        assert response.status_code == 200
        assert "updated_at" in response.json()

    def test_overview_window_params(self, client):
        response = client.get(
            "/api/v1/analytics/overview",
            params={"startDate": "2024-04-01", "endDate": "2024-04-30"},
        )
        body = response.json()
        assert body["total_reports"] == 1
        assert body["rejected_reports"] == 1

    def test_invalid_date_is_400(self, client):
        response = client.get("/api/v1/analytics/ranking", params={"startDate": "bukan-tanggal"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date window"

    def test_reversed_window_is_400(self, client):
        response = client.get(
            "/api/v1/analytics/escalation",
            params={"startDate": "2024-05-01", "endDate": "2024-04-01"},
        )
        assert response.status_code == 400

    def test_recent_reports_limit(self, client):
        response = client.get("/api/v1/analytics/recent-reports", params={"limit": 1})
        assert len(response.json()["data"]) == 1

    def test_recent_reports_limit_validated(self, client):
        assert client.get("/api/v1/analytics/recent-reports", params={"limit": 0}).status_code == 422

    def test_unexpected_failure_is_500(self, app):
        broken = MagicMock()
        broken.session.side_effect = RuntimeError("database is gone")
        app.dependency_overrides[get_warehouse_dependency] = lambda: broken

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/api/v1/analytics/overview")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "message": "database is gone"}
