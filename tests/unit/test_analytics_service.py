"""Tests for the aggregation engine against a loaded SQLite warehouse."""
import pytest

from civic_warehouse.analytics.filters import DateWindow
from civic_warehouse.analytics.service import AnalyticsService
from civic_warehouse.etl.loaders.reports import ReportLoader


def resolved_report(report_factory, created_at, resolved_at, agency="Dinas Lingkungan Hidup", **overrides):
    return report_factory(
        created_at=created_at,
        status={"current": "resolved", "updated_at": resolved_at},
        timeline=[
            {"status": "submitted", "actor": {"actor_role": "citizen"}, "note": None, "timestamp": created_at},
            {"status": "resolved", "actor": {"actor_role": "officer"}, "note": "Selesai", "timestamp": resolved_at},
        ],
        authority={"assigned_agency": agency, "assigned_unit": None, "assigned_officer_id": None},
        **overrides,
    )


@pytest.fixture
def loaded(warehouse, report_factory):
    """Five reports across March and April 2024."""
    loader = ReportLoader(warehouse)
    # Resolved in 10 hours
    loader.ingest(resolved_report(report_factory, "2024-03-01T00:00:00Z", "2024-03-01T10:00:00Z"))
    # Resolved in 100 hours (SLA breach)
    loader.ingest(resolved_report(report_factory, "2024-03-05T00:00:00Z", "2024-03-09T04:00:00Z"))
    # Escalated, different agency and type
    loader.ingest(report_factory(
        type="kriminalitas",
        created_at="2024-03-10T00:00:00Z",
        status={"current": "escalated", "updated_at": "2024-03-12T00:00:00Z"},
        authority={"assigned_agency": "Polsek Kebayoran", "assigned_unit": None, "assigned_officer_id": None},
        escalation={
            "is_escalated": True,
            "escalated_to": "Polres",
            "escalation_reason": "Lambat",
            "escalated_at": "2024-03-12T00:00:00Z",
        },
        votes={"upvote_count": 20, "voters": []},
    ))
    # Rejected, unassigned, no coordinates
    loader.ingest(report_factory(
        created_at="2024-04-02T00:00:00Z",
        status={"current": "rejected", "updated_at": "2024-04-03T00:00:00Z"},
        authority={"assigned_agency": None, "assigned_unit": None, "assigned_officer_id": None},
        location={"latitude": None, "longitude": None, "address": None},
    ))
    # Pending
    loader.ingest(report_factory(
        created_at="2024-04-15T00:00:00Z",
        status={"current": "in_progress", "updated_at": "2024-04-16T00:00:00Z"},
    ))
    return AnalyticsService(warehouse)


class TestRanking:
    """Tests for AnalyticsService.ranking."""

    def test_agencies_ranked(self, loaded):
        response = loaded.ranking()
        ranking = response["data"]

        assert "updated_at" in response
        assert [entry["agency_name"] for entry in ranking] == ["Polsek Kebayoran", "Dinas Lingkungan Hidup"]
        dinas = ranking[1]
        assert dinas["total_reports"] == 3
        assert dinas["resolved_count"] == 2
        assert dinas["sla_breached_count"] == 1
        assert dinas["avg_resolution_time_hours"] == 55.0
        # 100 - (1/3*100)*0.3 - 55/72*20
        assert dinas["score"] == 75
        assert ranking[0]["score"] == 100

    def test_window_filters_reports(self, loaded):
        window = DateWindow.from_params("2024-04-01", "2024-04-30")
        ranking = loaded.ranking(window)["data"]
        assert [(entry["agency_name"], entry["total_reports"]) for entry in ranking] == [
            ("Dinas Lingkungan Hidup", 1)
        ]

    def test_empty_warehouse(self, warehouse):
        assert AnalyticsService(warehouse).ranking()["data"] == []


class TestOtherMetrics:
    """Tests for the remaining aggregation operations."""

    def test_sla_compliance(self, loaded):
        data = loaded.sla_compliance()["data"]
        assert data[0] == {
            "agency_name": "Polsek Kebayoran",
            "total_assigned": 1,
            "resolved_count": 0,
            "sla_breached_count": 0,
            "compliance_rate": 100.0,
        }
        assert data[1]["compliance_rate"] == 66.67

    def test_mttr_by_type(self, loaded):
        data = loaded.mttr_by_type()["data"]
        assert data[0]["report_type"] == "kebersihan"
        assert data[0]["avg_resolution_hours"] == 55.0
        assert data[1] == {
            "report_type": "kriminalitas",
            "avg_resolution_hours": None,
            "resolved_count": 0,
            "total_reports": 1,
        }

    def test_report_type_distribution(self, loaded):
        data = loaded.report_type_distribution()["data"]
        assert [entry["report_type"] for entry in data] == ["kebersihan", "kriminalitas"]
        assert data[0]["total"] == 4
        assert data[0]["status_counts"] == {
            "submitted": 0,
            "verified": 0,
            "in_progress": 1,
            "resolved": 2,
            "rejected": 1,
            "escalated": 0,
        }

    def test_heatmap_skips_reports_without_coordinates(self, loaded):
        heatmap = loaded.heatmap()
        assert len(heatmap["points"]) == 4
        # All located reports share the default Jakarta Selatan coordinates
        assert len(heatmap["clusters"]) == 1
        assert heatmap["clusters"][0]["count"] == 4
        assert heatmap["clusters"][0]["types"] == {"Kebersihan": 3, "Keamanan": 1}
        assert max(point["intensity"] for point in heatmap["points"]) == 1.0

    def test_escalation(self, loaded):
        result = loaded.escalation()
        assert result["stats"] == {
            "total_reports": 5,
            "total_escalated": 1,
            "total_rejected": 1,
            "escalation_rate": 20.0,
            "rejection_rate": 20.0,
        }
        assert [(trend["period"], trend["total"]) for trend in result["trends"]] == [("Mar", 3), ("Apr", 2)]

    def test_escalation_on_empty_window(self, loaded):
        window = DateWindow.from_params("2020-01-01", "2020-12-31")
        stats = loaded.escalation(window)["stats"]
        assert stats["escalation_rate"] == 0
        assert stats["rejection_rate"] == 0

    def test_overview(self, loaded):
        overview = loaded.overview()
        assert overview["total_reports"] == 5
        assert overview["pending_reports"] == 1
        assert overview["resolved_reports"] == 2
        assert overview["escalated_reports"] == 1
        assert overview["rejected_reports"] == 1
        assert "updated_at" in overview

    def test_overview_window_end_date_is_inclusive(self, loaded):
        window = DateWindow.from_params("2024-03-01", "2024-03-10")
        assert loaded.overview(window)["total_reports"] == 3

    def test_recent_reports(self, loaded):
        data = loaded.recent_reports(limit=2)["data"]
        assert len(data) == 2
        assert data[0]["status"] == "in_progress"
        assert data[1]["status"] == "rejected"
        assert data[1]["city"] is None
        assert data[0]["city"] == "Jakarta Selatan"
