"""FastAPI endpoints for the complaint dashboard.

Provides:
- Agency ranking and SLA compliance
- Resolution time per report type
- Report type and status distribution
- Heatmap points and clusters
- Escalation / rejection trend
- Overview counters and recent reports

All endpoints accept an optional ``startDate`` / ``endDate`` window on report
creation time (ISO date or datetime).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from civic_warehouse.analytics.filters import DateWindow
from civic_warehouse.analytics.service import AnalyticsService
from civic_warehouse.db.store import Warehouse
from civic_warehouse.db.warehouse_engine import get_warehouse_dependency

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics Dashboard"])


def get_analytics_service(warehouse: Warehouse = Depends(get_warehouse_dependency)) -> AnalyticsService:
    return AnalyticsService.from_settings(warehouse)


def get_date_window(
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
) -> DateWindow:
    """Raises InvalidDateWindow, mapped to HTTP 400 by the app."""
    return DateWindow.from_params(start_date, end_date)


Service = Annotated[AnalyticsService, Depends(get_analytics_service)]
Window = Annotated[DateWindow, Depends(get_date_window)]


# ===================================================================
# AGENCY PERFORMANCE
# ===================================================================


@router.get("/ranking")
def get_ranking(service: Service, window: Window):
    """Agencies ranked by score (0-100), best first.

    **Dashboard Usage**: Leaderboard table.
    """
    return service.ranking(window)


@router.get("/sla-compliance")
def get_sla_compliance(service: Service, window: Window):
    """Share of each agency's reports resolved within the SLA."""
    return service.sla_compliance(window)


@router.get("/mttr-by-type")
def get_mttr_by_type(service: Service, window: Window):
    """Mean time to resolution per report type, fastest first.

    **Dashboard Usage**: Horizontal bar chart.
    """
    return service.mttr_by_type(window)


# ===================================================================
# REPORT VOLUME
# ===================================================================


@router.get("/report-type-distribution")
def get_report_type_distribution(service: Service, window: Window):
    return service.report_type_distribution(window)


@router.get("/heatmap")
def get_heatmap(service: Service, window: Window):
    """Report locations and ~1 km clusters.

    **Dashboard Usage**: Map layer; `intensity` saturates at 10 upvotes.
    """
    return service.heatmap(window)


@router.get("/escalation")
def get_escalation(service: Service, window: Window):
    """Escalation and rejection rates with a monthly trend (oldest first)."""
    return service.escalation(window)


@router.get("/overview")
def get_overview(service: Service, window: Window):
    """Total, pending, resolved, escalated and rejected counts.

    **Dashboard Usage**: KPI cards.
    """
    return service.overview(window)


@router.get("/recent-reports")
def get_recent_reports(
    service: Service,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return service.recent_reports(limit)
