"""Read-only warehouse queries behind the analytics endpoints.

Each function issues one statement filtered by a DateWindow and returns
either a DataFrame for the metric calculations or plain rows.
"""

import pandas as pd
from sqlalchemy import Select, case, desc, func, select
from sqlalchemy.orm import Session, aliased

from civic_warehouse.analytics.filters import DateWindow
from civic_warehouse.models.warehouse import (
    DimAuthority,
    DimCity,
    DimReportType,
    DimStatus,
    FactReport,
    FactStatusEvent,
)

PENDING_STATUSES = ("submitted", "verified", "in_progress")


def _to_frame(session: Session, query: Select) -> pd.DataFrame:
    result = session.execute(query)
    return pd.DataFrame(result.fetchall(), columns=list(result.keys()))


def _first_resolved_at():
    """Timestamp of the first 'resolved' status event of the outer report."""
    event_status = aliased(DimStatus)
    return (
        select(func.min(FactStatusEvent.event_timestamp))
        .join(event_status, FactStatusEvent.status_id == event_status.status_id)
        .where(
            FactStatusEvent.report_id == FactReport.report_id,
            event_status.name == "resolved",
        )
        .correlate(FactReport)
        .scalar_subquery()
    )


def extract_report_lifecycle(session: Session, window: DateWindow) -> pd.DataFrame:
    """One row per report: type, current status, agency, escalation, resolution time."""
    query = (
        select(
            FactReport.report_id,
            FactReport.created_at,
            DimStatus.name.label("current_status"),
            DimReportType.name.label("report_type"),
            DimAuthority.agency,
            FactReport.is_escalated,
            _first_resolved_at().label("resolved_at"),
        )
        .select_from(FactReport)
        .join(DimStatus, FactReport.current_status_id == DimStatus.status_id)
        .join(DimReportType, FactReport.report_type_id == DimReportType.report_type_id)
        .outerjoin(DimAuthority, FactReport.authority_id == DimAuthority.authority_id)
        .order_by(FactReport.created_at)
    )
    return _to_frame(session, window.apply(query, FactReport.created_at))


def extract_heatmap(session: Session, window: DateWindow) -> pd.DataFrame:
    query = (
        select(
            FactReport.report_id,
            FactReport.latitude,
            FactReport.longitude,
            DimReportType.name.label("report_type"),
            FactReport.upvote_count,
            DimCity.name.label("city_name"),
            DimCity.province,
        )
        .select_from(FactReport)
        .join(DimReportType, FactReport.report_type_id == DimReportType.report_type_id)
        .outerjoin(DimCity, FactReport.city_id == DimCity.city_id)
        .order_by(FactReport.created_at)
    )
    return _to_frame(session, window.apply(query, FactReport.created_at))


def extract_status_counts_by_type(session: Session, window: DateWindow) -> list[tuple[str, str, int]]:
    """(report_type, current_status, count) triples."""
    query = (
        select(
            DimReportType.name.label("report_type"),
            DimStatus.name.label("status"),
            func.count().label("report_count"),
        )
        .select_from(FactReport)
        .join(DimReportType, FactReport.report_type_id == DimReportType.report_type_id)
        .join(DimStatus, FactReport.current_status_id == DimStatus.status_id)
        .group_by(DimReportType.name, DimStatus.name)
    )
    rows = session.execute(window.apply(query, FactReport.created_at)).all()
    return [(row.report_type, row.status, int(row.report_count)) for row in rows]


def extract_overview_counts(session: Session, window: DateWindow) -> dict[str, int]:
    query = (
        select(
            func.count().label("total_reports"),
            func.count(case((DimStatus.name.in_(PENDING_STATUSES), 1))).label("pending_reports"),
            func.count(case((DimStatus.name == "resolved", 1))).label("resolved_reports"),
            func.count(case((FactReport.is_escalated.is_(True), 1))).label("escalated_reports"),
            func.count(case((DimStatus.name == "rejected", 1))).label("rejected_reports"),
        )
        .select_from(FactReport)
        .join(DimStatus, FactReport.current_status_id == DimStatus.status_id)
    )
    row = session.execute(window.apply(query, FactReport.created_at)).one()
    return {key: int(value or 0) for key, value in row._mapping.items()}


def extract_recent_reports(session: Session, limit: int = 10) -> list[dict]:
    query = (
        select(
            FactReport.report_id,
            FactReport.title,
            DimReportType.name.label("report_type"),
            DimStatus.name.label("status"),
            DimCity.name.label("city_name"),
            FactReport.upvote_count,
            FactReport.is_escalated,
            FactReport.created_at,
        )
        .select_from(FactReport)
        .join(DimReportType, FactReport.report_type_id == DimReportType.report_type_id)
        .join(DimStatus, FactReport.current_status_id == DimStatus.status_id)
        .outerjoin(DimCity, FactReport.city_id == DimCity.city_id)
        .order_by(desc(FactReport.created_at))
        .limit(limit)
    )
    return [
        {
            "id": str(row.report_id),
            "title": row.title,
            "type": row.report_type,
            "status": row.status,
            "city": row.city_name,
            "upvote_count": row.upvote_count,
            "is_escalated": bool(row.is_escalated),
            "created_at": row.created_at.isoformat(),
        }
        for row in session.execute(query).all()
    ]
