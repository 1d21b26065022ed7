"""Aggregation engine behind the analytics API.

Every method is a read: one session, one or two queries, no writes. Each
response carries ``updated_at``, the time the query ran.
"""

import logging
from datetime import datetime, timezone

from civic_warehouse.analytics import metrics, queries
from civic_warehouse.analytics.filters import DateWindow
from civic_warehouse.config import Settings, settings as default_settings
from civic_warehouse.db.store import Warehouse

logger = logging.getLogger(__name__)


def _updated_at() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnalyticsService:
    def __init__(
        self,
        warehouse: Warehouse,
        sla_hours: float = 72.0,
        escalation_query_months: int = 12,
        escalation_trend_months: int = 8,
    ):
        self.warehouse = warehouse
        self.sla_hours = sla_hours
        self.escalation_query_months = escalation_query_months
        self.escalation_trend_months = escalation_trend_months

    @classmethod
    def from_settings(cls, warehouse: Warehouse, config: Settings = default_settings) -> "AnalyticsService":
        return cls(
            warehouse,
            sla_hours=config.sla_hours,
            escalation_query_months=config.escalation_query_months,
            escalation_trend_months=config.escalation_trend_months,
        )

    def ranking(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            lifecycle = queries.extract_report_lifecycle(session, window)
        logger.debug(f"Ranking over {len(lifecycle)} reports")
        return {"data": metrics.calculate_ranking(lifecycle, self.sla_hours), "updated_at": _updated_at()}

    def sla_compliance(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            lifecycle = queries.extract_report_lifecycle(session, window)
        return {
            "data": metrics.calculate_sla_compliance(lifecycle, self.sla_hours),
            "sla_hours": self.sla_hours,
            "updated_at": _updated_at(),
        }

    def mttr_by_type(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            lifecycle = queries.extract_report_lifecycle(session, window)
        return {"data": metrics.calculate_mttr_by_type(lifecycle), "updated_at": _updated_at()}

    def report_type_distribution(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            counts = queries.extract_status_counts_by_type(session, window)
        return {"data": metrics.calculate_type_distribution(counts), "updated_at": _updated_at()}

    def heatmap(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            frame = queries.extract_heatmap(session, window)
        return {**metrics.calculate_heatmap(frame), "updated_at": _updated_at()}

    def escalation(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            lifecycle = queries.extract_report_lifecycle(session, window)
        result = metrics.calculate_escalation(
            lifecycle,
            query_months=self.escalation_query_months,
            trend_months=self.escalation_trend_months,
        )
        return {**result, "updated_at": _updated_at()}

    def overview(self, window: DateWindow = DateWindow()) -> dict:
        with self.warehouse.session() as session:
            counts = queries.extract_overview_counts(session, window)
        return {**counts, "updated_at": _updated_at()}

    def recent_reports(self, limit: int = 10) -> dict:
        with self.warehouse.session() as session:
            reports = queries.extract_recent_reports(session, limit)
        return {"data": reports, "updated_at": _updated_at()}
