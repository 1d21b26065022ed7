"""Load one raw report into the star schema.

All rows for a report are written in a single transaction: dimension
resolution, the report fact, the reporter bridge, and the timeline, media,
vote and escalation events either all commit or none do.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from civic_warehouse.config import AuthorityConflictPolicy
from civic_warehouse.db.store import Warehouse, insert_ignore
from civic_warehouse.etl.loaders.dimensions import DimensionResolver
from civic_warehouse.etl.transformers.raw_report import RawReport, parse_raw_report
from civic_warehouse.models.warehouse import (
    BridgeReportReporter,
    DimReporter,
    FactEscalationEvent,
    FactMediaEvent,
    FactReport,
    FactStatusEvent,
    FactVoteEvent,
)

logger = logging.getLogger(__name__)


def status_event_key(report: RawReport, status: str, timestamp: datetime) -> str:
    return f"{report.report_id}:{status}:{timestamp.isoformat()}"


def escalation_event_key(report: RawReport) -> str:
    escalated_at = report.escalation.escalated_at
    return f"{report.report_id}:{escalated_at.isoformat() if escalated_at else 'none'}"


class ReportLoader:
    """Ingestion engine for raw report documents.

    Args:
        warehouse: Store providing the transaction boundary.
        authority_policy: How to treat an agency that already has an
            authority row (see DimensionResolver.resolve_authority).
        replay_safe_events: When True, status and escalation events carry a
            natural key and replays are no-ops. When False they are appended
            on every ingestion, so a replay duplicates them.
    """

    def __init__(
        self,
        warehouse: Warehouse,
        authority_policy: AuthorityConflictPolicy = "lookup-existing",
        replay_safe_events: bool = True,
    ):
        self.warehouse = warehouse
        self.authority_policy = authority_policy
        self.replay_safe_events = replay_safe_events

    def ingest(self, document: Any) -> RawReport:
        """Parse and load one report. Returns the parsed report."""
        report = parse_raw_report(document)
        with self.warehouse.transaction() as session:
            self._load(session, report)
        logger.debug(f"Ingested report {report.report_id}")
        return report

    def _load(self, session: Session, report: RawReport) -> None:
        now = datetime.now(timezone.utc)
        dims = DimensionResolver(session)
        report_id = report.report_id

        # 1. Closed dimensions (fail fast)
        report_type_id = dims.report_type_id(report.type)
        visibility_id = dims.visibility_id(report.visibility)
        current_status_id = dims.status_id(report.status.current)

        # 2. City: exact name, then nearest centre
        location = report.location
        city_id = dims.resolve_city(location.city, location.latitude, location.longitude)

        # 3. Authority
        authority = report.authority
        authority_id = dims.resolve_authority(
            authority.assigned_agency,
            authority.assigned_unit,
            authority.assigned_officer_id,
            policy=self.authority_policy,
        )

        # 4. Reporter (never overwritten)
        insert_ignore(
            session,
            DimReporter,
            {"reporter_id": report.reporter.user_id, "name": report.reporter.name, "loaded_at": now},
        )

        # 5. Report fact
        insert_ignore(
            session,
            FactReport,
            {
                "report_id": report_id,
                "report_type_id": report_type_id,
                "visibility_id": visibility_id,
                "current_status_id": current_status_id,
                "authority_id": authority_id,
                "city_id": city_id,
                "title": report.title,
                "description": report.description,
                "latitude": location.latitude,
                "longitude": location.longitude,
                "address": location.address,
                "created_at": report.created_at,
                "upvote_count": report.votes.upvote_count,
                "is_escalated": report.escalation.is_escalated,
                "loaded_at": now,
            },
        )

        # 6. Bridge
        insert_ignore(
            session,
            BridgeReportReporter,
            {"report_id": report_id, "reporter_id": report.reporter.user_id},
        )

        # 7. Timeline
        for event in report.timeline:
            values = {
                "report_id": report_id,
                "status_id": dims.status_id(event.status),
                "actor_role_id": dims.actor_role_id(event.actor.actor_role),
                "actor_id": event.actor.actor_id,
                "note": event.note,
                "event_timestamp": event.timestamp,
                "event_key": None,
                "loaded_at": now,
            }
            if self.replay_safe_events:
                values["event_key"] = status_event_key(report, event.status, event.timestamp)
            insert_ignore(session, FactStatusEvent, values)

        # 8. Media
        for media in report.media:
            insert_ignore(
                session,
                FactMediaEvent,
                {
                    "media_id": media.media_id,
                    "report_id": report_id,
                    "media_type": media.type,
                    "uploaded_at": media.uploaded_at,
                },
            )

        # 9. Votes: one per voter per report
        for voter_id in report.votes.voters:
            insert_ignore(
                session,
                FactVoteEvent,
                {"report_id": report_id, "voter_id": voter_id, "voted_at": now},
            )

        # 10. Escalation
        escalation = report.escalation
        if escalation.is_escalated:
            insert_ignore(
                session,
                FactEscalationEvent,
                {
                    "report_id": report_id,
                    "escalated_to": escalation.escalated_to,
                    "reason": escalation.escalation_reason,
                    "escalated_at": escalation.escalated_at,
                    "event_key": escalation_event_key(report) if self.replay_safe_events else None,
                    "loaded_at": now,
                },
            )
