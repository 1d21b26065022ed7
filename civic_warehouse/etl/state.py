"""ETL batch-run tracking."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from civic_warehouse.models.warehouse import EtlBatchRun


def mark_run_started(session: Session) -> uuid.UUID:
    """Record that a batch run has started; returns its id."""
    batch_run_id = uuid.uuid4()
    session.add(
        EtlBatchRun(
            batch_run_id=batch_run_id,
            started_at=datetime.now(timezone.utc),
            status="in_progress",
            processed_count=0,
            failed_count=0,
        )
    )
    return batch_run_id


def mark_run_finished(
    session: Session,
    batch_run_id: uuid.UUID,
    status: str,
    processed_count: int,
    failed_count: int = 0,
    error_message: str | None = None,
) -> None:
    """Close a batch run with its final status and counts."""
    session.execute(
        update(EtlBatchRun)
        .where(EtlBatchRun.batch_run_id == batch_run_id)
        .values(
            completed_at=datetime.now(timezone.utc),
            status=status,
            processed_count=processed_count,
            failed_count=failed_count,
            error_message=error_message,
        )
    )
