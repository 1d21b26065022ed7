"""Batch orchestrator: report service -> warehouse.

Each report is ingested in its own transaction. A failing report is recorded
and the batch moves on, unless the pipeline runs in fail-fast mode.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from civic_warehouse.config import Settings, settings as default_settings
from civic_warehouse.db.store import Warehouse
from civic_warehouse.errors import UpstreamFetchFailure, WarehouseError
from civic_warehouse.etl.extractors.report_source import ReportSourceClient
from civic_warehouse.etl.loaders.reports import ReportLoader
from civic_warehouse.etl.state import mark_run_finished, mark_run_started

logger = logging.getLogger(__name__)


@dataclass
class FailedReport:
    report_id: str | None
    error: str


@dataclass
class BatchResult:
    batch_run_id: uuid.UUID
    succeeded: list[str] = field(default_factory=list)
    failed: list[FailedReport] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.succeeded)

    @property
    def status(self) -> str:
        if not self.failed:
            return "success"
        return "partial" if self.succeeded else "failed"

    def to_dict(self) -> dict:
        return {
            "batch_run_id": str(self.batch_run_id),
            "status": self.status,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": [{"report_id": f.report_id, "error": f.error} for f in self.failed],
        }


def _document_id(document: Any) -> str | None:
    if isinstance(document, dict) and document.get("report_id") is not None:
        return str(document["report_id"])
    return None


class IngestionPipeline:
    def __init__(
        self,
        warehouse: Warehouse,
        source: ReportSourceClient,
        loader: ReportLoader | None = None,
        fail_fast: bool = False,
    ):
        self.warehouse = warehouse
        self.source = source
        self.loader = loader or ReportLoader(warehouse)
        self.fail_fast = fail_fast

    def run_batch(self) -> BatchResult:
        """Fetch every report and ingest them one by one.

        Raises:
            UpstreamFetchFailure: the fetch failed; nothing was ingested.
            WarehouseError: only in fail-fast mode, for the first failing report.
        """
        start_time = datetime.now()
        with self.warehouse.transaction() as session:
            batch_run_id = mark_run_started(session)
        result = BatchResult(batch_run_id=batch_run_id)

        logger.info("=" * 60)
        logger.info(f"ETL BATCH START: {batch_run_id}")

        try:
            documents = self.source.list_reports()
        except UpstreamFetchFailure as e:
            logger.error(f"ETL batch aborted before ingestion: {e}")
            self._finish(result, error=str(e), status="failed")
            raise

        try:
            for document in documents:
                report_id = _document_id(document)
                try:
                    report = self.loader.ingest(document)
                except WarehouseError as e:
                    logger.error(f"Failed to ingest report {report_id}: {e}")
                    result.failed.append(FailedReport(report_id=report_id, error=str(e)))
                    if self.fail_fast:
                        raise
                    continue
                result.succeeded.append(str(report.report_id))
        except Exception as e:
            self._finish(result, error=str(e), status="failed")
            raise

        self._finish(result)
        duration = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"ETL BATCH END: processed={result.processed}, failed={len(result.failed)}, "
            f"duration={duration:.2f}s"
        )
        logger.info("=" * 60)
        return result

    def _finish(self, result: BatchResult, error: str | None = None, status: str | None = None) -> None:
        with self.warehouse.transaction() as session:
            mark_run_finished(
                session,
                result.batch_run_id,
                status=status or result.status,
                processed_count=result.processed,
                failed_count=len(result.failed),
                error_message=error,
            )


def create_pipeline(warehouse: Warehouse, config: Settings = default_settings) -> IngestionPipeline:
    """Wire a pipeline from settings."""
    source = ReportSourceClient(
        config.report_source_url,
        timeout=config.report_source_timeout_seconds,
    )
    loader = ReportLoader(
        warehouse,
        authority_policy=config.authority_conflict_policy,
        replay_safe_events=config.replay_safe_events,
    )
    return IngestionPipeline(warehouse, source, loader=loader, fail_fast=config.batch_fail_fast)
