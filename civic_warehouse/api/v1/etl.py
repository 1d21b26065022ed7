"""Trigger an ETL batch over HTTP."""

import logging

from fastapi import APIRouter, Depends

from civic_warehouse.db.store import Warehouse
from civic_warehouse.db.warehouse_engine import get_warehouse_dependency
from civic_warehouse.etl.pipeline import IngestionPipeline, create_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/etl", tags=["ETL"])


def get_ingestion_pipeline(warehouse: Warehouse = Depends(get_warehouse_dependency)) -> IngestionPipeline:
    return create_pipeline(warehouse)


@router.post("/run")
def run_etl(pipeline: IngestionPipeline = Depends(get_ingestion_pipeline)):
    """Pull every report from the report service and load it.

    Per-report failures are listed under ``failed``; an unreachable report
    service returns 502.
    """
    result = pipeline.run_batch()
    logger.info(f"ETL run {result.batch_run_id} finished: {result.status}")
    return {"message": "ETL process finished", **result.to_dict()}
