"""FastAPI application: ETL trigger and dashboard analytics."""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from civic_warehouse.api.v1 import analytics, etl
from civic_warehouse.config import settings
from civic_warehouse.errors import InvalidDateWindow, UpstreamFetchFailure, WarehouseError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "message": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidDateWindow)
    async def invalid_date_window(request: Request, exc: InvalidDateWindow):
        return _error_response(400, "Invalid date window", exc)

    @app.exception_handler(UpstreamFetchFailure)
    async def upstream_failure(request: Request, exc: UpstreamFetchFailure):
        logger.error(f"Report service unavailable: {exc}")
        return _error_response(502, "Report service unavailable", exc)

    @app.exception_handler(WarehouseError)
    async def warehouse_failure(request: Request, exc: WarehouseError):
        logger.error(f"{request.url.path} failed: {exc}")
        return _error_response(500, "Warehouse request failed", exc)

    @app.exception_handler(Exception)
    async def unexpected_failure(request: Request, exc: Exception):
        logger.exception(f"{request.url.path} failed")
        return _error_response(500, "Internal server error", exc)


def create_app() -> FastAPI:
    app = FastAPI(title="Civic Complaint Warehouse", version="0.1.0")
    app.include_router(etl.router)
    app.include_router(analytics.router)
    register_exception_handlers(app)
    return app


app = create_app()


def run() -> None:
    logging.basicConfig(
        level=settings.api_log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
