"""Extractor for the upstream report service.

One bulk pull per batch run; no pagination and no retries.
"""

import logging

import requests

from civic_warehouse.errors import UpstreamFetchFailure

logger = logging.getLogger(__name__)


class ReportSourceClient:
    """Fetch the full report collection from the report service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def list_reports(self) -> list[dict]:
        """Return the raw report documents.

        Raises:
            UpstreamFetchFailure: transport error, non-2xx status, or a body
                that is not a list of documents.
        """
        url = f"{self.base_url}/reports/list"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise UpstreamFetchFailure(f"Failed to fetch reports from report service: {e}") from e
        except ValueError as e:
            raise UpstreamFetchFailure(f"Report service returned invalid JSON: {e}") from e

        if isinstance(body, dict) and isinstance(body.get("data"), list):
            body = body["data"]
        if not isinstance(body, list):
            raise UpstreamFetchFailure(
                f"Report service returned {type(body).__name__}, expected a list"
            )

        logger.info(f"Fetched {len(body)} reports from {url}")
        return body
