from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

import httpx

from digest import RawRow, extract_raw_row
from report_config import ReportConfig


logger = logging.getLogger(__name__)


# The query API interprets the query's own ago(1d) windows inside this span.
QUERY_TIMESPAN = "P1W"
CLIENT_APP_HEADER_VALUE = "FunctionTemplate"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one query API call: a decoded row, or an error message."""

    request_id: str
    row: Optional[RawRow] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.row is not None


class TelemetryClient:
    """
    Minimal client for the Application Insights query API.

    One GET per fetch(), no retries. Every failure is reported through the
    returned FetchResult instead of raising.
    """

    def __init__(
        self,
        config: ReportConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def query_url(self) -> str:
        return f"{self._config.telemetry_api_base}/{self._config.telemetry_app_id}/query"

    def fetch(self, query: str) -> FetchResult:
        request_id = str(uuid.uuid4())
        headers = {
            "x-api-key": self._config.telemetry_api_key,
            "x-ms-app": CLIENT_APP_HEADER_VALUE,
            "x-ms-client-request-id": request_id,
        }
        params = {
            "clientId": request_id,
            "timespan": QUERY_TIMESPAN,
            "query": query,
        }

        try:
            with httpx.Client(
                transport=self._transport,
                timeout=self._config.telemetry_timeout,
            ) as client:
                resp = client.get(self.query_url(), params=params, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "fetch: query API returned status=%s client_request_id=%s",
                exc.response.status_code,
                request_id,
            )
            return FetchResult(
                request_id=request_id,
                error=f"HTTP {exc.response.status_code}",
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning(
                "fetch: query API request failed client_request_id=%s: %s",
                request_id,
                exc,
            )
            return FetchResult(request_id=request_id, error=str(exc) or type(exc).__name__)
        except UnicodeEncodeError as exc:
            # Header values (the API key) must be ASCII.
            logger.warning(
                "fetch: could not build query API request client_request_id=%s: %s",
                request_id,
                exc,
            )
            return FetchResult(request_id=request_id, error="Invalid request headers")

        try:
            payload = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning(
                "fetch: query API returned a non-JSON body client_request_id=%s: %s",
                request_id,
                exc,
            )
            return FetchResult(request_id=request_id, error="Invalid JSON response")

        logger.info("fetch: query API call succeeded client_request_id=%s", request_id)
        return FetchResult(request_id=request_id, row=extract_raw_row(payload))
