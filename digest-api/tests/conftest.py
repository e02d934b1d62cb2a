from datetime import date
from typing import Any, Callable, Dict, List

import httpx
import pytest

from digest_pipeline import DigestPipeline
from report_config import ReportConfig
from telemetry_client import TelemetryClient


REPORT_DAY = date(2019, 4, 27)

SAMPLE_ROW: List[Any] = [1234, 5, "12.34", 2000000, 0, "------", 17, 3, "99.5", "------"]


def query_response(row: List[Any]) -> Dict[str, Any]:
    return {
        "tables": [
            {
                "name": "PrimaryResult",
                "columns": [],
                "rows": [row],
            }
        ]
    }


@pytest.fixture
def config() -> ReportConfig:
    return ReportConfig(
        telemetry_app_id="app-123",
        telemetry_api_key="ai-key",
        mail_api_key="sg-key",
        telemetry_api_base="https://api.example.test/v1/apps",
        from_address="reports@example.test",
        to_addresses=["ops@example.test"],
    )


@pytest.fixture
def seen_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_pipeline(config, seen_requests) -> Callable[..., DigestPipeline]:
    """Build a pipeline whose telemetry call is answered by `handler`."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> DigestPipeline:
        def _recording(request: httpx.Request) -> httpx.Response:
            seen_requests.append(request)
            return handler(request)

        client = TelemetryClient(config, transport=httpx.MockTransport(_recording))
        return DigestPipeline(config, client=client, clock=lambda: REPORT_DAY)

    return _make
