from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from digest import Digest, assemble_digest
from digest_query import build_digest_query, resolve_report_name
from report_config import ReportConfig
from report_html import render_report_html
from telemetry_client import TelemetryClient


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DigestReport:
    """Rendered output of one pipeline run, ready to be mailed."""

    subject_name: str
    report_date: date
    date_label: str
    digest: Digest
    html: str
    degraded: bool = False


def format_date_label(day: date) -> str:
    return day.strftime("%B %d, %Y")


class DigestPipeline:
    """
    Query -> fetch -> assemble -> render, once per run().

    A failed fetch is not an error here: the report is rendered from the
    all-absent Digest and flagged as degraded.
    """

    def __init__(
        self,
        config: ReportConfig,
        client: Optional[TelemetryClient] = None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self._config = config
        self._client = client or TelemetryClient(config)
        self._clock = clock or self._today

    def _today(self) -> date:
        return datetime.now(self._config.tzinfo).date()

    def run(self, name: Optional[str] = None) -> DigestReport:
        subject_name = resolve_report_name(name)
        query = build_digest_query(subject_name)

        result = self._client.fetch(query)
        if result.ok:
            digest = assemble_digest(result.row)
        else:
            logger.warning(
                "run: using empty digest for name=%s client_request_id=%s error=%s",
                subject_name,
                result.request_id,
                result.error,
            )
            digest = Digest()

        report_date = self._clock()
        date_label = format_date_label(report_date)
        return DigestReport(
            subject_name=subject_name,
            report_date=report_date,
            date_label=date_label,
            digest=digest,
            html=render_report_html(subject_name, date_label, digest),
            degraded=not result.ok,
        )
