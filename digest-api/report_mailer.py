from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx

from digest_pipeline import DigestReport
from report_config import ReportConfig, ReportConfigError


logger = logging.getLogger(__name__)


class MailDeliveryError(RuntimeError):
    """Raised when the mail provider does not accept a message."""


@dataclass
class MailMessage:
    """Provider-neutral email handed to the mail transport."""

    subject: str
    from_address: str
    to_addresses: List[str] = field(default_factory=list)
    html_body: str = ""

    def to_sendgrid_payload(self) -> Dict[str, Any]:
        return {
            "personalizations": [
                {"to": [{"email": addr} for addr in self.to_addresses]}
            ],
            "from": {"email": self.from_address},
            "subject": self.subject,
            "content": [{"type": "text/html", "value": self.html_body}],
        }


def build_report_message(
    report: DigestReport,
    config: ReportConfig,
    to_addresses: Optional[List[str]] = None,
) -> MailMessage:
    """Wrap a rendered report into a MailMessage addressed per configuration."""
    recipients = list(to_addresses if to_addresses is not None else config.to_addresses)
    if not recipients:
        raise ReportConfigError(
            "No recipients configured. Set REPORT_TO to a comma-separated "
            "list of email addresses."
        )

    return MailMessage(
        subject=f"{report.subject_name} telemetry report ({report.date_label})",
        from_address=config.from_address,
        to_addresses=recipients,
        html_body=report.html,
    )


class SendGridMailer:
    """Sends MailMessages through the SendGrid v3 mail/send endpoint."""

    def __init__(
        self,
        config: ReportConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def send(self, message: MailMessage) -> None:
        headers = {"Authorization": f"Bearer {self._config.mail_api_key}"}
        try:
            with httpx.Client(transport=self._transport, timeout=10.0) as client:
                resp = client.post(
                    self._config.mail_api_url,
                    json=message.to_sendgrid_payload(),
                    headers=headers,
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("send: mail provider rejected message: %s", exc)
            raise MailDeliveryError(f"Failed to send report email: {exc}") from exc

        logger.info(
            "send: report email accepted subject=%s recipients=%d",
            message.subject,
            len(message.to_addresses),
        )


def report_filename(report: DigestReport) -> str:
    safe_name = re.sub(r"[^A-Za-z0-9_-]+", "_", report.subject_name).strip("_") or "report"
    return f"telemetry_report_{safe_name}_{report.report_date.isoformat()}.html"


def write_report_html(report: DigestReport, directory: Union[str, Path] = ".") -> Path:
    """Write the rendered report to disk instead of sending it (dry runs)."""
    out_path = Path(directory) / report_filename(report)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(report.html)
    return out_path
