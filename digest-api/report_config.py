from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


DEFAULT_TELEMETRY_API_BASE = "https://api.applicationinsights.io/v1/apps"
DEFAULT_SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"
DEFAULT_FROM_EMAIL = "reports@example.com"


class ReportConfigError(RuntimeError):
    """Raised when report configuration values are malformed or incomplete."""


@dataclass(frozen=True)
class ReportConfig:
    """Secrets and settings for one telemetry digest process."""

    telemetry_app_id: str = ""
    telemetry_api_key: str = ""
    mail_api_key: str = ""
    telemetry_api_base: str = DEFAULT_TELEMETRY_API_BASE
    telemetry_timeout: float = 30.0
    mail_api_url: str = DEFAULT_SENDGRID_API_URL
    from_address: str = DEFAULT_FROM_EMAIL
    to_addresses: List[str] = field(default_factory=list)
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ReportConfigError(f"Unknown REPORT_TIMEZONE: {self.timezone!r}") from exc


def parse_recipients(raw: str) -> List[str]:
    """Split a comma-separated recipient list, dropping blanks."""
    return [addr.strip() for addr in (raw or "").split(",") if addr.strip()]


def config_from_env() -> ReportConfig:
    """
    Build a ReportConfig from environment variables.

    Secrets (not validated here; a missing one surfaces as an auth failure
    from the respective remote call):
    - AI_APP_ID
    - AI_APP_KEY
    - SENDGRID_API_KEY (or AzureWebJobsSendGridApiKey)

    Optional:
    - TELEMETRY_API_BASE, TELEMETRY_TIMEOUT (seconds, default 30)
    - SENDGRID_API_URL
    - REPORT_FROM_EMAIL, REPORT_TO (comma-separated)
    - REPORT_TIMEZONE (IANA name, default UTC)
    """
    app_id = os.getenv("AI_APP_ID", "")
    app_key = os.getenv("AI_APP_KEY", "")
    mail_key = os.getenv("SENDGRID_API_KEY") or os.getenv(
        "AzureWebJobsSendGridApiKey", ""
    )

    for name, value in [
        ("AI_APP_ID", app_id),
        ("AI_APP_KEY", app_key),
        ("SENDGRID_API_KEY", mail_key),
    ]:
        if not value:
            logger.warning("config_from_env: %s is not set.", name)

    timeout_raw = os.getenv("TELEMETRY_TIMEOUT", "30")
    try:
        timeout = float(timeout_raw)
    except ValueError as exc:
        raise ReportConfigError(
            f"TELEMETRY_TIMEOUT must be a number of seconds, got {timeout_raw!r}"
        ) from exc

    config = ReportConfig(
        telemetry_app_id=app_id,
        telemetry_api_key=app_key,
        mail_api_key=mail_key,
        telemetry_api_base=os.getenv("TELEMETRY_API_BASE", DEFAULT_TELEMETRY_API_BASE).rstrip("/"),
        telemetry_timeout=timeout,
        mail_api_url=os.getenv("SENDGRID_API_URL", DEFAULT_SENDGRID_API_URL),
        from_address=os.getenv("REPORT_FROM_EMAIL", DEFAULT_FROM_EMAIL),
        to_addresses=parse_recipients(os.getenv("REPORT_TO", "")),
        timezone=os.getenv("REPORT_TIMEZONE", "UTC"),
    )
    # Fail at startup rather than at first render.
    config.tzinfo
    return config


@lru_cache()
def load_report_config() -> ReportConfig:
    """Load `.env` once and return the process-wide configuration."""
    load_dotenv()
    return config_from_env()
