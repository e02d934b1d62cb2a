from __future__ import annotations

import logging
import os

from digest_pipeline import DigestPipeline
from report_config import load_report_config
from report_mailer import SendGridMailer, build_report_message, write_report_html


logger = logging.getLogger(__name__)


def main() -> None:
    """
    Entry point for scheduled runs: build the digest and email it.

    Configuration is read from environment variables (see report_config) plus:

    - REPORT_NAME: availability test name prefix (defaults to 'RBI').
    - REPORT_TO: comma-separated recipients (required unless dry run;
      read through report_config).
    - REPORT_DRY_RUN: if truthy (1, true, yes, on), print a summary and
      write the HTML report to disk without sending email.
    """
    logging.basicConfig(level=logging.INFO)

    config = load_report_config()
    name = os.environ.get("REPORT_NAME") or None
    dry_run_raw = os.environ.get("REPORT_DRY_RUN", "")
    dry_run = dry_run_raw.strip().lower() in {"1", "true", "yes", "on"}

    report = DigestPipeline(config).run(name)

    if dry_run:
        digest = report.digest
        print(f"Telemetry digest for {report.subject_name} ({report.date_label})")
        if report.degraded:
            print("  Telemetry query failed; the report is empty.")
        elif digest.is_empty:
            print("  No telemetry was returned; the report is empty.")
        print(
            f"  requests={digest.total_requests or ''}, "
            f"failed={digest.failed_requests or ''}, "
            f"avg={digest.requests_duration or ''} ms"
        )
        print(
            f"  dependencies={digest.total_dependencies or ''}, "
            f"failed={digest.failed_dependencies or ''}, "
            f"avg={digest.dependencies_duration or ''} ms"
        )
        print(
            f"  views={digest.total_views or ''}, "
            f"exceptions={digest.total_exceptions or ''}"
        )
        print(
            f"  availability={digest.overall_availability or ''} %, "
            f"avg={digest.availability_duration or ''} ms"
        )

        out_path = write_report_html(report)
        print(f"\nFull HTML report written to {out_path}")
        return

    message = build_report_message(report, config)
    SendGridMailer(config).send(message)
    logger.info(
        "main: report for %s sent to %d recipient(s).",
        report.subject_name,
        len(message.to_addresses),
    )


if __name__ == "__main__":
    main()
