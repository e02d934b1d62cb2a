from __future__ import annotations

"""
HTTP trigger for the telemetry digest.

- `/api/RunIt` (GET or POST) builds the digest, emails it and acknowledges.
- `/api/digest` and `/api/digest/preview` build the digest without sending.
- `/health` is a liveness probe.
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import BaseModel

from digest_pipeline import DigestPipeline
from report_config import ReportConfig, ReportConfigError, load_report_config
from report_mailer import MailDeliveryError, SendGridMailer, build_report_message


# Use uvicorn.error logger so messages show up alongside the server logs.
logger = logging.getLogger("uvicorn.error")


class DigestDTO(BaseModel):
    subject_name: str
    date_label: str
    degraded: bool
    total_requests: Optional[str] = None
    failed_requests: Optional[str] = None
    requests_duration: Optional[str] = None
    total_dependencies: Optional[str] = None
    failed_dependencies: Optional[str] = None
    dependencies_duration: Optional[str] = None
    total_views: Optional[str] = None
    total_exceptions: Optional[str] = None
    overall_availability: Optional[str] = None
    availability_duration: Optional[str] = None


def get_report_config() -> ReportConfig:
    return load_report_config()


def get_pipeline(config: ReportConfig = Depends(get_report_config)) -> DigestPipeline:
    return DigestPipeline(config)


def get_mailer(config: ReportConfig = Depends(get_report_config)) -> SendGridMailer:
    return SendGridMailer(config)


app = FastAPI(title="Telemetry Digest")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.api_route("/api/RunIt", methods=["GET", "POST"], response_class=PlainTextResponse)
def run_it(
    name: Optional[str] = Query(default=None),
    config: ReportConfig = Depends(get_report_config),
    pipeline: DigestPipeline = Depends(get_pipeline),
    mailer: SendGridMailer = Depends(get_mailer),
) -> str:
    """
    Build the digest for `name` and email it.

    A telemetry outage still yields a 200 with an empty digest; only a mail
    delivery failure is reported as an error.
    """
    report = pipeline.run(name)
    logger.info(
        "run_it: digest built name=%s degraded=%s",
        report.subject_name,
        report.degraded,
    )

    try:
        message = build_report_message(report, config)
    except ReportConfigError as exc:
        logger.error("run_it: configuration error: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    try:
        mailer.send(message)
    except MailDeliveryError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return f"Running, {report.digest}"


@app.get("/api/digest", response_model=DigestDTO)
def get_digest(
    name: Optional[str] = Query(default=None),
    pipeline: DigestPipeline = Depends(get_pipeline),
) -> DigestDTO:
    report = pipeline.run(name)
    digest = report.digest
    return DigestDTO(
        subject_name=report.subject_name,
        date_label=report.date_label,
        degraded=report.degraded,
        total_requests=digest.total_requests,
        failed_requests=digest.failed_requests,
        requests_duration=digest.requests_duration,
        total_dependencies=digest.total_dependencies,
        failed_dependencies=digest.failed_dependencies,
        dependencies_duration=digest.dependencies_duration,
        total_views=digest.total_views,
        total_exceptions=digest.total_exceptions,
        overall_availability=digest.overall_availability,
        availability_duration=digest.availability_duration,
    )


@app.get("/api/digest/preview", response_class=HTMLResponse)
def preview_digest(
    name: Optional[str] = Query(default=None),
    pipeline: DigestPipeline = Depends(get_pipeline),
) -> str:
    return pipeline.run(name).html


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("report_api:app", reload=True)
