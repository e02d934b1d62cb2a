from __future__ import annotations

import html
from dataclasses import fields
from typing import Optional

from digest import Digest


_REPORT_TEMPLATE = """
<html><body>
<p style='text-align: center;'><strong>{subject_name} daily telemetry report {date_label}</strong></p>
<p style='text-align: center;'>The following data shows insights based on telemetry from last 24 hours.</p>
<table align='center' style='width: 95%; max-width: 480px;'><tbody>
<tr>
<td style='min-width: 150px; text-align: left;'><strong>Total requests</strong></td>
<td style='min-width: 100px; text-align: right;'><strong>{total_requests}</strong></td>
</tr>
<tr>
<td style='min-width: 120px; padding-left: 5%; text-align: left;'>Failed requests</td>
<td style='min-width: 100px; text-align: right;'>{failed_requests}</td>
</tr>
<tr>
<td style='min-width: 120px; padding-left: 5%; text-align: left;'>Average response time</td>
<td style='min-width: 100px; text-align: right;'>{requests_duration} ms</td>
</tr>
<tr>
<td colspan='2'><hr /></td>
</tr>
<tr>
<td style='min-width: 150px; text-align: left;'><strong>Total dependencies</strong></td>
<td style='min-width: 100px; text-align: right;'><strong>{total_dependencies}</strong></td>
</tr>
<tr>
<td style='min-width: 120px; padding-left: 5%; text-align: left;'>Failed dependencies</td>
<td style='min-width: 100px; text-align: right;'>{failed_dependencies}</td>
</tr>
<tr>
<td style='min-width: 120px; padding-left: 5%; text-align: left;'>Average response time</td>
<td style='min-width: 100px; text-align: right;'>{dependencies_duration} ms</td>
</tr>
<tr>
<td colspan='2'><hr /></td>
</tr>
<tr>
<td style='min-width: 150px; text-align: left;'><strong>Total views</strong></td>
<td style='min-width: 100px; text-align: right;'><strong>{total_views}</strong></td>
</tr>
<tr>
<td style='min-width: 150px; text-align: left;'><strong>Total exceptions</strong></td>
<td style='min-width: 100px; text-align: right;'><strong>{total_exceptions}</strong></td>
</tr>
<tr>
<td colspan='2'><hr /></td>
</tr>
<tr>
<td style='min-width: 150px; text-align: left;'><strong>Overall Availability</strong></td>
<td style='min-width: 100px; text-align: right;'><strong>{overall_availability} %</strong></td>
</tr>
<tr>
<td style='min-width: 120px; padding-left: 5%; text-align: left;'>Average response time</td>
<td style='min-width: 100px; text-align: right;'>{availability_duration} ms</td>
</tr>
</tbody></table>
</body></html>
"""


def _cell(value: Optional[str]) -> str:
    """Escaped cell text; absent values render as an empty cell."""
    if value is None:
        return ""
    return html.escape(value)


def render_report_html(subject_name: str, date_label: str, digest: Digest) -> str:
    """Render the digest email body. Same inputs always give the same output."""
    values = {f.name: _cell(getattr(digest, f.name)) for f in fields(digest)}
    return _REPORT_TEMPLATE.format(
        subject_name=_cell(subject_name),
        date_label=_cell(date_label),
        **values,
    )
