from __future__ import annotations

"""
Kusto query for the telemetry digest.

The query joins five single-row summaries (requests, dependencies, page views,
exceptions, availability results) on a constant `Row = 1` column so that the
backend always answers with exactly one row of ten columns, in the order the
digest expects them.
"""

from typing import Optional


# Used when the caller does not pass an application / availability test name.
DEFAULT_REPORT_NAME = "RBI"

# Literal emitted by the query when an average is taken over an empty set.
NO_DATA_PLACEHOLDER = "------"


_DIGEST_QUERY_TEMPLATE = """
requests
| where timestamp > ago(1d)
| summarize Row = 1, TotalRequests = sum(itemCount), FailedRequests = sum(toint(success == 'False')),
    RequestsDuration = iff(isnan(avg(duration)), '{placeholder}', tostring(toint(avg(duration) * 100) / 100.0))
| join (
dependencies
| where timestamp > ago(1d)
| summarize Row = 1, TotalDependencies = sum(itemCount), FailedDependencies = sum(toint(success == 'False')),
    DependenciesDuration = iff(isnan(avg(duration)), '{placeholder}', tostring(toint(avg(duration) * 100) / 100.0))
) on Row | join (
pageViews
| where timestamp > ago(1d)
| summarize Row = 1, TotalViews = sum(itemCount)
) on Row | join (
exceptions
| where timestamp > ago(1d)
| summarize Row = 1, TotalExceptions = sum(itemCount)
) on Row | join (
availabilityResults
| where timestamp > ago(1d)
| where name startswith '{name}'
| summarize Row = 1, OverallAvailability = iff(isnan(avg(toint(success))), '{placeholder}', tostring(toint(avg(toint(success)) * 10000) / 100.0)),
    AvailabilityDuration = iff(isnan(avg(duration)), '{placeholder}', tostring(toint(avg(duration) * 100) / 100.0))
) on Row
| project TotalRequests, FailedRequests, RequestsDuration, TotalDependencies, FailedDependencies, DependenciesDuration, TotalViews, TotalExceptions, OverallAvailability, AvailabilityDuration"""


def resolve_report_name(name: Optional[str]) -> str:
    """Return the name to report on, falling back to DEFAULT_REPORT_NAME."""
    if not name:
        return DEFAULT_REPORT_NAME
    return name


def _kusto_string_literal_body(value: str) -> str:
    # Body of a single-quoted Kusto literal: backslash and quote are escaped.
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_digest_query(name: Optional[str]) -> str:
    """
    Build the digest query for the given availability test name prefix.

    Pure string construction: the same name always yields the same query.
    """
    return _DIGEST_QUERY_TEMPLATE.format(
        name=_kusto_string_literal_body(resolve_report_name(name)),
        placeholder=NO_DATA_PLACEHOLDER,
    )
