from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, List, Mapping, Optional, Tuple


# One raw cell per digest column, in backend column order.
RawRow = Tuple[Any, ...]


@dataclass(frozen=True)
class Digest:
    """
    Ten-field summary of one reporting window.

    Every field is optional text. A Digest() built with no arguments is the
    all-absent default used when the backend could not be queried.
    """

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

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def __str__(self) -> str:
        parts = [f"{f.name}={getattr(self, f.name) or ''}" for f in fields(self)]
        return "Digest(" + ", ".join(parts) + ")"


@dataclass(frozen=True)
class DigestColumn:
    """Where a digest field lives in the backend row and how it is formatted."""

    index: int
    field_name: str
    kind: str  # "count" or "text"


DIGEST_COLUMNS: Tuple[DigestColumn, ...] = (
    DigestColumn(0, "total_requests", "count"),
    DigestColumn(1, "failed_requests", "count"),
    DigestColumn(2, "requests_duration", "text"),
    DigestColumn(3, "total_dependencies", "count"),
    DigestColumn(4, "failed_dependencies", "count"),
    DigestColumn(5, "dependencies_duration", "text"),
    DigestColumn(6, "total_views", "count"),
    DigestColumn(7, "total_exceptions", "count"),
    DigestColumn(8, "overall_availability", "text"),
    DigestColumn(9, "availability_duration", "text"),
)

ROW_WIDTH = len(DIGEST_COLUMNS)


def extract_raw_row(payload: Any) -> RawRow:
    """
    Decode `tables[0].rows[0]` from a query API response body.

    Missing tables, rows or cells become None; the result always has
    ROW_WIDTH cells.
    """
    cells: List[Any] = []
    if isinstance(payload, Mapping):
        tables = payload.get("tables")
        if isinstance(tables, list) and tables and isinstance(tables[0], Mapping):
            rows = tables[0].get("rows")
            if isinstance(rows, list) and rows and isinstance(rows[0], list):
                cells = list(rows[0][:ROW_WIDTH])

    cells.extend([None] * (ROW_WIDTH - len(cells)))
    return tuple(cells)


def format_count(value: Any) -> Optional[str]:
    """Format an integer-like cell as '1,234'. Non-numeric cells are absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError:
                return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = round(value)
    if not isinstance(value, int):
        return None
    return f"{value:,}"


def format_text(value: Any) -> Optional[str]:
    """Pass a backend-formatted cell through as text."""
    if value is None:
        return None
    return str(value)


def assemble_digest(row: RawRow) -> Digest:
    """Map a raw backend row onto a Digest. Never raises for odd row shapes."""
    if not isinstance(row, (list, tuple)):
        row = ()
    padded = tuple(row)[:ROW_WIDTH]
    padded = padded + (None,) * (ROW_WIDTH - len(padded))

    values = {}
    for column in DIGEST_COLUMNS:
        cell = padded[column.index]
        if column.kind == "count":
            values[column.field_name] = format_count(cell)
        else:
            values[column.field_name] = format_text(cell)
    return Digest(**values)
