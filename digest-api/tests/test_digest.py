import pytest

from digest import (
    DIGEST_COLUMNS,
    ROW_WIDTH,
    Digest,
    assemble_digest,
    extract_raw_row,
    format_count,
)

from conftest import SAMPLE_ROW, query_response


def test_column_mapping_matches_backend_projection():
    assert [c.field_name for c in DIGEST_COLUMNS] == [
        "total_requests",
        "failed_requests",
        "requests_duration",
        "total_dependencies",
        "failed_dependencies",
        "dependencies_duration",
        "total_views",
        "total_exceptions",
        "overall_availability",
        "availability_duration",
    ]
    assert [c.index for c in DIGEST_COLUMNS] == list(range(ROW_WIDTH))


def test_assemble_full_row():
    digest = assemble_digest(tuple(SAMPLE_ROW))

    assert digest == Digest(
        total_requests="1,234",
        failed_requests="5",
        requests_duration="12.34",
        total_dependencies="2,000,000",
        failed_dependencies="0",
        dependencies_duration="------",
        total_views="17",
        total_exceptions="3",
        overall_availability="99.5",
        availability_duration="------",
    )
    assert not digest.is_empty


def test_zero_counts_are_present_not_absent():
    digest = assemble_digest((0, 0, None, 0, 0, None, 0, 0, None, None))
    assert digest.total_requests == "0"
    assert digest.requests_duration is None


@pytest.mark.parametrize(
    "row",
    [(), (1,), (None,) * 3, [1, 2], "not-a-row", None, (1,) * 25],
)
def test_odd_rows_never_raise(row):
    digest = assemble_digest(row)
    assert isinstance(digest, Digest)


def test_short_row_leaves_trailing_fields_absent():
    digest = assemble_digest((10, 1, "4.5"))
    assert digest.total_requests == "10"
    assert digest.requests_duration == "4.5"
    assert digest.total_dependencies is None
    assert digest.availability_duration is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (1234, "1,234"),
        (1234.0, "1,234"),
        ("12345678901234567891", "12,345,678,901,234,567,891"),
        ("12.6", "13"),
        ("98765", "98,765"),
        (None, None),
        (True, None),
        ("n/a", None),
        (float("nan"), None),
        ({"x": 1}, None),
    ],
)
def test_format_count(value, expected):
    assert format_count(value) == expected


def test_default_digest_is_all_absent():
    digest = Digest()
    assert digest.is_empty
    assert "total_requests=" in str(digest)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"tables": []},
        {"tables": [{"rows": []}]},
        {"tables": [{"rows": ["oops"]}]},
        [],
        None,
    ],
)
def test_extract_raw_row_tolerates_missing_structure(payload):
    assert extract_raw_row(payload) == (None,) * ROW_WIDTH


def test_extract_raw_row_pads_short_rows():
    row = extract_raw_row(query_response([1, 2]))
    assert row == (1, 2) + (None,) * (ROW_WIDTH - 2)


def test_extract_raw_row_reads_first_row():
    payload = query_response(SAMPLE_ROW)
    payload["tables"][0]["rows"].append([9] * ROW_WIDTH)
    assert extract_raw_row(payload) == tuple(SAMPLE_ROW)
