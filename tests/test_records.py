from refund_split.diagnostics import Diagnostics
from refund_split.layout import locate_layout
from refund_split.records import code_at_column, extract_records, group_records, is_valid_code
from refund_split.types import Layout, Record

from conftest import HEADER, SCENARIO_ROWS, report_row


def _extract(rows, **kwargs):
    lines = ["Refund Report", HEADER] + list(rows)
    return extract_records(lines, locate_layout(lines), **kwargs)


def test_scenario_two_groups():
    records = _extract(SCENARIO_ROWS)
    assert [r.code for r in records] == ["481", "481", "552"]
    assert [r.raw_line for r in records] == SCENARIO_ROWS

    groups = group_records(records)
    assert list(groups) == ["481", "552"]
    assert groups["481"] == SCENARIO_ROWS[:2]
    assert groups["552"] == SCENARIO_ROWS[2:]


def test_code_followed_by_payment_marker():
    row = report_row("65", "S-1", "10/1/24", "$5.00", "BOB", "123", "X")
    assert [r.code for r in _extract([row])] == ["123"]


def test_misaligned_code_is_snapped_to_whole_token():
    layout = Layout(header_line_index=0, code_column_start=20, code_column_end=22)
    assert code_at_column("65  JOHN SMITH       481", layout) == "481"
    assert code_at_column("65  JOHN SMITH         481", layout) == "481"
    assert code_at_column("65  JOHN SMITH", layout) is None


def test_invalid_codes_are_skipped_and_traced():
    rows = [
        report_row("65", "S-1", "10/1/24", "$5.00", "BOB", "900"),
        report_row("65", "S-2", "10/1/24", "$5.00", "AL", "12"),
        report_row("65", "S-3", "10/1/24", "$5.00", "EVE", "ABC"),
        report_row("65", "S-4", "10/1/24", "$5.00", "JO", "700"),
    ]
    diag = Diagnostics(enabled=True)
    records = _extract(rows, diagnostics=diag)
    assert [r.code for r in records] == ["700"]
    skipped = [e for e in diag.events if e.message == "code invalide ignoré"]
    assert [e.data["candidate"] for e in skipped] == ["900", "12", "ABC"]


def test_range_can_be_disabled():
    row = report_row("65", "S-1", "10/1/24", "$5.00", "BOB", "900")
    assert [r.code for r in _extract([row], code_max=None)] == ["900"]


def test_end_of_table_marker_stops_extraction():
    rows = SCENARIO_ROWS[:1] + ["TOTAL                                         $200.50", SCENARIO_ROWS[2]]
    assert [r.code for r in _extract(rows)] == ["481"]


def test_organization_name_stops_extraction():
    rows = SCENARIO_ROWS[:2] + ["ACME Holdings LLC  123 Main St"] + SCENARIO_ROWS[2:]
    assert len(_extract(rows, organization="acme holdings")) == 2


def test_short_lines_do_not_count_toward_cap():
    rows = ["481", "x"] + SCENARIO_ROWS
    records = _extract(rows, cap=2)
    assert [r.raw_line for r in records] == SCENARIO_ROWS[:2]


def test_cap_limits_valid_rows():
    rows = SCENARIO_ROWS * 10
    assert len(_extract(rows)) == 20
    assert len(_extract(rows, cap=5)) == 5


def test_header_without_rows_yields_nothing():
    assert _extract([]) == []


def test_no_layout_yields_nothing_without_fallback():
    assert extract_records(SCENARIO_ROWS, None) == []


def test_fallback_reads_trailing_code():
    lines = ["Refund Report"] + SCENARIO_ROWS
    records = extract_records(lines, None, fallback_pattern=True)
    assert [r.code for r in records] == ["481", "481", "552"]


def test_group_records_counts_match():
    records = [Record(code=c, raw_line=f"line {i}") for i, c in enumerate(["001", "002", "001", "003", "002"])]
    groups = group_records(records)
    assert len(groups) == 3
    assert sum(len(v) for v in groups.values()) == len(records)
    assert groups["001"] == ["line 0", "line 2"]


def test_group_records_keeps_duplicate_lines():
    records = [Record(code="481", raw_line="same"), Record(code="481", raw_line="same")]
    assert group_records(records) == {"481": ["same", "same"]}


def test_is_valid_code():
    assert is_valid_code("000")
    assert is_valid_code("800")
    assert not is_valid_code("801")
    assert not is_valid_code("801", code_max=800)
    assert is_valid_code("999", code_max=None)
    assert not is_valid_code("4811")
    assert not is_valid_code(None)
