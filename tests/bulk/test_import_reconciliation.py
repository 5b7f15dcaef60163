from __future__ import annotations

from threading import Event

import pytest

from src.hr_management.hr_management.bulk.excel import Sheet, read_sheet, write_sheet
from src.hr_management.hr_management.bulk.reconciliation import RowRejected, cell_decimal, cell_int, reconcile
from src.hr_management.hr_management.core.exceptions import ImportFailed, OperationCancelled, ValidationError


def _sheet(rows):
    return Sheet(columns=("name", "code"), rows=rows)


def test_failed_row_is_reported_and_others_persist():
    persisted = []

    def handler(row):
        if row["code"] == "BAD":
            raise ValidationError("Code is invalid")
        persisted.append(row["name"])
        return row["name"]

    rows = [{"name": f"Dept {i}", "code": "BAD" if i == 3 else f"D{i}"} for i in range(1, 6)]

    with pytest.raises(ImportFailed) as exc:
        reconcile(_sheet(rows), handler, required_columns=("name", "code"))

    assert exc.value.errors == {"Row 4": ["Code is invalid"]}
    assert persisted == ["Dept 1", "Dept 2", "Dept 4", "Dept 5"]


def test_row_can_report_several_messages():
    def handler(row):
        raise RowRejected(["First name is required.", "Invalid salary: 'abc'."])

    with pytest.raises(ImportFailed) as exc:
        reconcile(_sheet([{"name": "", "code": ""}]), handler)

    assert exc.value.errors == {"Row 2": ["First name is required.", "Invalid salary: 'abc'."]}


def test_unexpected_error_is_captured_per_row():
    def handler(row):
        raise RuntimeError("boom")

    with pytest.raises(ImportFailed) as exc:
        reconcile(_sheet([{"name": "a", "code": "b"}]), handler)

    assert exc.value.errors["Row 2"] == ["Unexpected error - boom"]


def test_missing_columns_fail_before_any_row():
    calls = []

    with pytest.raises(ImportFailed) as exc:
        reconcile(Sheet(columns=("name",), rows=[{"name": "x"}]), calls.append, required_columns=("name", "code"))

    assert list(exc.value.errors) == ["General"]
    assert calls == []


def test_cancellation_stops_between_rows():
    cancel = Event()
    handled = []

    def handler(row):
        handled.append(row["name"])
        cancel.set()
        return row

    with pytest.raises(OperationCancelled):
        reconcile(_sheet([{"name": "a", "code": "1"}, {"name": "b", "code": "2"}]), handler, cancel=cancel)

    assert handled == ["a"]


def test_workbook_roundtrip_lowercases_headers():
    content = write_sheet([{"Name": "Finance", "Code": "FIN"}], "Departments", columns=("Name", "Code"))

    sheet = read_sheet(content)

    assert sheet.columns == ("name", "code")
    assert sheet.rows == [{"name": "Finance", "code": "FIN"}]


def test_unreadable_workbook():
    with pytest.raises(ImportFailed) as exc:
        read_sheet(b"definitely not a workbook")

    assert "General" in exc.value.errors


@pytest.mark.parametrize("raw, expected", [("12", 12), ("12.0", 12), ("12.5", None), ("x", None), ("", None), ("inf", None)])
def test_cell_int(raw, expected):
    assert cell_int({"v": raw}, "v") == expected


def test_cell_decimal_rejects_nan():
    assert cell_decimal({"v": "NaN"}, "v") is None
