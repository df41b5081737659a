from __future__ import annotations

import datetime as dt
import io

from openpyxl import load_workbook

from statewatch.excel import PROJECT_COLUMNS, encode_projects, export_filename, read_project_rows
from statewatch.projects import ProjectOut

UTC = dt.timezone.utc


def _project(**overrides) -> ProjectOut:
    data = {
        "id": "a" * 32,
        "name": "Loji Air Kuantan",
        "state_id": "pahang",
        "type": "machinery",
        "status": "planning",
        "start_date": dt.date(2024, 2, 1),
        "budget": 750000.0,
        "contractor": "Air Pahang Bhd",
        "description": "Pump replacement",
        "progress": 5.0,
        "created_at": dt.datetime(2024, 3, 5, 23, 59, tzinfo=UTC),
        "updated_at": dt.datetime(2024, 4, 1, 8, 30, tzinfo=UTC),
    }
    data.update(overrides)
    return ProjectOut(**data)


def _sheet(content: bytes):
    return load_workbook(io.BytesIO(content))["Projects"]


def test_empty_export_has_header_row_only() -> None:
    ws = _sheet(encode_projects([]))
    assert ws.max_row == 1
    assert [c.value for c in ws[1]] == [key for key, *_ in PROJECT_COLUMNS]


def test_rows_follow_given_order() -> None:
    ws = _sheet(encode_projects([_project(name="Second"), _project(name="First")]))
    assert ws.max_row == 3
    assert ws["A2"].value == "Second"
    assert ws["A3"].value == "First"


def test_cell_values() -> None:
    ws = _sheet(encode_projects([_project()]))
    row = {key: ws.cell(row=2, column=i).value for i, (key, *_) in enumerate(PROJECT_COLUMNS, 1)}

    assert row["type"] == "machinery"
    assert row["start_date"] == "2024-02-01"
    assert row["budget"] == 750000
    assert row["disbursed"] == 0
    assert row["created_at"] == "2024-03-05"
    assert row["updated_at"] == "2024-04-01"


def test_fixed_column_widths() -> None:
    ws = _sheet(encode_projects([_project()]))
    assert ws.column_dimensions["A"].width == 30
    assert ws.column_dimensions["B"].width == 15
    assert ws.column_dimensions["M"].width == 40


def test_export_filename_uses_calendar_date() -> None:
    assert export_filename(dt.date(2024, 3, 5)) == "projects_export_2024-03-05.xlsx"


def test_read_back_gives_plain_values() -> None:
    (row,) = read_project_rows(encode_projects([_project(officer="Aminah")]))
    assert row["name"] == "Loji Air Kuantan"
    assert row["officer"] == "Aminah"
    assert row["start_date"] == "2024-02-01"
    assert row["end_date"] is None
    assert row["budget"] == 750000
    assert type(row["budget"]) in (int, float)
