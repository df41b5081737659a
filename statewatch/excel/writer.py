"""
ExcelWriter — styled workbook builder, and the projects export encoder.
"""
from __future__ import annotations

import datetime as dt
import io
from pathlib import Path
from typing import Iterable, Sequence

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from statewatch.excel.formatters import format_header_row, format_data_cell, set_column_widths
from statewatch.projects.schemas import ProjectOut


ColSpec = tuple[str, str, str, float]  # (key, col_type, label, width)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Header labels are the field keys so an exported sheet can be imported again.
PROJECT_COLUMNS: list[ColSpec] = [
    ("name", "text", "name", 30),
    ("state_id", "text", "state_id", 15),
    ("location", "text", "location", 20),
    ("branch", "text", "branch", 12),
    ("type", "text", "type", 12),
    ("status", "text", "status", 12),
    ("start_date", "text", "start_date", 12),
    ("end_date", "text", "end_date", 12),
    ("budget", "currency", "budget", 15),
    ("disbursed", "currency", "disbursed", 15),
    ("contractor", "text", "contractor", 20),
    ("officer", "text", "officer", 15),
    ("description", "longtext", "description", 40),
    ("progress", "decimal", "progress", 10),
    ("planned_progress", "decimal", "planned_progress", 15),
    ("created_at", "text", "created_at", 12),
    ("updated_at", "text", "updated_at", 12),
]


class ExcelWriter:
    """Fluent builder for styled Excel workbooks."""

    def __init__(self) -> None:
        self.wb = Workbook()
        self._first_sheet = True

    # ------------------------------------------------------------------
    # Sheet management
    # ------------------------------------------------------------------

    def add_sheet(self, title: str) -> Worksheet:
        """Create a new worksheet (re-uses the default sheet for the first call)."""
        if self._first_sheet:
            ws = self.wb.active
            ws.title = title
            self._first_sheet = False
        else:
            ws = self.wb.create_sheet(title=title)
        return ws

    # ------------------------------------------------------------------
    # Data tables
    # ------------------------------------------------------------------

    def write_table(
        self,
        ws: Worksheet,
        start_row: int,
        columns: Sequence[ColSpec],
        rows: Iterable[dict],
        freeze: bool = True,
    ) -> int:
        """Write headers + data rows with fixed column widths.

        Returns the row number after the last data row.
        """
        for col_num, (_, _, label, _) in enumerate(columns, 1):
            ws.cell(row=start_row, column=col_num).value = label
        format_header_row(ws, start_row, len(columns))

        row = start_row + 1
        for row_data in rows:
            for col_num, (key, col_type, _, _) in enumerate(columns, 1):
                format_data_cell(ws, row, col_num, row_data.get(key), col_type)
            row += 1

        set_column_widths(ws, [width for _, _, _, width in columns])
        if freeze:
            ws.freeze_panes = f"A{start_row + 1}"
        return row

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.wb.save(buffer)
        return buffer.getvalue()

    def save(self, path: str | Path) -> Path:
        """Save the workbook to disk."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(path)
        return path


# ---------------------------------------------------------------------------
# Projects export
# ---------------------------------------------------------------------------

def _calendar_date(value: dt.date | dt.datetime | None) -> str:
    if value is None:
        return ""
    if isinstance(value, dt.datetime):
        value = value.date()
    return value.isoformat()


def project_export_row(project: ProjectOut) -> dict:
    """Flatten a project into export cells: dates as YYYY-MM-DD text, numbers as numbers."""
    return {
        "name": project.name,
        "state_id": project.state_id,
        "location": project.location or "",
        "branch": project.branch or "",
        "type": project.type.value,
        "status": project.status.value,
        "start_date": _calendar_date(project.start_date),
        "end_date": _calendar_date(project.end_date),
        "budget": project.budget,
        "disbursed": project.disbursed or 0,
        "contractor": project.contractor,
        "officer": project.officer or "",
        "description": project.description,
        "progress": project.progress,
        "planned_progress": project.planned_progress,
        "created_at": _calendar_date(project.created_at),
        "updated_at": _calendar_date(project.updated_at),
    }


def build_projects_workbook(projects: Iterable[ProjectOut]) -> ExcelWriter:
    writer = ExcelWriter()
    ws = writer.add_sheet("Projects")
    writer.write_table(ws, 1, PROJECT_COLUMNS, (project_export_row(p) for p in projects))
    return writer


def encode_projects(projects: Iterable[ProjectOut]) -> bytes:
    """Encode every given project, in order, as an .xlsx workbook."""
    return build_projects_workbook(projects).to_bytes()


def export_filename(today: dt.date | None = None) -> str:
    today = today or dt.date.today()
    return f"projects_export_{today.isoformat()}.xlsx"
