"""
Reusable Excel cell/row formatting helpers.
"""
from __future__ import annotations

from typing import Iterable

from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from statewatch.excel.styles import (
    HEADER_FONT, HEADER_FILL, HEADER_BORDER,
    DATA_FONT, THIN_BORDER, ALTERNATE_FILL,
    CENTER, LEFT, RIGHT, WRAP,
)

NUMERIC_TYPES = ("currency", "number", "percent", "decimal")


# ---------------------------------------------------------------------------
# Header row
# ---------------------------------------------------------------------------

def format_header_row(ws: Worksheet, row_num: int, num_cols: int) -> None:
    """Apply header styling to an entire row."""
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=row_num, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER
        cell.border = HEADER_BORDER


# ---------------------------------------------------------------------------
# Data cell
# ---------------------------------------------------------------------------

def format_data_cell(ws: Worksheet, row_num: int, col_num: int, value, col_type: str = "text") -> None:
    """Write and format a single data cell.

    Numeric columns always hold numbers (missing → 0); every other column
    holds text (missing → "").
    """
    if col_type in NUMERIC_TYPES:
        value = 0 if value is None else value
    elif value is None:
        value = ""

    cell = ws.cell(row=row_num, column=col_num)
    cell.value = value
    cell.font = DATA_FONT
    cell.border = THIN_BORDER
    if col_type in NUMERIC_TYPES:
        cell.alignment = RIGHT
    elif col_type == "longtext":
        cell.alignment = WRAP
    else:
        cell.alignment = LEFT

    if col_type == "currency":
        cell.number_format = '#,##0.00'
    elif col_type == "percent":
        cell.number_format = '0.0"%"'
    elif col_type == "number":
        cell.number_format = "#,##0"
    elif col_type == "decimal":
        cell.number_format = "0.0"

    if row_num % 2 == 0:
        cell.fill = ALTERNATE_FILL


# ---------------------------------------------------------------------------
# Column widths
# ---------------------------------------------------------------------------

def set_column_widths(ws: Worksheet, widths: Iterable[float]) -> None:
    """Fixed width per column, in character units, starting at column A."""
    for col_num, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col_num)].width = width
