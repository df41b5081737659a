"""
Read project rows from an uploaded spreadsheet.
"""
from __future__ import annotations

import datetime as dt
import io

import numpy as np
import pandas as pd

_DATE_COLUMNS = ("start_date", "end_date")


def _cell(value):
    """Convert one pandas cell to a plain Python value (blank → None)."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and np.isnan(value):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def read_project_rows(content: bytes) -> list[dict]:
    """First sheet of an .xlsx file as one dict per data row, keyed by header."""
    df = pd.read_excel(io.BytesIO(content), sheet_name=0, engine="openpyxl")
    df.columns = [str(c).strip() for c in df.columns]
    rows = []
    for record in df.to_dict("records"):
        row = {key: _cell(value) for key, value in record.items()}
        for key in _DATE_COLUMNS:
            if isinstance(row.get(key), str):
                row[key] = row[key].strip()[:10]
        rows.append(row)
    return rows
