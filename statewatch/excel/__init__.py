"""Excel styling, the workbook writer, and project import/export."""
from .styles import *
from .formatters import format_header_row, format_data_cell, set_column_widths
from .writer import (
    ExcelWriter, PROJECT_COLUMNS, XLSX_MEDIA_TYPE, build_projects_workbook, encode_projects, export_filename,
)
from .reader import read_project_rows
