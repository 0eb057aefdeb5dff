from __future__ import annotations

import io
from typing import Iterable, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from story_testgen.schemas.testcase import TestCase
from story_testgen.utils.csv_exporter import export_rows

SHEET_NAME = "Test Cases"
HEADER_ROW = 3

# Test Case ID, Story Name, Title, Category, Expected Result, Steps, Test Data
COLUMN_WIDTHS: List[int] = [15, 25, 30, 15, 30, 50, 25]


def cases_to_excel(cases: Iterable[TestCase], story_title: str) -> bytes:
    """Render test cases as an .xlsx workbook and return the file bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    for row in export_rows(cases, story_title):
        ws.append(row)

    bold_font = Font(bold=True)
    ws.cell(row=1, column=1).font = bold_font
    for cell in ws[HEADER_ROW]:
        cell.font = bold_font

    wrap = Alignment(wrap_text=True, vertical="top")
    for row_cells in ws.iter_rows(min_row=HEADER_ROW + 1):
        for cell in row_cells:
            cell.alignment = wrap

    for col_idx, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
