import csv
import io

from openpyxl import load_workbook

from story_testgen.schemas.testcase import TestCase
from story_testgen.utils.csv_exporter import EXPORT_HEADERS, cases_to_csv, case_to_row
from story_testgen.utils.excel_exporter import COLUMN_WIDTHS, cases_to_excel
from story_testgen.utils.export_filename import content_disposition, export_filename, sanitize_filename

from conftest import make_case


def _case(**overrides) -> TestCase:
    return TestCase.model_validate(make_case(**overrides))


def test_row_joins_steps_and_fills_missing_values():
    row = case_to_row(_case(testData=None))
    assert row[0] == "TC-001"
    assert row[1] == "N/A"
    assert row[5] == "Open the login page | Enter valid email | Click login button"
    assert row[6] == "N/A"


def test_csv_layout_and_quoting():
    content = cases_to_csv([_case(title='Say "hi", then leave', storyName="Greeting")], "Greeting")
    rows = list(csv.reader(io.StringIO(content)))
    assert rows[0] == ["Story Title", "Greeting"]
    assert rows[1] == []
    assert rows[2] == EXPORT_HEADERS
    assert rows[3][1:3] == ["Greeting", 'Say "hi", then leave']


def test_excel_layout():
    data = cases_to_excel([_case(), _case(case_id="TC-002", category="Edge")], "Login")
    ws = load_workbook(io.BytesIO(data))["Test Cases"]
    assert [c.value for c in ws[3]] == EXPORT_HEADERS
    assert ws["B1"].value == "Login"
    assert ws["D5"].value == "Edge"
    assert ws["A3"].font.bold
    assert [ws.column_dimensions[col].width for col in "ABCDEFG"] == COLUMN_WIDTHS


def test_sanitize_filename():
    assert sanitize_filename('a/b\\c?d%e*f:g|h"i<j>k') == "abcdefghijk"
    assert sanitize_filename("  Login   page ") == "_Login_page_"
    assert len(sanitize_filename("x" * 300)) == 100


def test_export_filename_falls_back_for_empty_title():
    assert export_filename("Sign up", "xlsx") == "Sign_up_test_cases.xlsx"
    assert export_filename("???", ".csv") == "export_test_cases.csv"


def test_content_disposition_ascii_title_is_plain():
    assert content_disposition("Sign up", "csv") == 'attachment; filename="Sign_up_test_cases.csv"'


def test_content_disposition_non_ascii_title_has_encoded_name_and_fallback():
    value = content_disposition("Café Ω", "xlsx")
    assert value.startswith('attachment; filename="Caf_test_cases.xlsx"; ')
    assert value.endswith("filename*=UTF-8''Caf%C3%A9_%CE%A9_test_cases.xlsx")
    value.encode("latin-1")
