from __future__ import annotations

import csv
import io
from typing import Iterable, List

from story_testgen.schemas.testcase import TestCase

EXPORT_HEADERS: List[str] = [
    "Test Case ID",
    "Story Name",
    "Title",
    "Category",
    "Expected Result",
    "Steps",
    "Test Data",
]
STEP_SEPARATOR = " | "
MISSING_VALUE = "N/A"


def case_to_row(case: TestCase) -> List[str]:
    """Flatten one test case into the export column order."""
    return [
        case.id,
        case.story_name or MISSING_VALUE,
        case.title,
        case.category,
        case.expected_result,
        STEP_SEPARATOR.join(case.steps),
        case.test_data or MISSING_VALUE,
    ]


def export_rows(cases: Iterable[TestCase], story_title: str) -> List[List[str]]:
    """Title row, a blank row, the header row, then one row per case."""
    rows: List[List[str]] = [["Story Title", story_title], [], list(EXPORT_HEADERS)]
    rows.extend(case_to_row(case) for case in cases)
    return rows


def cases_to_csv(cases: Iterable[TestCase], story_title: str) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerows(export_rows(cases, story_title))
    return buf.getvalue()
