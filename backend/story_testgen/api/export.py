from fastapi import APIRouter
from fastapi.responses import Response

from story_testgen.schemas.testcase import ExportRequest
from story_testgen.utils.csv_exporter import cases_to_csv
from story_testgen.utils.excel_exporter import cases_to_excel
from story_testgen.utils.export_filename import content_disposition


router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(story_title: str, extension: str) -> dict:
    return {"Content-Disposition": content_disposition(story_title, extension)}


@router.post("/csv", summary="Download test cases as CSV")
async def export_csv(payload: ExportRequest) -> Response:
    content = cases_to_csv(payload.cases, payload.story_title)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers=_attachment(payload.story_title, "csv"),
    )


@router.post("/xlsx", summary="Download test cases as an Excel workbook")
async def export_xlsx(payload: ExportRequest) -> Response:
    content = cases_to_excel(payload.cases, payload.story_title)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers=_attachment(payload.story_title, "xlsx"),
    )
