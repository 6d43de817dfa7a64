import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse

from cubequality.routers.deps import get_store, require_editor
from cubequality.schemas.spreadsheet import ImportResponse
from cubequality.services.spreadsheet import (
    SpreadsheetFormatError,
    export_reports_to_excel,
    export_template_to_excel,
    import_reports_from_excel,
)
from cubequality.services.spreadsheet.columns import REPORTS_FILENAME, TEMPLATE_FILENAME
from cubequality.services.store import ReportStore, StoreError
from cubequality.services.uploads import read_spreadsheet_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spreadsheets", tags=["spreadsheets"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/import", response_model=ImportResponse, dependencies=[Depends(require_editor)])
async def import_spreadsheet(file: UploadFile = File(...), store: ReportStore = Depends(get_store)) -> ImportResponse:
    data = await read_spreadsheet_upload(file)
    try:
        result = await import_reports_from_excel(data)
    except SpreadsheetFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    try:
        store.save_multiple(result.imported_reports)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    if result.errors:
        logger.warning("spreadsheet_import_partial", extra={"errors": len(result.errors)})
    return ImportResponse(
        imported=len(result.imported_reports),
        refs=[report.unique_ref_no for report in result.imported_reports],
        errors=result.errors,
    )


@router.get("/export")
def export_spreadsheet(store: ReportStore = Depends(get_store)) -> StreamingResponse:
    try:
        reports = store.get_all()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    buffer = export_reports_to_excel(reports)
    return _attachment(buffer, REPORTS_FILENAME)


@router.get("/template")
def download_template() -> StreamingResponse:
    return _attachment(export_template_to_excel(), TEMPLATE_FILENAME)


def _attachment(buffer, filename: str) -> StreamingResponse:
    return StreamingResponse(
        buffer,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
