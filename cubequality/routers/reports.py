from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from pydantic.alias_generators import to_camel

from cubequality.routers.deps import get_store, is_read_only, require_editor
from cubequality.schemas.dashboard import DashboardSummary
from cubequality.schemas.report import (
    MEDIA_FIELDS,
    Batch,
    ConcreteReport,
    MediaInfo,
    ReportFormData,
    ReportListItem,
    VerificationResult,
    media_attr,
)
from cubequality.services.dashboard import summarize_reports
from cubequality.services.dates import parse_instant
from cubequality.services.hashing import report_fingerprint, verify_report
from cubequality.services.store import ReportStore, StoreError
from cubequality.services.strength import report_results
from cubequality.services.uploads import read_media_upload
from cubequality.services.workflow import AnalysisError, ReadOnlyError, ReportWorkflow

router = APIRouter(prefix="/reports", tags=["reports"])

BATCHES: dict[str, Batch] = {"seven-days": "seven", "twenty-eight-days": "twentyEight"}
SEARCH_FIELDS = ("unique_ref_no", "client_name", "grade", "mix_code")
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@router.get("", response_model=list[ReportListItem])
def list_reports(q: str | None = Query(default=None), store: ReportStore = Depends(get_store)) -> list[ReportListItem]:
    reports = _load_all(store)
    if q and q.strip():
        needle = q.strip().lower()
        reports = [
            report
            for report in reports
            if any(needle in (getattr(report, name) or "").lower() for name in SEARCH_FIELDS)
        ]
    reports.sort(key=lambda report: parse_instant(report.timestamp) or _OLDEST, reverse=True)
    return [
        ReportListItem(
            unique_ref_no=report.unique_ref_no,
            client_name=report.client_name,
            date_of_casting=report.date_of_casting,
            grade=report.grade,
            mix_code=report.mix_code,
            seven_days_average_strength=report_results(report, "seven").average_strength,
            twenty_eight_days_average_strength=report_results(report, "twentyEight").average_strength,
            quality_score=report.analysis.quality_score if report.analysis else None,
            timestamp=report.timestamp,
            hash=report.hash,
        )
        for report in reports
    ]


@router.get("/summary", response_model=DashboardSummary)
def get_summary(store: ReportStore = Depends(get_store)) -> DashboardSummary:
    return summarize_reports(_load_all(store))


@router.post("/draft", response_model=ConcreteReport, dependencies=[Depends(require_editor)])
def create_draft(store: ReportStore = Depends(get_store)) -> ConcreteReport:
    return ReportWorkflow.start_new(store).form


@router.post("/analyze", response_model=ConcreteReport)
async def analyze_report(
    payload: ReportFormData,
    store: ReportStore = Depends(get_store),
    read_only: bool = Depends(is_read_only),
) -> ConcreteReport:
    try:
        if store.get(payload.unique_ref_no) is not None:
            workflow = ReportWorkflow.start_edit(store, payload.unique_ref_no, read_only=read_only)
        else:
            workflow = ReportWorkflow(store, ConcreteReport(unique_ref_no=payload.unique_ref_no), read_only=read_only)
        workflow.fill(payload.model_dump(exclude_unset=True, exclude=set(MEDIA_FIELDS)))
        return await workflow.submit()
    except ReadOnlyError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except AnalysisError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.get("/{unique_ref_no}", response_model=ConcreteReport)
def get_report(unique_ref_no: str, store: ReportStore = Depends(get_store)) -> ConcreteReport:
    return _load_one(store, unique_ref_no)


@router.delete("/{unique_ref_no}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_editor)])
def delete_report(unique_ref_no: str, store: ReportStore = Depends(get_store)) -> None:
    try:
        deleted = store.delete(unique_ref_no)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return None


@router.get("/{unique_ref_no}/verify", response_model=VerificationResult)
def verify(unique_ref_no: str, store: ReportStore = Depends(get_store)) -> VerificationResult:
    report = _load_one(store, unique_ref_no)
    return VerificationResult(
        unique_ref_no=report.unique_ref_no,
        stored_hash=report.hash,
        computed_hash=report_fingerprint(report),
        verified=verify_report(report),
    )


@router.put("/{unique_ref_no}/media/{batch}", response_model=MediaInfo, dependencies=[Depends(require_editor)])
async def upload_media(
    unique_ref_no: str,
    batch: str,
    file: UploadFile = File(...),
    store: ReportStore = Depends(get_store),
) -> MediaInfo:
    batch_key = _batch(batch)
    blob = await read_media_upload(file)
    try:
        workflow = ReportWorkflow.start_edit(store, unique_ref_no)
        workflow.attach_media(batch_key, blob)
        workflow.save_attachments()
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found") from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return MediaInfo(
        unique_ref_no=unique_ref_no,
        field=to_camel(media_attr(batch_key)),
        content_type=blob.content_type,
        size=len(blob.data),
    )


@router.get("/{unique_ref_no}/media/{batch}")
def download_media(unique_ref_no: str, batch: str, store: ReportStore = Depends(get_store)) -> Response:
    batch_key = _batch(batch)
    blob = _load_one(store, unique_ref_no).media(batch_key)
    if blob is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No media attached")
    return Response(content=blob.data, media_type=blob.content_type)


def _batch(value: str) -> Batch:
    batch = BATCHES.get(value)
    if batch is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown test batch")
    return batch


def _load_all(store: ReportStore) -> list[ConcreteReport]:
    try:
        return store.get_all()
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc


def _load_one(store: ReportStore, unique_ref_no: str) -> ConcreteReport:
    try:
        report = store.get(unique_ref_no)
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report
