"""Keyed persistence of concrete reports.

Reports are keyed by ``uniqueRefNo``. ``save`` is an upsert that places new
reports first; ``save_multiple`` overlays a batch onto the stored set, keeping
existing order and appending unseen keys. Media blobs live in their own rows,
encoded through a :class:`MediaCodec`, and are owned by their report.
"""

import logging
from collections.abc import Sequence

from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cubequality.models.report import ReportMedia, StoredReport
from cubequality.schemas.report import MEDIA_FIELDS, ConcreteReport
from cubequality.services.media import DataUrlMediaCodec, MediaCodec

logger = logging.getLogger(__name__)

READ_ERROR = "Could not read reports from the report store."
WRITE_ERROR = "Failed to write reports to the report store."


class StoreError(RuntimeError):
    pass


class ReportStore:
    def __init__(self, db: Session, codec: MediaCodec | None = None) -> None:
        self.db = db
        self.codec = codec or DataUrlMediaCodec()

    def get_all(self) -> list[ConcreteReport]:
        try:
            rows = self.db.scalars(select(StoredReport).order_by(StoredReport.position.asc())).all()
            return [self._to_report(row) for row in rows]
        except (SQLAlchemyError, ValidationError, ValueError) as exc:
            logger.exception("report_store_read_failed", extra={"error": str(exc)})
            raise StoreError(READ_ERROR) from exc

    def get(self, unique_ref_no: str) -> ConcreteReport | None:
        try:
            row = self.db.scalar(select(StoredReport).where(StoredReport.unique_ref_no == unique_ref_no))
            return self._to_report(row) if row else None
        except (SQLAlchemyError, ValidationError, ValueError) as exc:
            logger.exception("report_store_read_failed", extra={"unique_ref_no": unique_ref_no, "error": str(exc)})
            raise StoreError(READ_ERROR) from exc

    def unique_refs(self) -> list[str]:
        try:
            return list(self.db.scalars(select(StoredReport.unique_ref_no)).all())
        except SQLAlchemyError as exc:
            raise StoreError(READ_ERROR) from exc

    def save(self, report: ConcreteReport) -> None:
        try:
            row = self.db.scalar(select(StoredReport).where(StoredReport.unique_ref_no == report.unique_ref_no))
            if row is None:
                lowest = self.db.scalar(select(func.min(StoredReport.position)))
                row = StoredReport(unique_ref_no=report.unique_ref_no, position=(lowest or 0) - 1)
                self.db.add(row)
            self._fill(row, report)
            self.db.commit()
        except (SQLAlchemyError, ValueError) as exc:
            self.db.rollback()
            logger.exception("report_store_write_failed", extra={"unique_ref_no": report.unique_ref_no, "error": str(exc)})
            raise StoreError(WRITE_ERROR) from exc
        logger.info("report_saved", extra={"unique_ref_no": report.unique_ref_no})

    def save_multiple(self, reports: Sequence[ConcreteReport]) -> None:
        if not reports:
            return
        merged: dict[str, ConcreteReport] = {}
        for report in reports:
            merged[report.unique_ref_no] = report
        try:
            existing = {
                row.unique_ref_no: row
                for row in self.db.scalars(select(StoredReport).where(StoredReport.unique_ref_no.in_(list(merged)))).all()
            }
            highest = self.db.scalar(select(func.max(StoredReport.position)))
            next_position = (highest if highest is not None else -1) + 1
            for ref, report in merged.items():
                row = existing.get(ref)
                if row is None:
                    row = StoredReport(unique_ref_no=ref, position=next_position)
                    next_position += 1
                    self.db.add(row)
                self._fill(row, report)
            self.db.commit()
        except (SQLAlchemyError, ValueError) as exc:
            self.db.rollback()
            logger.exception("report_store_merge_failed", extra={"count": len(merged), "error": str(exc)})
            raise StoreError(WRITE_ERROR) from exc
        logger.info("reports_merged", extra={"count": len(merged), "inserted": len(merged) - len(existing)})

    def delete(self, unique_ref_no: str) -> bool:
        try:
            row = self.db.scalar(select(StoredReport).where(StoredReport.unique_ref_no == unique_ref_no))
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(WRITE_ERROR) from exc
        return True

    def _fill(self, row: StoredReport, report: ConcreteReport) -> None:
        row.payload = report.model_dump(mode="json", by_alias=True, exclude_none=True)
        row.timestamp = report.timestamp
        row.hash = report.hash
        current = {media.field: media for media in row.media}
        for attr in MEDIA_FIELDS:
            field = to_camel(attr)
            blob = getattr(report, attr)
            media = current.get(field)
            if blob is None:
                if media is not None:
                    row.media.remove(media)
                continue
            if media is None:
                media = ReportMedia(field=field, content_type=blob.content_type, token="")
                row.media.append(media)
            media.content_type = blob.content_type
            media.token = self.codec.encode(blob)

    def _to_report(self, row: StoredReport) -> ConcreteReport:
        report = ConcreteReport.model_validate(row.payload)
        updates = {}
        for attr in MEDIA_FIELDS:
            field = to_camel(attr)
            for media in row.media:
                if media.field == field:
                    updates[attr] = self.codec.decode(media.token)
        return report.model_copy(update=updates) if updates else report
