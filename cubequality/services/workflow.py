"""Report workflow: form state, AI analysis, fingerprinting and persistence.

A submission either completes fully (analysis, timestamp and hash attached,
report saved) or leaves the store untouched and the form as the user left it.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from datetime import date

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from cubequality.schemas.report import (
    MEDIA_FIELDS,
    RESULT_FIELDS,
    Batch,
    ConcreteReport,
    MediaBlob,
    ReportAnalysis,
    media_attr,
)
from cubequality.services.dates import derive_test_dates, parse_date, utc_now_iso
from cubequality.services.hashing import calculate_sha256, canonical_report_string
from cubequality.services.llm import generate_quality_report
from cubequality.services.store import ReportStore, StoreError
from cubequality.services.strength import DEFAULT_CUBE_SIZE

logger = logging.getLogger(__name__)

ReportGenerator = Callable[[dict], str]

FORM_DEFAULTS = {"site_or_plant": "Site", "mix_type": "Standard", "cube_size": DEFAULT_CUBE_SIZE}
_ALIASES = {to_camel(name): name for name in ConcreteReport.model_fields}


class AnalysisError(RuntimeError):
    pass


class ReadOnlyError(PermissionError):
    pass


def next_unique_ref(existing_refs: Iterable[str], today: date) -> str:
    prefix = today.isoformat()
    count = sum(1 for ref in existing_refs if ref.startswith(prefix))
    return f"{prefix}-{count + 1}"


class ReportWorkflow:
    def __init__(
        self,
        store: ReportStore,
        form: ConcreteReport,
        generate_report: ReportGenerator | None = None,
        read_only: bool = False,
    ) -> None:
        self.store = store
        self.form = form
        self.generate_report = generate_report or generate_quality_report
        self.read_only = read_only
        self.report: ConcreteReport | None = form if form.analysis is not None else None
        self.error: str | None = None

    @classmethod
    def start_new(cls, store: ReportStore, today: date | None = None, **kwargs) -> "ReportWorkflow":
        try:
            ref = next_unique_ref(store.unique_refs(), today or date.today())
        except StoreError:
            logger.exception("unique_ref_generation_failed")
            ref = f"CQR-ERR-{int(time.time() * 1000)}"
        return cls(store, ConcreteReport(unique_ref_no=ref, **FORM_DEFAULTS), **kwargs)

    @classmethod
    def start_edit(cls, store: ReportStore, unique_ref_no: str, **kwargs) -> "ReportWorkflow":
        stored = store.get(unique_ref_no)
        if stored is None:
            raise LookupError(f"Report {unique_ref_no} not found")
        return cls(store, stored.model_copy(deep=True), **kwargs)

    def update_field(self, name: str, value: object) -> None:
        self.fill({name: value})

    def fill(self, fields: dict[str, object]) -> None:
        """Apply form edits; a casting date re-derives both target test dates."""
        data = self.form.model_dump()
        for name, value in fields.items():
            attr = _ALIASES.get(name, name)
            if attr not in ConcreteReport.model_fields or attr in MEDIA_FIELDS:
                raise ValueError(f"Unknown form field: {name}")
            if attr in RESULT_FIELDS:
                raise ValueError(f"{name} is set by analysis and cannot be edited")
            data[attr] = value
        casting = parse_date(data.get("date_of_casting"))
        if casting is not None and ("date_of_casting" in fields or "dateOfCasting" in fields):
            data["seven_days_test_date"], data["twenty_eight_days_test_date"] = derive_test_dates(casting)
        updated = ConcreteReport.model_validate(data)
        for attr in MEDIA_FIELDS:
            setattr(updated, attr, getattr(self.form, attr))
        self.form = updated

    def attach_media(self, batch: Batch, blob: MediaBlob) -> None:
        setattr(self.form, media_attr(batch), blob)

    def save_attachments(self) -> ConcreteReport:
        self._ensure_writable()
        self.store.save(self.form)
        return self.form

    async def submit(self) -> ConcreteReport:
        self._ensure_writable()
        self.error = None
        ref = self.form.unique_ref_no
        try:
            raw = await asyncio.to_thread(self.generate_report, self.form.form_fields())
            analysis = ReportAnalysis.model_validate_json(raw)
        except ValidationError as exc:
            raise self._fail("The AI response did not match the expected report structure.", ref, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._fail(
                "Failed to communicate with the AI service. Please ensure your API key is configured correctly.",
                ref,
                exc,
            ) from exc

        final = self.form.model_copy(update={"analysis": analysis, "timestamp": utc_now_iso(), "hash": None})
        try:
            final.hash = await calculate_sha256(canonical_report_string(final.business_fields()))
        except Exception as exc:  # noqa: BLE001
            raise self._fail("Could not compute the report verification hash.", ref, exc) from exc

        try:
            self.store.save(final)
        except StoreError as exc:
            self.error = str(exc)
            raise
        self.form = final
        self.report = final
        logger.info("report_analyzed", extra={"unique_ref_no": ref, "quality_score": analysis.quality_score})
        return final

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise ReadOnlyError("Reports cannot be saved in read-only mode.")

    def _fail(self, message: str, ref: str, exc: Exception) -> AnalysisError:
        self.error = message
        logger.warning("analysis_failed", extra={"unique_ref_no": ref, "error": str(exc)})
        return AnalysisError(message)
