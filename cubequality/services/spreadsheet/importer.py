"""Spreadsheet import of concrete reports.

The first sheet is read as header -> value rows. Headers are matched
case-insensitively against alias lists so workbooks produced by older tools
with renamed columns still import. A bad row is reported and skipped; only an
unreadable workbook fails the whole import.
"""

import asyncio
import logging
import math
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from cubequality.schemas.report import ConcreteReport, ReportAnalysis, TestResults, normalize_status
from cubequality.services.dates import derive_test_dates, parse_date, parse_instant, to_iso_instant
from cubequality.services.hashing import report_fingerprint
from cubequality.services.spreadsheet import columns
from cubequality.services.strength import DEFAULT_CUBE_SIZE, safe_float

logger = logging.getLogger(__name__)

Row = dict[str, object]


class SpreadsheetFormatError(ValueError):
    pass


class MissingIdentifierError(ValueError):
    pass


@dataclass(slots=True)
class ImportResult:
    imported_reports: list[ConcreteReport] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


async def import_reports_from_excel(data: bytes) -> ImportResult:
    return await asyncio.to_thread(parse_reports_workbook, data)


def parse_reports_workbook(data: bytes) -> ImportResult:
    if not data:
        raise SpreadsheetFormatError("File is empty or could not be read.")
    try:
        workbook = load_workbook(BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        logger.warning("spreadsheet_unreadable", extra={"error": str(exc)})
        raise SpreadsheetFormatError("The file is corrupted or not in the expected Excel format.") from exc

    try:
        if not workbook.worksheets:
            raise SpreadsheetFormatError("The workbook does not contain any sheets.")
        # read-only sheets are parsed lazily, so damaged sheet XML only surfaces here
        rows = list(workbook.worksheets[0].iter_rows(values_only=True))
    except (SyntaxError, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        logger.warning("spreadsheet_unreadable", extra={"error": str(exc)})
        raise SpreadsheetFormatError("The file is corrupted or not in the expected Excel format.") from exc
    finally:
        workbook.close()

    result = ImportResult()
    header_index = _find_header_row(rows)
    if header_index is None:
        return result

    headers = [_normalize_header(cell) for cell in rows[header_index]]
    first_data_row = header_index + 2
    for row_number, values in enumerate(rows[header_index + 1 :], start=first_data_row):
        row = _row_mapping(headers, values)
        if all(value is None for value in row.values()):
            continue
        try:
            report = _build_report(row)
        except MissingIdentifierError:
            result.errors.append(
                f"Skipping row {row_number}: Missing a unique identifier column (e.g., 'Unique Ref. No.', 'Ticket No.', 'ID')."
            )
            continue
        except Exception as exc:  # noqa: BLE001
            logger.warning("report_import_row_failed", extra={"row_number": row_number, "error": str(exc)})
            result.errors.append(f"Error processing row {row_number}: {exc}")
            continue
        result.imported_reports.append(report)

    logger.info(
        "reports_workbook_parsed",
        extra={"imported": len(result.imported_reports), "errors": len(result.errors)},
    )
    return result


def find_value(row: Row, aliases: Iterable[str]) -> object:
    """Value of the first alias present in the row with a non-empty cell."""
    for alias in aliases:
        value = row.get(alias)
        if value is not None:
            return value
    return None


def _build_report(row: Row) -> ConcreteReport:
    ref_value = find_value(row, columns.UNIQUE_REF_ALIASES)
    if ref_value is None:
        raise MissingIdentifierError
    fields: dict[str, object] = {"unique_ref_no": _cell_text(ref_value)}

    for attr, aliases in columns.TEXT_FIELDS.items():
        fields[attr] = _text(row, aliases)

    site = _text(row, columns.SITE_OR_PLANT_ALIASES, "Site")
    fields["site_or_plant"] = "Plant" if site.lower() == "plant" else "Site"
    mix_type = _text(row, columns.MIX_TYPE_ALIASES, "Standard")
    fields["mix_type"] = "Customer" if mix_type.lower() == "customer" else "Standard"
    fields["cube_size"] = _text(row, columns.CUBE_SIZE_ALIASES, DEFAULT_CUBE_SIZE)

    fields["date_of_casting"] = ""
    fields["seven_days_test_date"] = ""
    fields["twenty_eight_days_test_date"] = ""
    casting = parse_date(find_value(row, columns.CASTING_DATE_ALIASES))
    if casting is not None:
        fields["date_of_casting"] = casting.isoformat()
        fields["seven_days_test_date"], fields["twenty_eight_days_test_date"] = derive_test_dates(casting)

    analysis = _build_analysis(row)
    if analysis is not None:
        fields["analysis"] = analysis

    report = ConcreteReport(**fields)

    generated_at = parse_instant(find_value(row, columns.GENERATED_AT_ALIASES))
    if generated_at is not None:
        supplied_hash = _text(row, columns.HASH_ALIASES)
        report.timestamp = to_iso_instant(generated_at)
        report.hash = supplied_hash or report_fingerprint(report)
    return report


def _build_analysis(row: Row) -> ReportAnalysis | None:
    score = find_value(row, columns.QUALITY_SCORE_ALIASES)
    if score is None or _cell_text(score) == columns.NOT_AVAILABLE:
        return None
    return ReportAnalysis(
        summary=_text(row, columns.SUMMARY_ALIASES),
        quality_score=math.floor(safe_float(score) + 0.5),
        seven_days_results=TestResults(
            strengths=[],
            average_strength=safe_float(find_value(row, columns.SEVEN_DAY_AVERAGE_ALIASES)),
            status=normalize_status(find_value(row, columns.SEVEN_DAY_STATUS_ALIASES)),
        ),
        twenty_eight_days_results=TestResults(
            strengths=[],
            average_strength=safe_float(find_value(row, columns.TWENTY_EIGHT_DAY_AVERAGE_ALIASES)),
            status=normalize_status(find_value(row, columns.TWENTY_EIGHT_DAY_STATUS_ALIASES)),
        ),
        issues=_split_list(find_value(row, columns.ISSUES_ALIASES)),
        recommendations=_split_list(find_value(row, columns.RECOMMENDATIONS_ALIASES)),
    )


def _split_list(value: object) -> list[str]:
    text = _cell_text(value) if value is not None else ""
    if not text or text == columns.EMPTY_LIST:
        return []
    return text.split(columns.LIST_DELIMITER)


def _text(row: Row, aliases: Iterable[str], default: str = "") -> str:
    value = find_value(row, aliases)
    return default if value is None else _cell_text(value)


def _cell_text(value: object) -> str:
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _find_header_row(rows: list[tuple]) -> int | None:
    """Index of the header row: the first row naming a known column, else the first non-empty row."""
    first_non_empty = None
    for index, values in enumerate(rows):
        headers = {_normalize_header(cell) for cell in values}
        if headers & columns.KNOWN_HEADERS:
            return index
        if first_non_empty is None and any(headers - {""}):
            first_non_empty = index
    return first_non_empty


def _normalize_header(cell: object) -> str:
    return str(cell).strip().lower() if cell is not None else ""


def _row_mapping(headers: list[str], values: tuple) -> Row:
    row: Row = {}
    for header, value in zip(headers, values):
        if not header or header in row:
            continue
        if isinstance(value, str) and not value.strip():
            value = None
        row[header] = value
    return row
