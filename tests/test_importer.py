import asyncio
import zipfile
from datetime import datetime
from io import BytesIO

import pytest
from openpyxl import Workbook

from cubequality.services.hashing import report_fingerprint
from cubequality.services.spreadsheet import SpreadsheetFormatError, import_reports_from_excel, parse_reports_workbook
from cubequality.services.spreadsheet import importer
from cubequality.services.spreadsheet.importer import find_value


def _workbook_bytes(headers, *rows):
    wb = Workbook()
    ws = wb.active
    ws.append(list(headers))
    for row in rows:
        ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def test_imports_basic_row_with_defaults_and_derived_dates():
    data = _workbook_bytes(
        ["Unique Ref. No.", "Client Name", "Date of Casting", "Grade", "7-Day Load 1"],
        ["2024-08-01-1", "Future Homes LLC", "2024-07-28", "M30", 450],
    )

    result = parse_reports_workbook(data)

    assert result.errors == []
    [report] = result.imported_reports
    assert report.unique_ref_no == "2024-08-01-1"
    assert report.client_name == "Future Homes LLC"
    assert report.site_or_plant == "Site"
    assert report.mix_type == "Standard"
    assert report.cube_size == "150"
    assert report.seven_days_load1 == "450"
    assert report.date_of_casting == "2024-07-28"
    assert report.seven_days_test_date == "2024-08-04"
    assert report.twenty_eight_days_test_date == "2024-08-25"
    assert report.analysis is None
    assert report.timestamp is None
    assert report.hash is None


def test_casting_date_cells_are_read_as_dates():
    data = _workbook_bytes(["ID", "Casting Date"], ["A-1", datetime(2024, 2, 25)])

    [report] = parse_reports_workbook(data).imported_reports

    assert report.date_of_casting == "2024-02-25"
    assert report.seven_days_test_date == "2024-03-03"
    assert report.twenty_eight_days_test_date == "2024-03-24"


def test_unparseable_casting_date_leaves_dates_empty():
    data = _workbook_bytes(["ID", "Date of Casting"], ["A-1", "sometime in July"])

    [report] = parse_reports_workbook(data).imported_reports

    assert report.date_of_casting == ""
    assert report.seven_days_test_date == ""
    assert report.twenty_eight_days_test_date == ""


def test_headers_are_case_insensitive_and_aliases_follow_priority():
    data = _workbook_bytes(
        ["  ID ", "TICKET NO.", "site/plant", "MIX TYPE", "Technician"],
        ["id-value", "T-100", "plant", "customer", "Jane Smith"],
        ["only-id", None, None, None, None],
    )

    first, second = parse_reports_workbook(data).imported_reports

    assert first.unique_ref_no == "T-100"
    assert first.site_or_plant == "Plant"
    assert first.mix_type == "Customer"
    assert first.ft_name == "Jane Smith"
    assert second.unique_ref_no == "only-id"


def test_rows_without_identifier_are_reported_and_empty_rows_skipped():
    data = _workbook_bytes(
        ["Unique Ref. No.", "Client Name"],
        ["R-1", "Acme"],
        [None, "Orphan Client"],
        [None, None],
        ["R-2", "Acme"],
    )

    result = parse_reports_workbook(data)

    assert [report.unique_ref_no for report in result.imported_reports] == ["R-1", "R-2"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Skipping row 3: Missing a unique identifier column")


def test_analysis_columns_are_rebuilt():
    data = _workbook_bytes(
        [
            "Unique Ref. No.",
            "Overall Quality Score",
            "7-Day Avg Strength (N/mm²)",
            "7-Day Status",
            "28-Day Avg Strength (N/mm²)",
            "28-Day Status",
            "Summary",
            "Issues",
            "Recommendations",
        ],
        ["R-1", 84.5, "20.22", "pass", "30.30", "FAIL", "Looks fine.", "Low slump; Honeycombing", "None"],
        ["R-2", "N/A", "N/A", "N/A", "N/A", "N/A", "No analysis available.", "None", "None"],
    )

    analyzed, plain = parse_reports_workbook(data).imported_reports

    analysis = analyzed.analysis
    assert analysis.quality_score == 85
    assert analysis.seven_days_results.average_strength == pytest.approx(20.22)
    assert analysis.seven_days_results.status == "Pass"
    assert analysis.seven_days_results.strengths == []
    assert analysis.twenty_eight_days_results.status == "Fail"
    assert analysis.summary == "Looks fine."
    assert analysis.issues == ["Low slump", "Honeycombing"]
    assert analysis.recommendations == []
    assert plain.analysis is None


def test_generated_at_without_hash_gets_fresh_fingerprint():
    data = _workbook_bytes(
        ["Unique Ref. No.", "Grade", "Generated At"],
        ["R-1", "M25", "8/1/2024, 10:30:00 AM"],
    )

    [report] = parse_reports_workbook(data).imported_reports

    assert report.timestamp == "2024-08-01T10:30:00.000Z"
    assert report.hash == report_fingerprint(report)


def test_supplied_hash_is_kept_only_with_a_timestamp():
    data = _workbook_bytes(
        ["Unique Ref. No.", "Generated At", "Verification Hash"],
        ["R-1", "2024-08-01T10:30:00.000Z", "a" * 64],
        ["R-2", None, "b" * 64],
    )

    with_time, without_time = parse_reports_workbook(data).imported_reports

    assert with_time.timestamp == "2024-08-01T10:30:00.000Z"
    assert with_time.hash == "a" * 64
    assert without_time.timestamp is None
    assert without_time.hash is None


@pytest.mark.parametrize("data", [b"", b"this is not a workbook"])
def test_unreadable_files_fail_the_whole_import(data):
    with pytest.raises(SpreadsheetFormatError):
        parse_reports_workbook(data)


def test_header_only_workbook_imports_nothing():
    result = asyncio.run(import_reports_from_excel(_workbook_bytes(["Unique Ref. No.", "Client Name"])))

    assert result.imported_reports == []
    assert result.errors == []


def test_find_value_skips_empty_aliases():
    row = {"unique ref. no.": None, "ticket no.": "T-1", "id": "I-1"}

    assert find_value(row, ("unique ref. no.", "ticket no.", "id")) == "T-1"
    assert find_value(row, ("missing",)) is None


def _truncate_sheet(data):
    source = zipfile.ZipFile(BytesIO(data))
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as target:
        for item in source.infolist():
            content = source.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                content = content[: len(content) // 2]
            target.writestr(item, content)
    return buffer.getvalue()


def test_damaged_sheet_xml_fails_the_whole_import():
    data = _truncate_sheet(
        _workbook_bytes(["Unique Ref. No.", "Client Name"], *[[f"R-{n}", "Acme"] for n in range(50)])
    )

    with pytest.raises(SpreadsheetFormatError, match="corrupted"):
        parse_reports_workbook(data)


def test_header_row_below_a_title_block():
    data = _workbook_bytes(
        ["Cube Register - Site A"],
        [None, None],
        ["Unique Ref. No.", "Client Name"],
        ["R-1", "Acme"],
        [None, "Orphan Client"],
    )

    result = parse_reports_workbook(data)

    assert [report.unique_ref_no for report in result.imported_reports] == ["R-1"]
    assert result.imported_reports[0].client_name == "Acme"
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Skipping row 5:")


def test_supplied_test_dates_are_recalculated():
    data = _workbook_bytes(
        ["Unique Ref. No.", "Date of Casting", "7-Day Test Date", "28-Day Test Date"],
        ["R-1", "2024-07-28", "2024-01-01", "2024-01-02"],
    )

    [report] = parse_reports_workbook(data).imported_reports

    assert report.seven_days_test_date == "2024-08-04"
    assert report.twenty_eight_days_test_date == "2024-08-25"


def test_failing_row_is_reported_and_import_continues(monkeypatch):
    build_report = importer._build_report

    def _flaky(row):
        if row.get("unique ref. no.") == "R-1":
            raise RuntimeError("bad cell")
        return build_report(row)

    monkeypatch.setattr(importer, "_build_report", _flaky)
    data = _workbook_bytes(["Unique Ref. No.", "Client Name"], ["R-1", "Acme"], ["R-2", "Acme"])

    result = parse_reports_workbook(data)

    assert result.errors == ["Error processing row 2: bad cell"]
    assert [report.unique_ref_no for report in result.imported_reports] == ["R-2"]
