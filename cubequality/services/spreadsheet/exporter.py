"""Excel export of stored reports and of the blank import template."""

import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from cubequality.schemas.report import ConcreteReport
from cubequality.services.spreadsheet import columns

logger = logging.getLogger(__name__)

COLUMN_PADDING = 2
TEMPLATE_COLUMN_PADDING = 5
INSTRUCTION_WIDTHS = (40, 60, 40)


def _style_header(ws: Worksheet, row_num: int, col_count: int) -> None:
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="166534", end_color="166534", fill_type="solid")

    for col in range(1, col_count + 1):
        cell = ws.cell(row=row_num, column=col)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal="center")


def _autosize(ws: Worksheet) -> None:
    for column in ws.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        ws.column_dimensions[column[0].column_letter].width = max_length + COLUMN_PADDING


def _format_strength(value: float | None) -> str:
    return columns.NOT_AVAILABLE if value is None else f"{value:.2f}"


def _join(values: list[str] | None) -> str:
    return columns.LIST_DELIMITER.join(values) if values else columns.EMPTY_LIST


def report_row(report: ConcreteReport) -> dict[str, object]:
    """One flattened export row, keyed by column header."""
    row: dict[str, object] = {header: getattr(report, attr) for header, attr in columns.INPUT_COLUMNS}
    analysis = report.analysis
    seven = analysis.seven_days_results if analysis else None
    twenty_eight = analysis.twenty_eight_days_results if analysis else None
    row.update(
        {
            "Overall Quality Score": analysis.quality_score if analysis else columns.NOT_AVAILABLE,
            "7-Day Avg Strength (N/mm²)": _format_strength(seven.average_strength if seven else None),
            "7-Day Status": seven.status if seven else columns.NOT_AVAILABLE,
            "28-Day Avg Strength (N/mm²)": _format_strength(twenty_eight.average_strength if twenty_eight else None),
            "28-Day Status": twenty_eight.status if twenty_eight else columns.NOT_AVAILABLE,
            "Summary": analysis.summary if analysis else columns.NO_SUMMARY,
            "Issues": _join(analysis.issues if analysis else None),
            "Recommendations": _join(analysis.recommendations if analysis else None),
            "Generated At": report.timestamp or "",
            "Verification Hash": report.hash or "",
        }
    )
    return row


def export_reports_to_excel(reports: list[ConcreteReport]) -> BytesIO:
    """Export reports to a single-sheet workbook.

    Args:
        reports: Reports in the order they should appear.

    Returns:
        BytesIO buffer containing the Excel file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = columns.REPORTS_SHEET

    headers = [header for header, _ in columns.INPUT_COLUMNS] + columns.ANALYSIS_HEADERS
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header)
    _style_header(ws, 1, len(headers))

    if not reports:
        logger.warning("export_without_reports")

    for row_num, report in enumerate(reports, start=2):
        values = report_row(report)
        for col, header in enumerate(headers, 1):
            value = values[header]
            if value is not None:
                ws.cell(row=row_num, column=col, value=value)

    _autosize(ws)

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    logger.info("reports_exported", extra={"count": len(reports)})
    return buffer


def export_template_to_excel() -> BytesIO:
    """Blank import template: one example row plus a sheet documenting every column."""
    wb = Workbook()
    ws_data = wb.active
    ws_data.title = columns.DATA_ENTRY_SHEET

    headers = list(columns.TEMPLATE_EXAMPLE)
    for col, header in enumerate(headers, 1):
        ws_data.cell(row=1, column=col, value=header)
        ws_data.cell(row=2, column=col, value=columns.TEMPLATE_EXAMPLE[header])
        ws_data.column_dimensions[ws_data.cell(row=1, column=col).column_letter].width = len(header) + TEMPLATE_COLUMN_PADDING
    _style_header(ws_data, 1, len(headers))

    ws_instructions = wb.create_sheet(columns.INSTRUCTIONS_SHEET)
    for line in columns.INSTRUCTIONS:
        ws_instructions.append(list(line))
    _style_header(ws_instructions, 1, len(columns.INSTRUCTIONS[0]))
    for letter, width in zip("ABC", INSTRUCTION_WIDTHS):
        ws_instructions.column_dimensions[letter].width = width

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer
