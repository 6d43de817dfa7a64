from cubequality.services.spreadsheet.exporter import export_reports_to_excel, export_template_to_excel
from cubequality.services.spreadsheet.importer import (
    ImportResult,
    SpreadsheetFormatError,
    import_reports_from_excel,
    parse_reports_workbook,
)

__all__ = [
    "ImportResult",
    "SpreadsheetFormatError",
    "export_reports_to_excel",
    "export_template_to_excel",
    "import_reports_from_excel",
    "parse_reports_workbook",
]
