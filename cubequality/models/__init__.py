from cubequality.models.report import ReportMedia, StoredReport

__all__ = ["StoredReport", "ReportMedia"]
