from cubequality.schemas.auth import LoginRequest, TokenResponse
from cubequality.schemas.dashboard import ClientScore, DashboardSummary, StrengthPoint
from cubequality.schemas.report import (
    ConcreteReport,
    MediaBlob,
    MediaInfo,
    ReportAnalysis,
    ReportFormData,
    ReportListItem,
    TestResults,
    VerificationResult,
)
from cubequality.schemas.spreadsheet import ImportResponse

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "ConcreteReport",
    "ReportFormData",
    "ReportAnalysis",
    "TestResults",
    "MediaBlob",
    "MediaInfo",
    "ReportListItem",
    "VerificationResult",
    "ImportResponse",
    "DashboardSummary",
    "ClientScore",
    "StrengthPoint",
]
