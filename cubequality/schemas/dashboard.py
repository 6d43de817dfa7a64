from pydantic import BaseModel, Field


class ClientScore(BaseModel):
    client_name: str
    average_score: float
    report_count: int


class StrengthPoint(BaseModel):
    date_of_casting: str
    average_strength: float
    unique_ref_no: str


class DashboardSummary(BaseModel):
    total_reports: int
    analyzed_reports: int
    average_quality_score: float
    pass_rate: float
    pass_count: int
    fail_count: int
    client_scores: list[ClientScore] = Field(default_factory=list)
    strength_trend: list[StrengthPoint] = Field(default_factory=list)
