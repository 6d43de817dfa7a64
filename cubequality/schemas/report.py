from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Status = Literal["Pass", "Fail", "N/A"]
Batch = Literal["seven", "twentyEight"]

MEDIA_FIELDS = ("seven_days_ctm_media_blob", "twenty_eight_days_ctm_media_blob")
RESULT_FIELDS = ("analysis", "timestamp", "hash")


def normalize_status(value: object) -> str:
    text = str(value if value is not None else "N/A").strip().lower()
    if text == "pass":
        return "Pass"
    if text == "fail":
        return "Fail"
    return "N/A"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)


class MediaBlob(BaseModel):
    content_type: str = "application/octet-stream"
    data: bytes


class TestResults(CamelModel):
    __test__ = False

    strengths: list[float] = Field(default_factory=list)
    average_strength: float = 0.0
    status: Status = "N/A"

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: object) -> str:
        return normalize_status(value)


class ReportAnalysis(CamelModel):
    summary: str
    quality_score: int
    seven_days_results: TestResults
    twenty_eight_days_results: TestResults
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("quality_score", mode="before")
    @classmethod
    def _score(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value


class ReportFormData(CamelModel):
    unique_ref_no: str

    date_of_casting: str | None = None
    client_name: str | None = None
    site_or_plant: Literal["Site", "Plant"] | None = None

    grade: str | None = None
    mix_code: str | None = None
    ft_name: str | None = None
    mix_type: Literal["Standard", "Customer"] | None = None
    cube_size: str | None = None
    opc: str | None = None
    flyash: str | None = None
    ppc: str | None = None

    seven_days_test_date: str | None = None
    seven_days_weight1: str | None = None
    seven_days_weight2: str | None = None
    seven_days_weight3: str | None = None
    seven_days_load1: str | None = None
    seven_days_load2: str | None = None
    seven_days_load3: str | None = None
    seven_days_ctm_media_blob: MediaBlob | None = Field(default=None, exclude=True)

    twenty_eight_days_test_date: str | None = None
    twenty_eight_days_weight1: str | None = None
    twenty_eight_days_weight2: str | None = None
    twenty_eight_days_weight3: str | None = None
    twenty_eight_days_load1: str | None = None
    twenty_eight_days_load2: str | None = None
    twenty_eight_days_load3: str | None = None
    twenty_eight_days_ctm_media_blob: MediaBlob | None = Field(default=None, exclude=True)

    observations: str | None = None

    def form_fields(self) -> dict:
        """Raw form fields keyed by their camelCase names, without media or results."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude=set(RESULT_FIELDS))

    def media(self, batch: Batch) -> MediaBlob | None:
        return getattr(self, media_attr(batch))


class ConcreteReport(ReportFormData):
    analysis: ReportAnalysis | None = None
    timestamp: str | None = None
    hash: str | None = None

    def business_fields(self) -> dict:
        """Every field by camelCase name, media blobs included, for canonicalization."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        for attr in MEDIA_FIELDS:
            blob = getattr(self, attr)
            if blob is not None:
                data[to_camel(attr)] = blob
        return data


def media_attr(batch: Batch) -> str:
    return "seven_days_ctm_media_blob" if batch == "seven" else "twenty_eight_days_ctm_media_blob"


class ReportListItem(CamelModel):
    unique_ref_no: str
    client_name: str | None = None
    date_of_casting: str | None = None
    grade: str | None = None
    mix_code: str | None = None
    seven_days_average_strength: float
    twenty_eight_days_average_strength: float
    quality_score: int | None = None
    timestamp: str | None = None
    hash: str | None = None


class VerificationResult(CamelModel):
    unique_ref_no: str
    stored_hash: str | None
    computed_hash: str
    verified: bool


class MediaInfo(CamelModel):
    unique_ref_no: str
    field: str
    content_type: str
    size: int
