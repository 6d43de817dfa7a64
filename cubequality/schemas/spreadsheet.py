from pydantic import BaseModel, Field


class ImportResponse(BaseModel):
    imported: int
    refs: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
