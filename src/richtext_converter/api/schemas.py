from __future__ import annotations

from pydantic import BaseModel, Field


class DetectRequest(BaseModel):
    text: str
    hint: str | None = None


class DetectResponse(BaseModel):
    format: str
    confidence: float


class ConvertRequest(BaseModel):
    text: str
    target: str = "rtf"
    source: str | None = Field(default=None, description="Detected when omitted")


class ConvertResponse(BaseModel):
    text: str
    source: str
    target: str
    validated: bool
    soft_failure: bool
    warnings: list[str]


class ValidateRequest(BaseModel):
    text: str


class ValidateResponse(BaseModel):
    is_valid: bool
    confidence: int
    balance_delta: int
