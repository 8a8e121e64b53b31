from __future__ import annotations

from fastapi import APIRouter, Depends

from ...core import ConversionService
from ...validation import validate
from ..dependencies import get_service
from ..schemas import (
    ConvertRequest,
    ConvertResponse,
    DetectRequest,
    DetectResponse,
    ValidateRequest,
    ValidateResponse,
)
from ..utils import run_sync

router = APIRouter(tags=["conversion"])


@router.post("/detect", summary="Classify a text payload", response_model=DetectResponse)
async def detect_payload(
    payload: DetectRequest,
    service: ConversionService = Depends(get_service),
) -> DetectResponse:
    result = await run_sync(service.detect_format, payload.text, hint=payload.hint)
    return DetectResponse(format=result.kind.value, confidence=result.confidence)


@router.post("/convert", summary="Convert a text payload", response_model=ConvertResponse)
async def convert_payload(
    payload: ConvertRequest,
    service: ConversionService = Depends(get_service),
) -> ConvertResponse:
    result = await run_sync(service.convert, payload.source, payload.target, payload.text)
    return ConvertResponse(
        text=result.text,
        source=result.source_format.value,
        target=result.target_format.value,
        validated=result.validated,
        soft_failure=result.soft_failure,
        warnings=result.warnings,
    )


@router.post("/validate", summary="Check the group structure of a rich-text document", response_model=ValidateResponse)
async def validate_payload(payload: ValidateRequest) -> ValidateResponse:
    verdict = await run_sync(validate, payload.text)
    return ValidateResponse(
        is_valid=verdict.is_valid,
        confidence=verdict.confidence,
        balance_delta=verdict.balance_delta,
    )


__all__ = [
    "router",
]
