"""Recording analysis endpoint.

Transcription and voice/scam analysis are provided by an external service;
this endpoint validates uploads against the shared contract and reports that
analysis is not available from the relay.
"""
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.services.analysis.models import AnalyzeErrorDetail, AnalyzeFailure, AnalyzeRequest

router = APIRouter()
logger = logging.getLogger(__name__)


def _failure(status_code: int, code: str, message: str) -> JSONResponse:
    body = AnalyzeFailure(error=AnalyzeErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post("/analyze")
async def analyze(request: Request):
    """Validate an analysis request and answer with the error envelope."""
    try:
        payload = AnalyzeRequest.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.warning(f"[ANALYZE] Invalid request - Error: {type(e).__name__}")
        return _failure(400, "invalid-request", "Request must include audio, filename, mimeType and size")

    logger.info(
        f"[ANALYZE] Analysis requested - Filename: {payload.filename}, "
        f"MimeType: {payload.mimeType}, Size: {payload.size}"
    )
    return _failure(501, "not-implemented", "Transcription and voice analysis are not available on this server")
