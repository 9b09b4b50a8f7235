"""Request and response shapes of the recording analysis service."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Uploaded recording to analyze."""

    audio: str  # base64
    filename: str
    mimeType: str
    size: int = Field(ge=0)


class VoiceAnalysis(BaseModel):
    sounds_artificial: bool
    confidence: float = Field(ge=0.0, le=1.0)
    indicators: List[str] = []
    description: str = ""


class ScamAssessment(BaseModel):
    probability: float = Field(ge=0.0, le=1.0)
    label: str
    reasons: List[str] = []


class AnalyzeSuccess(BaseModel):
    status: Literal["ok"] = "ok"
    transcription: Optional[str] = None
    voice_analysis: VoiceAnalysis
    scam: ScamAssessment


class AnalyzeErrorDetail(BaseModel):
    code: str
    message: str


class AnalyzeFailure(BaseModel):
    status: Literal["error"] = "error"
    error: AnalyzeErrorDetail


