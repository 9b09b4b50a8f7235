"""Unit tests for the HTTP endpoints."""
import base64

import pytest
from pydantic import ValidationError

from app.services.analysis.models import AnalyzeSuccess, ScamAssessment, VoiceAnalysis


class TestHealth:
    """Test liveness check."""

    def test_health_ok(self, test_client):
        """Test GET /health returns {"ok": true}."""
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_unknown_route_not_found(self, test_client):
        """Test that unmatched routes return 404."""
        response = test_client.get("/nope")
        assert response.status_code == 404


class TestAnalyze:
    """Test the analyze endpoint contract."""

    def test_valid_request_reports_not_implemented(self, test_client):
        """Test that a valid upload gets the error envelope."""
        response = test_client.post(
            "/analyze",
            json={
                "audio": base64.b64encode(b"RIFF").decode(),
                "filename": "call.wav",
                "mimeType": "audio/wav",
                "size": 4,
            },
        )

        assert response.status_code == 501
        data = response.json()
        assert data["status"] == "error"
        assert data["error"]["code"] == "not-implemented"
        assert data["error"]["message"]

    def test_missing_fields_rejected(self, test_client):
        """Test that incomplete uploads are rejected."""
        response = test_client.post("/analyze", json={"filename": "call.wav"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid-request"

    def test_non_json_body_rejected(self, test_client):
        """Test that a non-JSON body is rejected."""
        response = test_client.post("/analyze", content=b"not json")

        assert response.status_code == 400
        assert response.json()["status"] == "error"


class TestAnalyzeContract:
    """Test the analysis result models shared with the upload UI."""

    def test_success_shape(self):
        """Test that a success result serializes to the agreed shape."""
        result = AnalyzeSuccess(
            transcription="hello, this is your bank",
            voice_analysis=VoiceAnalysis(
                sounds_artificial=True,
                confidence=0.8,
                indicators=["flat prosody"],
                description="Synthetic timbre",
            ),
            scam=ScamAssessment(probability=0.9, label="likely_scam", reasons=["asks for PIN"]),
        )

        data = result.model_dump()
        assert data["status"] == "ok"
        assert set(data["voice_analysis"]) == {"sounds_artificial", "confidence", "indicators", "description"}
        assert set(data["scam"]) == {"probability", "label", "reasons"}

    def test_probability_out_of_range_rejected(self):
        """Test that probabilities outside [0, 1] are rejected."""
        with pytest.raises(ValidationError):
            ScamAssessment(probability=1.5, label="likely_scam")
