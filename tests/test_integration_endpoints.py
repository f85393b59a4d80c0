"""
Integration Tests for Endpoint Flows

This module tests the notes and transcription endpoints through the full
request/response flow with the workflow and transcription clients mocked.

Tests:
- /api/format normalizes each known workflow response shape
- /api/format maps validation, transport and timeout failures to {error, message}
- /api/render and /api/render/download return the render result and JSON file
- /api/transcribe proxies audio and reports missing configuration
"""

import json
import os

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from main import app
from services.transcription_service import TranscriptionServiceError
from services.workflow_service import WorkflowServiceError, WorkflowTimeoutError


SYNTHESIS = {
    "bluf": "Customer will pilot in Q3.",
    "meeting_recap": {
        "first_level": {"what_was_covered": ["Pricing", "Rollout"]},
        "second_level": {"mental_model_gaps": "line1\nline2"},
        "third_level": {},
    },
}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def mock_workflow():
    """Patch WorkflowService in the notes router and expose run_workflow."""
    with patch("routers.notes.WorkflowService") as mock_service:
        mock_instance = MagicMock()
        mock_instance.run_workflow = AsyncMock()
        mock_service.return_value = mock_instance
        yield mock_instance.run_workflow


def workflow_response(state):
    return {"run": {"state": state}}


# =============================================================================
# Format Endpoint Integration Tests
# =============================================================================

class TestFormatEndpoint:
    """Integration tests for POST /api/format."""

    def test_llm_text_output_is_plain(self, client, mock_workflow):
        mock_workflow.return_value = workflow_response({"llm": {"output": "Clean notes"}})

        response = client.post("/api/format", json={"raw_notes": "um so we met"})

        assert response.status_code == 200
        assert response.json() == {"formatted_notes": "Clean notes", "is_structured": False}
        mock_workflow.assert_awaited_once_with("um so we met")

    def test_fenced_synthesis_string_is_structured(self, client, mock_workflow):
        fenced = "```json\n" + json.dumps(SYNTHESIS) + "\n```"
        mock_workflow.return_value = workflow_response({"llm": {"output": fenced}})

        data = client.post("/api/format", json={"raw_notes": "notes"}).json()

        assert data["is_structured"] is True
        assert json.loads(data["formatted_notes"]) == SYNTHESIS

    def test_json_output_object_is_structured(self, client, mock_workflow):
        mock_workflow.return_value = workflow_response({"json_output": {"output": SYNTHESIS}})

        data = client.post("/api/format", json={"raw_notes": "notes"}).json()

        assert data["is_structured"] is True
        assert data["formatted_notes"] == json.dumps(SYNTHESIS, indent=2, ensure_ascii=False)

    def test_unknown_state_returns_whole_payload(self, client, mock_workflow):
        payload = workflow_response({"inputs": {"raw_notes": "notes"}, "summarize": {"text": "x"}})
        mock_workflow.return_value = payload

        data = client.post("/api/format", json={"raw_notes": "notes"}).json()

        assert data["is_structured"] is False
        assert json.loads(data["formatted_notes"]) == payload

    def test_missing_state_returns_502(self, client, mock_workflow):
        mock_workflow.return_value = {"run": {}}

        response = client.post("/api/format", json={"raw_notes": "notes"})

        assert response.status_code == 502
        assert response.json()["error"] == "Invalid response structure from workflow API"
        assert response.json()["message"] == "Response missing state"

    def test_transport_failure_returns_502(self, client, mock_workflow):
        mock_workflow.side_effect = WorkflowServiceError("Could not reach workflow API")

        response = client.post("/api/format", json={"raw_notes": "notes"})

        assert response.status_code == 502
        assert response.json() == {
            "error": "Failed to format notes",
            "message": "Could not reach workflow API",
        }

    def test_timeout_returns_504(self, client, mock_workflow):
        mock_workflow.side_effect = WorkflowTimeoutError("Workflow did not finish within 300 seconds")

        response = client.post("/api/format", json={"raw_notes": "notes"})

        assert response.status_code == 504
        assert response.json()["error"] == "Workflow timed out"

    def test_unexpected_failure_returns_500(self, client, mock_workflow):
        mock_workflow.side_effect = RuntimeError("boom")

        response = client.post("/api/format", json={"raw_notes": "notes"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to format notes", "message": "boom"}

    def test_normalizer_failure_returns_500(self, client, mock_workflow):
        mock_workflow.return_value = workflow_response({"llm": {"output": "notes"}})

        with patch("routers.notes.normalize_workflow_output", side_effect=RuntimeError("boom")):
            response = client.post("/api/format", json={"raw_notes": "notes"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to format notes", "message": "boom"}

    @pytest.mark.parametrize("body", [{}, {"raw_notes": ""}, {"raw_notes": "   \n\t "}])
    def test_empty_notes_rejected_without_calling_workflow(self, client, mock_workflow, body):
        response = client.post("/api/format", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing raw_notes in request body"
        mock_workflow.assert_not_called()


# =============================================================================
# Render Endpoint Integration Tests
# =============================================================================

class TestRenderEndpoint:
    """Integration tests for POST /api/render and /api/render/download."""

    def test_render_structured(self, client):
        response = client.post(
            "/api/render",
            json={"text": json.dumps(SYNTHESIS), "is_structured": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["view"] == "structured"
        assert data["record"] == SYNTHESIS
        assert json.loads(data["record_json"]) == SYNTHESIS
        assert "<li>Pricing</li>" in data["html"]
        assert "line1<br>line2" in data["html"]
        assert "Copy JSON" not in data["plain_text"]

    def test_render_plain_despite_hint(self, client):
        response = client.post(
            "/api/render",
            json={"text": "Just a <sentence>.", "is_structured": True}
        )

        data = response.json()
        assert data["view"] == "plain"
        assert data["record"] is None
        assert data["plain_text"] == "Just a <sentence>."
        assert "Just a &lt;sentence&gt;." in data["html"]

    @pytest.mark.parametrize("path", ["/api/render", "/api/render/download"])
    def test_missing_body_does_not_mention_raw_notes(self, client, path):
        response = client.post(path)

        assert response.status_code == 400
        data = response.json()
        assert "raw_notes" not in data["error"]
        assert "raw_notes" not in data["message"]

    def test_download_structured(self, client):
        response = client.post(
            "/api/render/download",
            json={"text": json.dumps(SYNTHESIS), "is_structured": True}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'attachment; filename="meeting-synthesis-' in response.headers["content-disposition"]
        assert response.json() == SYNTHESIS

    def test_download_plain_returns_422(self, client):
        response = client.post("/api/render/download", json={"text": "plain notes"})

        assert response.status_code == 422
        assert response.json()["error"] == "Nothing to download"


# =============================================================================
# Transcribe Endpoint Integration Tests
# =============================================================================

class TestTranscribeEndpoint:
    """Integration tests for POST /api/transcribe."""

    def test_audio_is_proxied(self, client):
        payload = {"results": {"channels": [{"alternatives": [{"transcript": "hello"}]}]}}
        with patch("routers.transcribe.TranscriptionService") as mock_service:
            mock_instance = MagicMock()
            mock_instance.transcribe_audio = AsyncMock(return_value=payload)
            mock_service.return_value = mock_instance

            response = client.post(
                "/api/transcribe",
                content=b"RIFF....WAVE",
                headers={"Content-Type": "audio/wav"}
            )

        assert response.status_code == 200
        assert response.json() == payload
        mock_instance.transcribe_audio.assert_awaited_once_with(b"RIFF....WAVE", "audio/wav")

    def test_empty_body_returns_400(self, client):
        response = client.post("/api/transcribe", content=b"", headers={"Content-Type": "audio/wav"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing audio in request body"

    def test_missing_api_key_returns_503(self, client):
        with patch.dict(os.environ, {"DEEPGRAM_API_KEY": ""}):
            response = client.post(
                "/api/transcribe",
                content=b"audio",
                headers={"Content-Type": "audio/webm"}
            )

        assert response.status_code == 503

    def test_upstream_failure_returns_502(self, client):
        with patch("routers.transcribe.TranscriptionService") as mock_service:
            mock_instance = MagicMock()
            mock_instance.transcribe_audio = AsyncMock(
                side_effect=TranscriptionServiceError("Transcription failed: down")
            )
            mock_service.return_value = mock_instance

            response = client.post(
                "/api/transcribe",
                content=b"audio",
                headers={"Content-Type": "audio/webm"}
            )

        assert response.status_code == 502
        assert response.json()["message"] == "Transcription failed: down"


# =============================================================================
# Page Tests
# =============================================================================

class TestPages:
    """Tests for the index page and health check."""

    def test_index_page(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert 'id="notesInput"' in response.text
        assert "clientTimeoutMs: 300000" in response.text

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
