from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import status

from meeting_summarizer.api.dependencies import get_summarizing_document_service
from meeting_summarizer.core.exceptions import (
    ContentRejected,
    GenerationFailed,
    QuotaExceeded,
    ValidationError,
)
from meeting_summarizer.main import app
from meeting_summarizer.schemas.summaries import SummaryResult
from meeting_summarizer.services.document_service import DocumentService


@pytest.fixture
def mock_document_service():
    service = AsyncMock(spec=DocumentService)
    app.dependency_overrides[get_summarizing_document_service] = lambda: service
    return service


def test_summarize_inline_transcript(test_client, authenticated, mock_document_service):
    mock_document_service.summarize.return_value = SummaryResult(summary="Ship Friday")

    response = test_client.post(
        "/api/v1/summarize",
        json={"transcript": "Alice: ship it Friday.", "instruction": "Be brief"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["summary"] == "Ship Friday"
    mock_document_service.summarize.assert_awaited_once_with(
        user_id=authenticated.id,
        transcript="Alice: ship it Friday.",
        instruction="Be brief",
        document_id=None,
    )


def test_summarize_document_by_id(test_client, authenticated, mock_document_service):
    document_id = uuid4()
    mock_document_service.summarize.return_value = SummaryResult(
        summary="Ship Friday",
        document_id=document_id,
        summary_generated_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )

    response = test_client.post("/api/v1/summarize", json={"documentId": str(document_id)})

    data = response.json()["data"]
    assert data["documentId"] == str(document_id)
    assert data["summaryGeneratedAt"].startswith("2024-05-01")
    _, kwargs = mock_document_service.summarize.call_args
    assert kwargs["document_id"] == document_id


@pytest.mark.parametrize("error, status_code, detail", [
    (QuotaExceeded("429 from provider"), 429, "API quota exceeded. Please try again later."),
    (ContentRejected("SAFETY"), 400, "Content was blocked due to safety concerns. Please review your transcript."),
    (GenerationFailed("boom"), 500, "Failed to generate summary. Please try again."),
    (ValidationError("Transcript is too short to summarize"), 400, "Transcript is too short to summarize"),
])
def test_generation_errors_map_to_status(test_client, authenticated, mock_document_service, error, status_code, detail):
    mock_document_service.summarize.side_effect = error

    response = test_client.post("/api/v1/summarize", json={"transcript": "Alice: ship it Friday."})

    assert response.status_code == status_code
    body = response.json()
    assert body["success"] is False
    assert body["error"]["detail"] == detail


def test_missing_generator_is_server_error(test_client, authenticated):
    response = test_client.post("/api/v1/summarize", json={"transcript": "Alice: ship it Friday."})

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["error"]["title"] == "Configuration Error"
