"""Unit tests for Pydantic API schemas."""

import pytest
from pydantic import ValidationError

from backend.api.schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse


class TestChatRequest:

    def test_valid_request(self):
        req = ChatRequest(messages=[{"role": "user", "content": "hi"}])
        assert req.messages == [{"role": "user", "content": "hi"}]

    def test_missing_messages_allowed(self):
        # Left for the sanitizer to reject with a 400
        assert ChatRequest().messages is None

    def test_loose_messages_kept_as_is(self):
        assert ChatRequest(messages="hi").messages == "hi"


class TestChatResponse:

    def test_note_excluded_when_absent(self):
        resp = ChatResponse(text="hello", provider="primary")
        assert resp.model_dump(exclude_none=True) == {"text": "hello", "provider": "primary"}

    def test_with_note(self):
        resp = ChatResponse(text="hi there", provider="secondary", note="fell back")
        assert resp.model_dump()["note"] == "fell back"

    def test_invalid_provider_rejected(self):
        with pytest.raises(ValidationError):
            ChatResponse(text="x", provider="openai")


class TestErrorAndHealth:

    def test_error_detail_optional(self):
        assert ErrorResponse(error="boom").detail is None

    def test_health_defaults_ok(self):
        health = HealthResponse(
            primary_configured=False,
            primary_model="gpt-4o-mini",
            secondary_base_url="http://localhost:11434",
            secondary_model="llama3.2",
        )
        assert health.ok is True
