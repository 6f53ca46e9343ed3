"""Pydantic models for the API layer.

Defines request/response envelopes for all endpoints.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Incoming conversation from the chat UI.

    messages is untyped here. The sanitizer validates it and raises
    InvalidInput (400) for anything that is not a non-empty list.
    """
    messages: Any = Field(default=None, description="Ordered list of {role, content} records")


class ChatResponse(BaseModel):
    """Reply envelope. note is omitted unless the secondary served the request."""
    text: str
    provider: Literal["primary", "secondary"]
    note: str | None = None


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None


class HealthResponse(BaseModel):
    """Which providers are configured and where the secondary lives."""
    ok: bool = True
    primary_configured: bool
    primary_model: str
    secondary_base_url: str
    secondary_model: str
