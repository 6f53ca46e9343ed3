"""FastAPI endpoints for the hybrid chat gateway.

POST /api/chat - route a conversation to the primary or secondary provider
GET /health - provider configuration summary
"""

import time

import structlog
from fastapi import APIRouter, Request

from backend.api.schemas import ChatRequest, ChatResponse, ErrorResponse, HealthResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/api/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def chat(request: ChatRequest, req: Request):
    """Sanitize -> primary -> (classify -> secondary) -> respond.

    InvalidInput and UpstreamError propagate to the handlers in main.py.
    """
    start = time.monotonic()
    chat_router = req.app.state.router

    count = len(request.messages) if isinstance(request.messages, list) else None
    logger.info("chat.request", messages=count)

    result = await chat_router.route_chat(request.messages)

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info("chat.response", provider=result.provider, fallback=result.note is not None,
                latency_ms=latency_ms)

    return ChatResponse(text=result.text, provider=result.provider, note=result.note)


@router.get("/health", response_model=HealthResponse)
def health(req: Request):
    """Report whether the primary is configured and where the secondary lives."""
    settings = req.app.state.settings
    return HealthResponse(
        primary_configured=settings.primary.enabled,
        primary_model=settings.primary.model,
        secondary_base_url=settings.secondary.base_url,
        secondary_model=settings.secondary.model,
    )


@router.get("/")
@router.head("/")
def root_health():
    """Basic root health check for deployment platforms."""
    return {"status": "ok", "service": "hybrid-chat"}
