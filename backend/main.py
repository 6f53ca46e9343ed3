"""FastAPI application entry point.

Startup sequence: read settings → configure logging → build providers → build router.
"""

import logging
from contextlib import asynccontextmanager

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request as StarletteRequest
from starlette.responses import JSONResponse

from backend.api.routes import router
from backend.core.config import Settings
from backend.core.llm_adapter import PrimaryProvider, SecondaryProvider
from backend.core.routing import ChatRouter, UpstreamError
from backend.core.sanitizer import InvalidInput

load_dotenv()

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Drop structlog events below the configured level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level, logging.INFO)
        ),
    )


def build_router(settings: Settings) -> ChatRouter:
    """Create provider adapters and the router from settings."""
    primary = PrimaryProvider(settings.primary, timeout=settings.timeout)
    secondary = SecondaryProvider(settings.secondary, timeout=settings.timeout)
    return ChatRouter(primary if primary.configured else None, secondary)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin")
    settings: Settings = app.state.settings

    owns_router = getattr(app.state, "router", None) is None
    if owns_router:
        app.state.router = build_router(settings)

    logger.info("startup.providers",
                primary_configured=settings.primary.enabled,
                primary_model=settings.primary.model,
                secondary_base_url=settings.secondary.base_url,
                secondary_model=settings.secondary.model)
    logger.info("startup.complete", port=settings.port)
    yield

    if owns_router:
        await app.state.router.secondary.aclose()
        app.state.router = None
    logger.info("shutdown.complete")


def _too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"error": "request body too large"})


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto {error, detail} envelopes."""

    @app.exception_handler(InvalidInput)
    async def handle_invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        # A body that is not a JSON object cannot carry a messages array
        logger.info("chat.bad_body", errors=len(exc.errors()))
        return JSONResponse(status_code=400,
                            content={"error": "messages must be a non-empty array"})

    @app.exception_handler(UpstreamError)
    async def handle_upstream(request: Request, exc: UpstreamError) -> JSONResponse:
        return JSONResponse(status_code=500,
                            content={"error": exc.error, "detail": exc.detail})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("server.error", error=str(exc), type=type(exc).__name__)
        return JSONResponse(status_code=500,
                            content={"error": "Server error", "detail": str(exc)})


def create_app(settings: Settings | None = None, chat_router: ChatRouter | None = None) -> FastAPI:
    """Build the application. chat_router overrides the providers built at startup."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Hybrid Chat API",
        description="Chat gateway with OpenAI primary and Ollama fallback",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.router = chat_router

    # CORS for the chat UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def body_limit_middleware(request: Request, call_next):
        """Reject oversized request bodies before parsing."""
        limit = settings.max_body_bytes
        length = request.headers.get("content-length")
        if length and length.isdigit():
            if int(length) > limit:
                logger.warning("request.too_large", path=request.url.path, length=int(length))
                return _too_large()
            return await call_next(request)

        # No usable Content-Length (e.g. chunked): count what actually arrived
        body = await request.body()
        if len(body) > limit:
            logger.warning("request.too_large", path=request.url.path, length=len(body))
            return _too_large()

        # Reconstruct the request with the already-read body
        async def receive_body():
            return {"type": "http.request", "body": body, "more_body": False}

        return await call_next(StarletteRequest(request.scope, receive_body))

    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
