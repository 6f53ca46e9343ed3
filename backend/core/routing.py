"""Primary → secondary routing as an explicit state machine.

    START → SANITIZING → PRIMARY_ATTEMPT → DONE
                │               │
                │               └→ CLASSIFY_FAILURE → FAILED (not worthy)
                │                          │
                └──(not configured)──→ SECONDARY_ATTEMPT → DONE | FAILED

At most one call per provider, strictly sequential. Secondary failures
are terminal; there is no second fallback hop.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from backend.core.failure_classifier import is_fallback_worthy
from backend.core.llm_adapter import (
    PrimaryProvider,
    ProviderError,
    ProviderResult,
    SecondaryProvider,
)
from backend.core.sanitizer import InvalidInput, Message, sanitize_messages

logger = structlog.get_logger(__name__)

NOTE_PRIMARY_NOT_CONFIGURED = "primary not configured; served by secondary."
NOTE_FELL_BACK = "fell back due to primary failure/quota."


class UpstreamError(Exception):
    """Terminal provider failure, surfaced to the caller as HTTP 500."""

    def __init__(self, error: str, detail: str, provider: str):
        super().__init__(f"{error}: {detail}")
        self.error = error
        self.detail = detail
        self.provider = provider


class RouteState(Enum):
    START = "start"
    SANITIZING = "sanitizing"
    PRIMARY_ATTEMPT = "primary_attempt"
    CLASSIFY_FAILURE = "classify_failure"
    SECONDARY_ATTEMPT = "secondary_attempt"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({RouteState.DONE, RouteState.FAILED})


@dataclass
class _Route:
    """Per-request scratch state carried between transitions."""
    raw: Any
    conversation: list[Message] | None = None
    primary_error: ProviderError | None = None
    note: str | None = None
    result: ProviderResult | None = None
    failure: Exception | None = None
    cause: Exception | None = None


class ChatRouter:
    """Routes a conversation to the primary provider with secondary fallback."""

    def __init__(self, primary: PrimaryProvider | None, secondary: SecondaryProvider):
        self.primary = primary
        self.secondary = secondary
        self._handlers = {
            RouteState.START: self._start,
            RouteState.SANITIZING: self._sanitize,
            RouteState.PRIMARY_ATTEMPT: self._try_primary,
            RouteState.CLASSIFY_FAILURE: self._classify,
            RouteState.SECONDARY_ATTEMPT: self._try_secondary,
        }

    @property
    def primary_configured(self) -> bool:
        return self.primary is not None and self.primary.configured

    async def route_chat(self, raw_messages: Any) -> ProviderResult:
        """Produce a reply for a caller-supplied conversation.

        Args:
            raw_messages: Loosely-typed list of {role, content} records.

        Returns:
            ProviderResult from whichever provider served the request.

        Raises:
            InvalidInput: If the conversation is missing or empty.
            UpstreamError: If the applicable provider chain is exhausted.
        """
        route = _Route(raw=raw_messages)
        state = RouteState.START

        while state not in TERMINAL_STATES:
            state = await self._handlers[state](route)

        if state is RouteState.FAILED:
            raise route.failure from route.cause
        return route.result

    async def _start(self, route: _Route) -> RouteState:
        return RouteState.SANITIZING

    async def _sanitize(self, route: _Route) -> RouteState:
        try:
            route.conversation = sanitize_messages(route.raw)
        except InvalidInput as e:
            logger.info("routing.invalid_input", error=str(e))
            route.failure = e
            return RouteState.FAILED

        if self.primary_configured:
            return RouteState.PRIMARY_ATTEMPT

        route.note = NOTE_PRIMARY_NOT_CONFIGURED
        return RouteState.SECONDARY_ATTEMPT

    async def _try_primary(self, route: _Route) -> RouteState:
        try:
            result = await self.primary.generate(route.conversation)
        except ProviderError as e:
            logger.warning("routing.primary_failed", status=e.status, error=e.message)
            route.primary_error = e
            return RouteState.CLASSIFY_FAILURE

        logger.info("routing.served", provider=result.provider)
        route.result = ProviderResult(text=result.text, provider="primary")
        return RouteState.DONE

    async def _classify(self, route: _Route) -> RouteState:
        error = route.primary_error
        if not is_fallback_worthy(error):
            logger.error("routing.primary_not_fallback_worthy", status=error.status)
            route.failure = UpstreamError("Primary provider request failed", error.message, "primary")
            route.cause = error
            return RouteState.FAILED

        logger.info("routing.fallback", status=error.status)
        route.note = NOTE_FELL_BACK
        return RouteState.SECONDARY_ATTEMPT

    async def _try_secondary(self, route: _Route) -> RouteState:
        try:
            result = await self.secondary.generate(route.conversation)
        except ProviderError as e:
            logger.error("routing.secondary_failed", status=e.status, error=e.message)
            route.failure = UpstreamError("Secondary provider request failed", e.message, "secondary")
            route.cause = e
            return RouteState.FAILED

        logger.info("routing.served", provider=result.provider, note=route.note)
        route.result = ProviderResult(text=result.text, provider="secondary", note=route.note)
        return RouteState.DONE
