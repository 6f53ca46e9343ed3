"""Provider adapters: OpenAI (primary) and Ollama (secondary).

Both expose the same coroutine, generate(conversation) -> ProviderResult,
and raise ProviderError on any failure. Each call makes exactly one
outbound request; retries and fallback belong to the router.
"""

from dataclasses import dataclass
from typing import Literal

import httpx
import structlog
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from backend.core.config import ProviderConfig
from backend.core.sanitizer import Message

logger = structlog.get_logger(__name__)

PRIMARY_TEMPERATURE = 0.7

ProviderName = Literal["primary", "secondary"]


class ProviderError(Exception):
    """A provider call failed. status is the upstream HTTP code when known."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


@dataclass(frozen=True)
class ProviderResult:
    """Reply produced by one provider."""
    text: str
    provider: ProviderName
    note: str | None = None


def _describe(exc: Exception) -> str:
    """Render an exception as 'ClassName: message' for diagnostics."""
    text = str(exc)
    name = type(exc).__name__
    return f"{name}: {text}" if text else name


def _status_of(exc: Exception) -> int | None:
    """Pull an HTTP status off SDK/httpx errors, if present."""
    status = getattr(exc, "status_code", None)
    if status is None:
        response = getattr(exc, "response", None)
        status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def _to_langchain(conversation: list[Message]) -> list[BaseMessage | dict]:
    messages = []
    for msg in conversation:
        if msg.role == "user":
            messages.append(HumanMessage(content=msg.content))
        elif msg.role == "assistant":
            messages.append(AIMessage(content=msg.content))
        elif msg.role == "system":
            messages.append(SystemMessage(content=msg.content))
        else:
            # Unknown roles go through as-is and fail upstream
            messages.append(msg.to_dict())
    return messages


class PrimaryProvider:
    """OpenAI chat completions via LangChain's ChatOpenAI."""

    name: ProviderName = "primary"

    def __init__(self, config: ProviderConfig, timeout: float = 60.0):
        self.config = config
        self._llm = None

        if config.enabled:
            self._llm = ChatOpenAI(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url or None,
                temperature=PRIMARY_TEMPERATURE,
                timeout=timeout,
                max_retries=0,
            )

    @property
    def configured(self) -> bool:
        return self._llm is not None

    async def generate(self, conversation: list[Message]) -> ProviderResult:
        """Send the conversation to OpenAI and return the first completion.

        Raises:
            RuntimeError: If called without a configured credential.
            ProviderError: On any transport, auth, or upstream error.
        """
        if self._llm is None:
            raise RuntimeError("Primary provider not configured (missing OPENAI_API_KEY).")

        logger.debug("llm.invoke", provider=self.name, model=self.config.model,
                     messages=len(conversation))
        try:
            response = await self._llm.ainvoke(_to_langchain(conversation))
        except Exception as e:
            raise ProviderError(_describe(e), status=_status_of(e)) from e

        content = getattr(response, "content", None)
        text = content if isinstance(content, str) else ""
        return ProviderResult(text=text, provider=self.name)


class SecondaryProvider:
    """Local Ollama server, POST /api/chat with streaming disabled."""

    name: ProviderName = "secondary"

    def __init__(
        self,
        config: ProviderConfig,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def chat_url(self) -> str:
        return f"{self.config.base_url}/api/chat"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate(self, conversation: list[Message]) -> ProviderResult:
        """Send the conversation to Ollama and return message.content.

        Raises:
            ProviderError: On transport failure, non-2xx status, or a non-JSON body.
        """
        payload = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in conversation],
            "stream": False,
        }
        logger.debug("llm.invoke", provider=self.name, model=self.config.model,
                     messages=len(conversation))

        try:
            resp = await self._client.post(self.chat_url, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(_describe(e)) from e

        if not resp.is_success:
            raise ProviderError(f"Ollama error {resp.status_code}: {resp.text}",
                                status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(f"Ollama returned invalid JSON: {e}",
                                status=resp.status_code) from e

        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        text = content if isinstance(content, str) else ""
        return ProviderResult(text=text, provider=self.name)
