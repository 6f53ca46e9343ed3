"""Process-wide configuration.

Read once from the environment at startup and passed explicitly to the
router and provider adapters. Instances are frozen; nothing mutates them
after the app has started.
"""

import os
from dataclasses import dataclass

DEFAULT_PRIMARY_MODEL = "gpt-4o-mini"
DEFAULT_SECONDARY_BASE_URL = "http://localhost:11434"
DEFAULT_SECONDARY_MODEL = "llama3.2"
DEFAULT_CORS_ORIGINS = "http://localhost:8501,http://localhost:5173"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one provider role.

    Attributes:
        base_url: Endpoint root. Empty means the SDK default.
        model: Model identifier sent with every request.
        enabled: Whether the provider may be called at all.
        api_key: Credential, if the provider needs one.
    """
    base_url: str
    model: str
    enabled: bool
    api_key: str = ""

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        return (
            f"ProviderConfig(base_url={self.base_url!r}, model={self.model!r}, "
            f"enabled={self.enabled!r})"
        )


@dataclass(frozen=True)
class Settings:
    """Everything the gateway reads from the environment."""
    primary: ProviderConfig
    secondary: ProviderConfig
    timeout: float = 60.0
    cors_origins: tuple[str, ...] = ()
    max_body_bytes: int = 1024 * 1024
    log_level: str = "INFO"
    port: int = 8080

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (call after load_dotenv)."""
        api_key = _env("OPENAI_API_KEY")
        primary = ProviderConfig(
            base_url=_env("OPENAI_BASE_URL"),
            model=_env("OPENAI_MODEL") or DEFAULT_PRIMARY_MODEL,
            enabled=bool(api_key),
            api_key=api_key,
        )
        secondary = ProviderConfig(
            base_url=(_env("OLLAMA_BASE_URL") or DEFAULT_SECONDARY_BASE_URL).rstrip("/"),
            model=_env("OLLAMA_MODEL") or DEFAULT_SECONDARY_MODEL,
            enabled=True,
        )
        origins = _env("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)

        return cls(
            primary=primary,
            secondary=secondary,
            timeout=float(_env("LLM_TIMEOUT") or "60"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            max_body_bytes=int(_env("MAX_BODY_BYTES") or str(1024 * 1024)),
            log_level=(_env("LOG_LEVEL") or "INFO").upper(),
            port=int(_env("PORT") or "8080"),
        )
