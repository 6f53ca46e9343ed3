"""Decides whether a primary failure should be retried on the secondary.

Auth, quota and server-side failures, plus anything that looks like a
connection problem, are fallback-worthy. Everything else is treated as a
caller error and surfaced instead of masked.
"""

from backend.core.llm_adapter import ProviderError

FALLBACK_STATUS_CODES = frozenset({401, 429, 500, 502, 503, 504})

# Matched case-insensitively as substrings of the error message
FALLBACK_MESSAGE_PATTERNS = (
    # connection refused
    "econnrefused",
    "connection refused",
    "connection error",
    # timeout
    "etimedout",
    "timed out",
    "timeout",
    # DNS
    "enotfound",
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    # generic transport
    "fetch failed",
)


def is_fallback_worthy(error: ProviderError) -> bool:
    """True if the secondary provider should be tried after this error."""
    if error.status in FALLBACK_STATUS_CODES:
        return True

    text = str(error).lower()
    return any(pattern in text for pattern in FALLBACK_MESSAGE_PATTERNS)
