"""Classified errors raised across the genai_relay boundary."""

from __future__ import annotations

import httpx
import requests

from .sanitizer import redact_text, sanitize_url


NETWORK_ERROR_NAME = "NetworkError"

TROUBLESHOOTING_STEPS = (
    "Verify proxy server is running and accessible",
    "Check proxy URL format is correct (include protocol: http:// or https://)",
    "Ensure proxy endpoint path matches your configuration",
    "Check network connectivity and firewall settings",
    "Verify CORS headers if using browser-based proxy",
)


class NetworkError(Exception):
    """A transport failure on a request that was rerouted to the proxy.

    Callers branch on ``name`` (or the class) rather than parsing the message.
    ``cause`` keeps the original transport exception.
    """

    name = NETWORK_ERROR_NAME

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


def _error_text(error: BaseException) -> str:
    # Transport messages can echo the request URL, query string included.
    return redact_text(str(error)) or type(error).__name__


def format_network_error_message(
    error: BaseException, *, proxy_url: str | None, target_url: str
) -> str:
    """Build the multi-line diagnostic shown to users for a failed proxied request.

    Both URLs are sanitized here; callers pass them raw.
    """

    sanitized_proxy = sanitize_url(proxy_url) if proxy_url else "[not configured]"
    sanitized_target = sanitize_url(target_url)

    lines = [
        f"Network request failed. Original error: {_error_text(error)}",
        "",
        "Proxy Configuration:",
        f"  Proxy URL: {sanitized_proxy}",
        f"  Target URL: {sanitized_target}",
        "",
        "Troubleshooting:",
    ]
    lines.extend(
        f"  {index}. {step}" for index, step in enumerate(TROUBLESHOOTING_STEPS, 1)
    )
    return "\n".join(lines)


def create_network_error(
    context_message: str, original: BaseException | None = None
) -> NetworkError:
    if original is not None:
        message = f"{context_message} Original error: {_error_text(original)}"
    else:
        message = context_message
    return NetworkError(message, cause=original)


def is_network_error(error: object) -> bool:
    """Return True for classified network errors and raw transport failures."""

    if not isinstance(error, BaseException):
        return False
    if getattr(error, "name", None) == NETWORK_ERROR_NAME:
        return True
    return isinstance(error, (httpx.TransportError, requests.ConnectionError))
