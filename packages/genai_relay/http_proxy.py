"""Process-wide HTTP interception for genai_relay.

This module monkey patches the ``send`` methods of the two HTTP clients the
Google GenAI stack and most applications use, ``httpx`` and ``requests``. Every
patched call goes through an :class:`~genai_relay.interceptor.Interceptor`,
which decides whether the request must be rerouted to the configured proxy.

Prefer :class:`~genai_relay.transport.InterceptingTransport` when the client
construction is under your control; patching is for clients created by third
party code.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable

import httpx
import requests

from .diagnostics import CATEGORY_SYSTEM, get_logger
from .interceptor import Interceptor, prepare_request


INTERCEPTOR_MARKER = "__genai_relay_interceptor__"

logger = get_logger(CATEGORY_SYSTEM)

_lock = threading.Lock()
_restore_callbacks: list[Callable[[], None]] = []


# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------


def is_interceptor(func: Any) -> bool:
    return bool(getattr(func, INTERCEPTOR_MARKER, False))


def _install(owner: type, name: str, replacement: Any) -> bool:
    """Set ``owner.name``; bypass a rejecting metaclass before giving up."""

    try:
        setattr(owner, name, replacement)
        return True
    except (AttributeError, TypeError):
        pass
    try:
        type.__setattr__(owner, name, replacement)
        return True
    except (AttributeError, TypeError) as exc:
        logger.critical(
            "[NetworkInterceptor] Critical: Failed to mount interceptor on %s.%s (%s)",
            owner.__name__,
            name,
            exc,
        )
        return False


def _noop() -> None:
    return None


# ---------------------------------------------------------------------------
# httpx patching
# ---------------------------------------------------------------------------


def patch_httpx(*, interceptor: Interceptor) -> Callable[[], None]:
    client_cls = httpx.Client
    async_client_cls = httpx.AsyncClient

    original_send = client_cls.send
    original_async_send = async_client_cls.send

    if is_interceptor(original_send) or is_interceptor(original_async_send):
        return _noop

    def patched_send(self, request, **kwargs):
        dispatch = prepare_request(interceptor, request)
        return interceptor.call(
            dispatch, lambda req: original_send(self, req, **kwargs)
        )

    async def patched_async_send(self, request, **kwargs):
        dispatch = prepare_request(interceptor, request)
        return await interceptor.acall(
            dispatch, lambda req: original_async_send(self, req, **kwargs)
        )

    setattr(patched_send, INTERCEPTOR_MARKER, True)
    setattr(patched_async_send, INTERCEPTOR_MARKER, True)

    if not _install(client_cls, "send", patched_send):
        return _noop
    if not _install(async_client_cls, "send", patched_async_send):
        _install(client_cls, "send", original_send)
        return _noop

    def restore():
        _install(client_cls, "send", original_send)
        _install(async_client_cls, "send", original_async_send)

    return restore


# ---------------------------------------------------------------------------
# requests patching
# ---------------------------------------------------------------------------


def patch_requests(*, interceptor: Interceptor) -> Callable[[], None]:
    session_cls = requests.Session
    original_send = session_cls.send

    if is_interceptor(original_send):
        return _noop

    def patched_send(self, request, **kwargs):
        dispatch = prepare_request(interceptor, request)
        return interceptor.call(
            dispatch, lambda req: original_send(self, req, **kwargs)
        )

    setattr(patched_send, INTERCEPTOR_MARKER, True)

    if not _install(session_cls, "send", patched_send):
        return _noop

    def restore():
        _install(session_cls, "send", original_send)

    return restore


# ---------------------------------------------------------------------------
# Mounting
# ---------------------------------------------------------------------------


def is_mounted() -> bool:
    return is_interceptor(httpx.Client.send) or is_interceptor(requests.Session.send)


def mount(interceptor: Interceptor | None = None) -> bool:
    """Install the interceptor process wide. Returns False when already mounted."""

    with _lock:
        if is_mounted():
            return False
        interceptor = interceptor if interceptor is not None else Interceptor()
        _restore_callbacks.append(patch_httpx(interceptor=interceptor))
        _restore_callbacks.append(patch_requests(interceptor=interceptor))
        mounted = is_mounted()

    if mounted:
        logger.info("[NetworkInterceptor] Network interceptor mounted.")
    return mounted


def unmount() -> None:
    with _lock:
        while _restore_callbacks:
            _restore_callbacks.pop()()


@contextmanager
def http_proxy(interceptor: Interceptor | None = None):
    """Enable HTTP interception within the managed block."""

    mounted = mount(interceptor)
    try:
        yield
    finally:
        if mounted:
            unmount()
