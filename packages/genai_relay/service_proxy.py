"""User-facing context manager configuring and mounting the relay."""

from __future__ import annotations

from contextlib import contextmanager

from .config import GLOBAL_CONFIG, ConfigStore
from .emitter import DEFAULT_EMITTER, RequestEmitter
from .http_proxy import http_proxy
from .interceptor import Interceptor


@contextmanager
def relay_proxy(
    proxy_url: str | None,
    *,
    enabled: bool = True,
    store: ConfigStore = GLOBAL_CONFIG,
    emitter: RequestEmitter = DEFAULT_EMITTER,
):
    """Route Gemini API traffic to ``proxy_url`` inside the managed block.

    The previous configuration is restored on exit. If the interceptor was
    already mounted by someone else it stays mounted, bound to its own store.
    """

    previous = store.snapshot()
    config = store.configure(enabled, proxy_url)
    try:
        with http_proxy(Interceptor(store=store, emitter=emitter)):
            yield config
    finally:
        store.replace(previous)
