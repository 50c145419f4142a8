"""Decision core shared by every interception surface.

For each outbound request the :class:`Interceptor` reads one configuration
snapshot and either passes the request through or derives a rewritten copy.
Transport failures on rewritten requests are re-raised as
:class:`~genai_relay.errors.NetworkError`; failures on pass-through requests
propagate untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx
import requests

from .config import GLOBAL_CONFIG, ConfigStore
from .diagnostics import get_logger
from .emitter import DEFAULT_EMITTER, RequestEmitter, RewriteRecord
from .errors import NetworkError, format_network_error_message
from .outbound import OutboundRequest, Target
from .rewrite import rewrite_url, targets_api_host
from .sanitizer import sanitize_url


T = TypeVar("T")

TRANSPORT_ERRORS = (httpx.TransportError, requests.RequestException)

logger = get_logger()


@dataclass(frozen=True)
class Dispatch:
    """What to send: the (possibly rewritten) request plus how it was derived."""

    descriptor: OutboundRequest
    original: OutboundRequest
    proxy_url: str | None = None

    @property
    def rewritten(self) -> bool:
        return self.descriptor is not self.original


class Interceptor:
    def __init__(
        self,
        store: ConfigStore = GLOBAL_CONFIG,
        emitter: RequestEmitter = DEFAULT_EMITTER,
    ) -> None:
        self.store = store
        self.emitter = emitter

    # Rewriting -------------------------------------------------------------

    def prepare(self, descriptor: OutboundRequest) -> Dispatch:
        config = self.store.snapshot()
        if not config.active or not targets_api_host(descriptor.url):
            return Dispatch(descriptor=descriptor, original=descriptor)

        try:
            new_url = rewrite_url(descriptor.url, config.proxy_url)
            rewritten = descriptor.with_url(new_url)
        except Exception as exc:
            logger.error(
                "[NetworkInterceptor] Failed to rewrite URL. Falling back to original URL. "
                "originalUrl=%s error=%s",
                sanitize_url(descriptor.url),
                type(exc).__name__,
            )
            return Dispatch(descriptor=descriptor, original=descriptor)

        self.emitter.emit(
            RewriteRecord(
                method=descriptor.method,
                original_url=sanitize_url(descriptor.url),
                rewritten_url=sanitize_url(new_url),
            )
        )
        return Dispatch(
            descriptor=rewritten, original=descriptor, proxy_url=config.proxy_url
        )

    # Failure classification ------------------------------------------------

    def network_error(self, error: BaseException, dispatch: Dispatch) -> NetworkError:
        logger.error(
            "[NetworkInterceptor] Fetch request failed after URL rewrite. "
            "originalUrl=%s rewrittenUrl=%s proxyUrl=%s error=%s",
            sanitize_url(dispatch.original.url),
            sanitize_url(dispatch.descriptor.url),
            sanitize_url(dispatch.proxy_url) if dispatch.proxy_url else "[not configured]",
            type(error).__name__,
        )
        message = format_network_error_message(
            error, proxy_url=dispatch.proxy_url, target_url=dispatch.descriptor.url
        )
        return NetworkError(message, cause=error)

    # Dispatch --------------------------------------------------------------

    def call(self, dispatch: Dispatch, send: Callable[[Any], T]) -> T:
        payload = dispatch.descriptor.request
        if not dispatch.rewritten:
            return send(payload)
        try:
            return send(payload)
        except TRANSPORT_ERRORS as exc:
            raise self.network_error(exc, dispatch) from exc

    async def acall(self, dispatch: Dispatch, send: Callable[[Any], Awaitable[T]]) -> T:
        payload = dispatch.descriptor.request
        if not dispatch.rewritten:
            return await send(payload)
        try:
            return await send(payload)
        except TRANSPORT_ERRORS as exc:
            raise self.network_error(exc, dispatch) from exc

    # Fetch-style entry points ---------------------------------------------

    def fetch(
        self, target: Target, *, client: httpx.Client, **options: Any
    ) -> httpx.Response:
        """Send ``target`` (URL string, ``httpx.URL`` or ``httpx.Request``) via ``client``.

        ``options`` are the keyword arguments of ``client.build_request`` plus
        ``method``; they are ignored when ``target`` is already a request.
        """

        dispatch = self.prepare(OutboundRequest.of(target, options))
        request = dispatch.descriptor.build(client)
        return self.call(dispatch, lambda _: client.send(request))

    async def afetch(
        self, target: Target, *, client: httpx.AsyncClient, **options: Any
    ) -> httpx.Response:
        dispatch = self.prepare(OutboundRequest.of(target, options))
        request = dispatch.descriptor.build(client)
        return await self.acall(dispatch, lambda _: client.send(request))


def prepare_request(
    interceptor: Interceptor,
    request: httpx.Request | requests.PreparedRequest,
) -> Dispatch:
    return interceptor.prepare(OutboundRequest.from_request(request))
