"""httpx transports that reroute Gemini API traffic.

Wrap the real transport once at startup and hand the wrapped transport to the
clients that should be proxied::

    transport = wrap_transport(httpx.HTTPTransport())
    client = httpx.Client(transport=transport)
"""

from __future__ import annotations

from typing import overload

import httpx

from .interceptor import Interceptor, prepare_request


class InterceptingTransport(httpx.BaseTransport):
    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        *,
        interceptor: Interceptor | None = None,
    ) -> None:
        self._transport = transport if transport is not None else httpx.HTTPTransport()
        self._interceptor = interceptor if interceptor is not None else Interceptor()

    @property
    def wrapped(self) -> httpx.BaseTransport:
        return self._transport

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        dispatch = prepare_request(self._interceptor, request)
        return self._interceptor.call(dispatch, self._transport.handle_request)

    def close(self) -> None:
        self._transport.close()


class AsyncInterceptingTransport(httpx.AsyncBaseTransport):
    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        interceptor: Interceptor | None = None,
    ) -> None:
        self._transport = (
            transport if transport is not None else httpx.AsyncHTTPTransport()
        )
        self._interceptor = interceptor if interceptor is not None else Interceptor()

    @property
    def wrapped(self) -> httpx.AsyncBaseTransport:
        return self._transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        dispatch = prepare_request(self._interceptor, request)
        return await self._interceptor.acall(
            dispatch, self._transport.handle_async_request
        )

    async def aclose(self) -> None:
        await self._transport.aclose()


@overload
def wrap_transport(
    transport: httpx.BaseTransport, *, interceptor: Interceptor | None = None
) -> httpx.BaseTransport: ...


@overload
def wrap_transport(
    transport: httpx.AsyncBaseTransport, *, interceptor: Interceptor | None = None
) -> httpx.AsyncBaseTransport: ...


def wrap_transport(
    transport: httpx.BaseTransport | httpx.AsyncBaseTransport,
    *,
    interceptor: Interceptor | None = None,
) -> httpx.BaseTransport | httpx.AsyncBaseTransport:
    """Wrap ``transport`` in the matching intercepting transport, at most once."""

    if isinstance(transport, (InterceptingTransport, AsyncInterceptingTransport)):
        return transport
    if isinstance(transport, httpx.AsyncBaseTransport):
        return AsyncInterceptingTransport(transport, interceptor=interceptor)
    return InterceptingTransport(transport, interceptor=interceptor)
