"""Normalized view of an outbound request.

Callers hand the shim a bare URL string, an ``httpx.URL`` or a full request
object (``httpx.Request`` or a prepared ``requests`` request). Each shape has
its own constructor and all of them end up as an :class:`OutboundRequest`
before any rewriting happens.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import httpx
import requests


RequestObject = httpx.Request | requests.PreparedRequest
Target = str | httpx.URL | httpx.Request | requests.PreparedRequest


def _clone_httpx_request(request: httpx.Request, url: httpx.URL) -> httpx.Request:
    headers = request.headers.copy()
    # A request built from an existing stream skips header preparation, so the
    # Host header has to follow the new URL explicitly.
    headers["Host"] = url.netloc.decode("ascii")
    return httpx.Request(
        request.method,
        url,
        headers=headers,
        stream=request.stream,
        extensions=dict(request.extensions),
    )


def _clone_prepared_request(
    request: requests.PreparedRequest, url: str
) -> requests.PreparedRequest:
    clone = request.copy()
    clone.url = url
    return clone


@dataclass(frozen=True)
class OutboundRequest:
    url: str
    request: RequestObject | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    # Constructors ----------------------------------------------------------

    @classmethod
    def from_str(
        cls, url: str, options: Mapping[str, Any] | None = None
    ) -> "OutboundRequest":
        return cls(url=url, options=dict(options or {}))

    @classmethod
    def from_url(
        cls, url: httpx.URL, options: Mapping[str, Any] | None = None
    ) -> "OutboundRequest":
        return cls(url=str(url), options=dict(options or {}))

    @classmethod
    def from_request(
        cls, request: RequestObject, options: Mapping[str, Any] | None = None
    ) -> "OutboundRequest":
        return cls(url=str(request.url), request=request, options=dict(options or {}))

    @classmethod
    def of(
        cls, target: Target, options: Mapping[str, Any] | None = None
    ) -> "OutboundRequest":
        if isinstance(target, str):
            return cls.from_str(target, options)
        if isinstance(target, httpx.URL):
            return cls.from_url(target, options)
        if isinstance(target, (httpx.Request, requests.PreparedRequest)):
            return cls.from_request(target, options)
        raise TypeError(f"unsupported request target: {type(target).__name__}")

    # Accessors -------------------------------------------------------------

    @property
    def method(self) -> str:
        if self.request is not None:
            return str(self.request.method or "GET").upper()
        return str(self.options.get("method", "GET")).upper()

    # Derivation ------------------------------------------------------------

    def with_url(self, url: str) -> "OutboundRequest":
        """Return a copy aimed at ``url``; a bound request object is cloned."""

        parsed = httpx.URL(url)
        if not parsed.is_absolute_url:
            raise httpx.InvalidURL("rewritten URL is not absolute")

        if isinstance(self.request, httpx.Request):
            return replace(
                self, url=url, request=_clone_httpx_request(self.request, parsed)
            )
        if isinstance(self.request, requests.PreparedRequest):
            return replace(
                self, url=url, request=_clone_prepared_request(self.request, url)
            )
        return replace(self, url=url)

    def build(self, client: httpx.Client | httpx.AsyncClient) -> httpx.Request:
        """Materialize an ``httpx.Request`` for dispatch through ``client``."""

        if isinstance(self.request, httpx.Request):
            return self.request
        if self.request is not None:
            raise TypeError("a prepared requests request cannot be sent through httpx")

        options = dict(self.options)
        method = options.pop("method", "GET")
        return client.build_request(method, self.url, **options)
