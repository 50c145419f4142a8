"""URL rewriting for Gemini API traffic routed through a proxy.

The rules below are plain substring replacements applied in a fixed order.
Each rule sees the output of the previous one. The set of malformed shapes they
repair comes from real gateway deployments (OpenAI-style relays, Vertex AI
express endpoints), so the list is closed and must keep its order.

Running the chain twice is not always a no-op. With a proxy base of
``https://p.example/v1/v1beta`` the first pass yields ``/v1/v1beta/models/...``
and a second pass collapses that to ``/v1/models/...``. The interceptor only
ever rewrites URLs that still point at the API host, so it applies one pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit


TARGET_HOST = "generativelanguage.googleapis.com"
TARGET_ORIGIN = f"https://{TARGET_HOST}"

VERTEX_HOST = "aiplatform.googleapis.com"
PUBLISHER_SEGMENT = "publishers/google"

# Any spelling of the API origin: scheme and host in any case, optional
# userinfo, optional explicit port.
_TARGET_ORIGIN_PATTERN = re.compile(
    r"^[a-z][a-z0-9+.-]*://(?:[^/?#@]*@)?"
    + re.escape(TARGET_HOST)
    + r"(?::\d*)?(?=[/?#]|$)",
    re.IGNORECASE,
)
_REPEATED_SLASHES = re.compile(r"([^:]/)/+")


def targets_api_host(url: str) -> bool:
    """Return True when ``url`` points at the Gemini API host."""

    try:
        host = urlsplit(str(url)).hostname
    except ValueError:
        return False
    return (host or "").lower() == TARGET_HOST


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RewriteRule:
    name: str
    apply: Callable[[str], str]


def _replace_first(url: str, old: str, new: str) -> str:
    return url.replace(old, new, 1)


def _collapse_version_prefix(url: str) -> str:
    # A proxy base ending in /v1 plus an SDK path starting with /v1beta.
    if "/v1/v1beta/" in url:
        return _replace_first(url, "/v1/v1beta/", "/v1/")
    if "/v1/v1/" in url:
        return _replace_first(url, "/v1/v1/", "/v1/")
    return url


def _inject_publisher(url: str) -> str:
    if VERTEX_HOST in url and PUBLISHER_SEGMENT not in url and "/v1/models/" in url:
        return _replace_first(url, "/v1/models/", "/v1/publishers/google/models/")
    return url


def _collapse_publisher_version(url: str) -> str:
    if "/publishers/google/v1beta/models" in url:
        return _replace_first(
            url, "/publishers/google/v1beta/models", "/publishers/google/models"
        )
    if "/publishers/google/v1/models" in url:
        return _replace_first(
            url, "/publishers/google/v1/models", "/publishers/google/models"
        )
    return url


def _collapse_duplicate_v1beta(url: str) -> str:
    if "/v1beta/v1beta" in url:
        return _replace_first(url, "/v1beta/v1beta", "/v1beta")
    return url


def _collapse_slashes(url: str) -> str:
    # Keeps the double slash of "scheme://".
    return _REPEATED_SLASHES.sub(r"\1", url)


PATH_RULES: tuple[RewriteRule, ...] = (
    RewriteRule("version-prefix", _collapse_version_prefix),
    RewriteRule("publisher-injection", _inject_publisher),
    RewriteRule("publisher-version", _collapse_publisher_version),
    RewriteRule("duplicate-v1beta", _collapse_duplicate_v1beta),
    RewriteRule("repeated-slashes", _collapse_slashes),
)


def rewrite_url(original_url: str, proxy_base: str) -> str:
    """Point ``original_url`` at ``proxy_base`` and repair the resulting path.

    The origin is matched however the caller spelled it, so
    ``https://GenerativeLanguage.googleapis.com:443/...`` is rerouted the
    same way as the canonical form.
    """

    url = _TARGET_ORIGIN_PATTERN.sub(lambda _: proxy_base, original_url, count=1)
    for rule in PATH_RULES:
        url = rule.apply(url)
    return url
