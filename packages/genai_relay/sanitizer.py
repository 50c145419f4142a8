"""URL redaction for diagnostic text.

Everything that puts a URL into a log line or an error message goes through
:func:`sanitize_url` first. Unparseable input is never partially redacted; a
fixed placeholder is returned instead.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


MALFORMED_URL_PLACEHOLDER = "[malformed URL - unable to sanitize safely]"
REDACTION_FRAGMENT = "sensitive_params_removed"

SENSITIVE_PARAMS = frozenset(
    {
        "key",
        "apikey",
        "api_key",
        "token",
        "access_token",
        "auth",
        "authorization",
    }
)


REDACTED = "***REDACTED***"

_SECRET_ASSIGNMENT = re.compile(
    r"(?i)\b(api[_-]?key|apikey|access_token|token|key|auth|authorization)"
    r"(\s*[=:]\s*)((?:bearer|basic|token)\s+)?([^\s&#\"',)]+)"
)
_URL_USERINFO = re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://)[^/\s@]+@")


def is_sensitive_param(name: str) -> bool:
    return name.lower() in SENSITIVE_PARAMS


def redact_text(text: str) -> str:
    """Mask secrets inside free text such as an exception message.

    Handles ``key=value`` style assignments, including query strings, and
    ``user:password@`` credentials in URLs. An auth scheme such as ``Bearer``
    is kept and the credential after it is masked.
    """

    redacted = _SECRET_ASSIGNMENT.sub(
        lambda m: f"{m.group(1)}{m.group(2)}{m.group(3) or ''}{REDACTED}", text
    )
    return _URL_USERINFO.sub(r"\1", redacted)


def sanitize_url(url: str) -> str:
    """Return ``url`` without embedded credentials or secret query parameters.

    When at least one query parameter was dropped the fragment is replaced by
    ``#sensitive_params_removed`` so readers of the output know redaction
    happened.
    """

    try:
        parts = urlsplit(str(url))
        if not parts.scheme or not parts.netloc:
            return MALFORMED_URL_PLACEHOLDER
        # Touch the port so invalid values raise here rather than downstream.
        parts.port

        netloc = parts.netloc.rpartition("@")[2]
        params = parse_qsl(parts.query, keep_blank_values=True)
        kept = [(name, value) for name, value in params if not is_sensitive_param(name)]

        if len(kept) != len(params):
            query = urlencode(kept)
            fragment = REDACTION_FRAGMENT
        else:
            query = parts.query
            fragment = parts.fragment

        return urlunsplit((parts.scheme, netloc, parts.path, query, fragment))
    except (ValueError, TypeError):
        return MALFORMED_URL_PLACEHOLDER
