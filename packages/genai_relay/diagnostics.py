"""Leveled diagnostics for genai_relay.

All records go to the ``genai_relay`` logger and carry a ``category`` attribute
(``NETWORK`` or ``SYSTEM``) so an external log collector can route them.
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping

from .sanitizer import redact_text


LOGGER_NAME = "genai_relay"

CATEGORY_NETWORK = "NETWORK"
CATEGORY_SYSTEM = "SYSTEM"


class CategoryAdapter(logging.LoggerAdapter):
    """Stamp every record with a fixed diagnostic category."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("category", self.extra["category"])
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(category: str = CATEGORY_NETWORK) -> CategoryAdapter:
    return CategoryAdapter(logging.getLogger(LOGGER_NAME), {"category": category})


class SecretRedactor(logging.Filter):
    """Mask secrets that slipped into a formatted log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        if not message:
            return True

        redacted = redact_text(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging_redaction() -> None:
    """Attach :class:`SecretRedactor` to the root handlers and the package logger."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        if not any(isinstance(f, SecretRedactor) for f in handler.filters):
            handler.addFilter(SecretRedactor())

    package_logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(f, SecretRedactor) for f in package_logger.filters):
        package_logger.addFilter(SecretRedactor())
