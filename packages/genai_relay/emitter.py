"""Utilities for recording rewritten requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from .diagnostics import get_logger


@dataclass(frozen=True)
class RewriteRecord:
    """One rerouted request. URLs are already sanitized."""

    method: str
    original_url: str
    rewritten_url: str


class RequestEmitter(Protocol):
    def emit(self, record: RewriteRecord) -> None:  # pragma: no cover - interface
        ...


class NoopEmitter:
    def emit(self, record: RewriteRecord) -> None:
        return None


class LoggingEmitter:
    def __init__(self) -> None:
        self._logger = get_logger()

    def emit(self, record: RewriteRecord) -> None:
        self._logger.debug(
            "[NetworkInterceptor] Rerouting %s %s -> %s",
            record.method,
            record.original_url,
            record.rewritten_url,
        )


DEFAULT_EMITTER: RequestEmitter = NoopEmitter()
