"""Process-wide interceptor configuration.

The store publishes immutable :class:`InterceptorConfig` snapshots. Writers
replace the snapshot as a whole under a lock, so a reader never sees
``enabled=True`` together with a missing proxy URL.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from .diagnostics import get_logger
from .sanitizer import sanitize_url


ENV_ENABLED = "GENAI_RELAY_ENABLED"
ENV_PROXY_URL = "GENAI_RELAY_PROXY_URL"

logger = get_logger()


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InterceptorConfig:
    enabled: bool = False
    proxy_url: str | None = None

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.proxy_url)


DISABLED = InterceptorConfig(enabled=False, proxy_url=None)


def normalize_proxy_url(proxy_url: str | None) -> str | None:
    """Strip a single trailing slash; empty values become ``None``."""

    if not proxy_url:
        return None
    return proxy_url[:-1] if proxy_url.endswith("/") else proxy_url


def _parse_proxy_url(proxy_url: str) -> httpx.URL:
    url = httpx.URL(proxy_url)
    if not url.scheme or not url.host:
        raise httpx.InvalidURL("not an absolute URL")
    return url


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class ConfigStore:
    """Holds the current :class:`InterceptorConfig` for the interception shim."""

    def __init__(self, initial: InterceptorConfig = DISABLED) -> None:
        self._lock = threading.Lock()
        self._config = initial

    def snapshot(self) -> InterceptorConfig:
        return self._config

    def replace(self, config: InterceptorConfig) -> InterceptorConfig:
        with self._lock:
            previous = self._config
            self._config = config
        return previous

    def configure(self, enabled: bool, proxy_url: str | None) -> InterceptorConfig:
        """Validate and commit a new configuration, returning the committed value.

        Invalid proxy URLs never raise; they disable the interceptor and are
        reported through the diagnostics logger instead.
        """

        normalized = normalize_proxy_url(proxy_url)
        if not enabled or not normalized:
            self.replace(DISABLED)
            return DISABLED

        try:
            parsed = _parse_proxy_url(normalized)
        except httpx.InvalidURL:
            logger.error(
                "[NetworkInterceptor] Invalid proxy URL format: %s",
                sanitize_url(normalized),
            )
            logger.warning(
                "[NetworkInterceptor] Proxy interceptor disabled due to invalid URL configuration."
            )
            self.replace(DISABLED)
            return DISABLED

        if not parsed.scheme.startswith("http"):
            logger.warning(
                "[NetworkInterceptor] Invalid proxy URL protocol: %s:. "
                "Expected http: or https:. Disabling interceptor.",
                parsed.scheme,
            )
            self.replace(DISABLED)
            return DISABLED

        config = InterceptorConfig(enabled=True, proxy_url=normalized)
        self.replace(config)
        logger.debug(
            "[NetworkInterceptor] Configured. Target: %s", sanitize_url(normalized)
        )
        return config


# Global store used by the default wiring.
GLOBAL_CONFIG = ConfigStore()


def configure(enabled: bool, proxy_url: str | None) -> None:
    GLOBAL_CONFIG.configure(enabled, proxy_url)


def current_config() -> InterceptorConfig:
    return GLOBAL_CONFIG.snapshot()


# ---------------------------------------------------------------------------
# Settings source
# ---------------------------------------------------------------------------


class RelaySettings(BaseModel):
    enabled: bool = False
    proxy_url: str | None = None


def load_settings(env_path: str | None = None) -> RelaySettings:
    """Read relay settings from the environment, optionally seeded by a .env file."""

    if env_path and os.path.exists(env_path):
        load_dotenv(env_path)

    values = {}
    enabled = os.getenv(ENV_ENABLED)
    if enabled is not None and enabled.strip():
        values["enabled"] = enabled.strip()
    proxy_url = os.getenv(ENV_PROXY_URL)
    if proxy_url:
        values["proxy_url"] = proxy_url.strip()
    return RelaySettings.model_validate(values)


def configure_from_env(
    env_path: str | None = None, *, store: ConfigStore = GLOBAL_CONFIG
) -> InterceptorConfig:
    try:
        settings = load_settings(env_path)
    except ValidationError as exc:
        logger.error(
            "[NetworkInterceptor] Unreadable relay settings (%d errors). Disabling interceptor.",
            exc.error_count(),
        )
        store.replace(DISABLED)
        return DISABLED
    return store.configure(settings.enabled, settings.proxy_url)
