"""Client-facing exports for genai_relay."""

from .config import (
    GLOBAL_CONFIG,
    ConfigStore,
    InterceptorConfig,
    RelaySettings,
    configure,
    configure_from_env,
    current_config,
    load_settings,
)
from .diagnostics import SecretRedactor, setup_logging_redaction
from .emitter import LoggingEmitter, RewriteRecord
from .errors import NetworkError, create_network_error, is_network_error
from .http_proxy import http_proxy, mount, unmount
from .interceptor import Interceptor
from .outbound import OutboundRequest
from .rewrite import TARGET_HOST, rewrite_url, targets_api_host
from .sanitizer import sanitize_url
from .service_proxy import relay_proxy
from .transport import AsyncInterceptingTransport, InterceptingTransport, wrap_transport

__all__ = [
    "AsyncInterceptingTransport",
    "ConfigStore",
    "GLOBAL_CONFIG",
    "InterceptingTransport",
    "Interceptor",
    "InterceptorConfig",
    "LoggingEmitter",
    "NetworkError",
    "OutboundRequest",
    "RelaySettings",
    "RewriteRecord",
    "SecretRedactor",
    "TARGET_HOST",
    "configure",
    "configure_from_env",
    "create_network_error",
    "current_config",
    "http_proxy",
    "is_network_error",
    "load_settings",
    "mount",
    "relay_proxy",
    "rewrite_url",
    "sanitize_url",
    "setup_logging_redaction",
    "targets_api_host",
    "unmount",
    "wrap_transport",
]
