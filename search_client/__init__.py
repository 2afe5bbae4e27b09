"""
Search API Client Library

An async client for a multi-region search API.
Provides host failover, per-host health tracking, escalating timeouts and metrics.
"""

import logging

from .client import SearchClient
from .config import ClientConfig
from .hosts import CallType, StatefulHost, READ_ONLY, WRITE_ONLY, READ_WRITE, build_default_hosts
from .retry_strategy import RetryStrategy, RetryConfig, RetryOutcome, classify
from .transport import Transport
from .requester import AiohttpRequester, HttpResponse, Requester
from .request_options import RequestOptions
from .metrics import MetricsCollector
from .exceptions import (
    SearchClientError,
    HttpError,
    UnreachableHostsError,
    DecodeError,
    DeadlineExceededError,
    InvalidConfigurationError
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Main client
    "SearchClient",
    "ClientConfig",

    # Components
    "Transport",
    "RetryStrategy",
    "RetryConfig",
    "RetryOutcome",
    "classify",
    "CallType",
    "StatefulHost",
    "READ_ONLY",
    "WRITE_ONLY",
    "READ_WRITE",
    "build_default_hosts",
    "AiohttpRequester",
    "HttpResponse",
    "Requester",
    "RequestOptions",
    "MetricsCollector",

    # Exceptions
    "SearchClientError",
    "HttpError",
    "UnreachableHostsError",
    "DecodeError",
    "DeadlineExceededError",
    "InvalidConfigurationError",
]
