"""
abant-http: interceptor 파이프라인 기반 API 게이트웨이 HTTP 클라이언트
"""

import logging as _logging

from ._types import ClientConfig, Interceptor
from .chain import InterceptorChain
from .client import BaseClient, HttpClient, create_client
from .config import DEFAULT_HEADERS, load_config
from .errors import (
    AbantHttpError,
    AlreadyConfigured,
    Cancelled,
    ChainError,
    ConfigurationError,
    FailureKind,
    HttpFailure,
    ProtocolError,
    TransportError,
)
from .interceptors import BASELINE, LoggingInterceptor, passthrough, reraise
from .logging import setup_logging
from .models import HttpRequest, HttpResponse, Outcome

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AbantHttpError",
    "AlreadyConfigured",
    "BASELINE",
    "BaseClient",
    "Cancelled",
    "ChainError",
    "ClientConfig",
    "ConfigurationError",
    "DEFAULT_HEADERS",
    "FailureKind",
    "HttpClient",
    "HttpFailure",
    "HttpRequest",
    "HttpResponse",
    "Interceptor",
    "InterceptorChain",
    "LoggingInterceptor",
    "Outcome",
    "ProtocolError",
    "TransportError",
    "create_client",
    "load_config",
    "passthrough",
    "reraise",
    "setup_logging",
    "__version__",
]
