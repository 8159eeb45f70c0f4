"""HTTP 클라이언트 re-export 및 팩토리."""

from __future__ import annotations

import httpx

from abant_http._types import ClientConfig
from abant_http.client._base import BaseClient, Interceptors, resolve_url
from abant_http.client.httpx_client import HttpClient
from abant_http.interceptors import BASELINE


def create_client(
    config: ClientConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HttpClient:
    """기본(pass-through) interceptor 가 양쪽 체인에 설치된 클라이언트 생성."""
    client = HttpClient(config, transport=transport)
    client.interceptors.request.add(BASELINE)
    client.interceptors.response.add(BASELINE)
    return client


__all__ = [
    "BaseClient",
    "HttpClient",
    "Interceptors",
    "create_client",
    "resolve_url",
]
