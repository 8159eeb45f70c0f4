"""
환경 변수 기반 설정 로더
- 클라이언트 코어는 환경을 직접 읽지 않는다. 앱 시작 시 load_config() 결과를 주입한다
- ABANT_API_PROXY (필수), ABANT_API_TIMEOUT, ABANT_API_HEADERS (JSON 객체)
"""

from __future__ import annotations

import json
import os
from typing import Mapping

from ._types import ClientConfig
from .errors import ConfigurationError
from .models import merge_headers

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

ENV_BASE_URL = "ABANT_API_PROXY"
ENV_TIMEOUT = "ABANT_API_TIMEOUT"
ENV_HEADERS = "ABANT_API_HEADERS"


def load_config(environ: Mapping[str, str] | None = None) -> ClientConfig:
    """
    환경 변수에서 ClientConfig 를 만든다.

    Args:
        environ: 읽을 매핑 (기본: os.environ)

    Raises:
        ConfigurationError: base URL 이 없거나 값 형식이 잘못된 경우
    """
    env = os.environ if environ is None else environ

    base_url = env.get(ENV_BASE_URL, "").strip()
    if not base_url:
        raise ConfigurationError(
            f"base URL이 필요합니다. {ENV_BASE_URL} 환경변수를 설정하세요."
        )

    timeout: float | None = 30.0
    raw_timeout = env.get(ENV_TIMEOUT)
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"{ENV_TIMEOUT} must be a number, got {raw_timeout!r}"
            ) from e
        if timeout <= 0:
            timeout = None

    headers = dict(DEFAULT_HEADERS)
    raw_headers = env.get(ENV_HEADERS)
    if raw_headers:
        try:
            extra = json.loads(raw_headers)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{ENV_HEADERS} is not valid JSON: {e}") from e
        if not isinstance(extra, dict) or not all(
            isinstance(v, str) for v in extra.values()
        ):
            raise ConfigurationError(f"{ENV_HEADERS} must be a JSON object of strings")
        headers = merge_headers(headers, extra)

    return ClientConfig(base_url=base_url, headers=headers, timeout=timeout)
