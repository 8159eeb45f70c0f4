"""
로깅 설정 유틸
- setup_logging()으로 abant_http 로거 (선택적으로 httpx 로거) 설정
- JSON 포맷 옵션: 요청 필드(method/url/status_code/failure_kind)를 구조화해서 출력
- 라이브러리 자체는 NullHandler 만 단다. 핸들러 설정은 앱의 몫
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Literal

ABANT_LOGGER_NAME = "abant_http"
HTTPX_LOGGER_NAME = "httpx"

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# LoggingInterceptor 가 extra= 로 넘기는 요청 필드
REQUEST_FIELDS = ("method", "url", "status_code", "failure_kind")


class JSONFormatter(logging.Formatter):
    """JSON 구조화 로그 포매터"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, DEFAULT_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def _make_handler(format: str, stream: object) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stderr)
    if format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        )
    return handler


def setup_logging(
    level: int | str = logging.INFO,
    format: Literal["text", "json"] = "text",
    stream: object = None,
    include_httpx: bool = False,
) -> logging.Logger:
    """
    abant_http 루트 로거를 설정한다.

    Args:
        level: 로그 레벨 (예: logging.DEBUG, "DEBUG")
        format: 로그 포맷 ("text" 또는 "json")
        stream: 출력 스트림 (기본: sys.stderr)
        include_httpx: True면 httpx 로거도 같은 핸들러/레벨로 설정

    Returns:
        설정된 abant_http 루트 로거
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    names = [ABANT_LOGGER_NAME]
    if include_httpx:
        names.append(HTTPX_LOGGER_NAME)

    handler = _make_handler(format, stream)
    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # 기존 핸들러 제거 (중복 방지)
        logger.handlers.clear()
        logger.addHandler(handler)

    return logging.getLogger(ABANT_LOGGER_NAME)
