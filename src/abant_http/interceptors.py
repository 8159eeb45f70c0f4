"""
기본 제공 interceptor
- passthrough / reraise: 양쪽 체인의 항등 기준선
- LoggingInterceptor: 요청/응답/실패를 로깅하고 값은 그대로 통과 (opt-in)
"""

from __future__ import annotations

import logging
from typing import NoReturn, TypeVar

from ._types import Interceptor
from .errors import HttpFailure
from .models import HttpRequest, HttpResponse

T = TypeVar("T")


def passthrough(value: T) -> T:
    return value


def reraise(failure: HttpFailure) -> NoReturn:
    raise failure


BASELINE = Interceptor(on_fulfilled=passthrough, on_rejected=reraise)


class LoggingInterceptor:
    """
    요청/응답을 로깅하는 interceptor 쌍

    사용법:
        logging_interceptor = LoggingInterceptor()
        client.interceptors.request.add(logging_interceptor.request)
        client.interceptors.response.add(logging_interceptor.response)
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self.request = Interceptor(self.on_request, self.on_failure)
        self.response = Interceptor(self.on_response, self.on_failure)

    def on_request(self, request: HttpRequest) -> HttpRequest:
        self.logger.log(
            self.level,
            f"{request.method} {request.url}",
            extra={"method": request.method, "url": request.url},
        )
        return request

    def on_response(self, response: HttpResponse) -> HttpResponse:
        extra: dict = {"status_code": response.status_code}
        target = ""
        if response.request is not None:
            target = f"{response.request.method} {response.request.url} "
            extra.update(method=response.request.method, url=response.request.url)
        self.logger.log(self.level, f"{target}-> {response.status_code}", extra=extra)
        return response

    def on_failure(self, failure: HttpFailure) -> NoReturn:
        extra: dict = {
            "failure_kind": failure.kind.value,
            "status_code": failure.status_code,
        }
        if failure.request is not None:
            extra.update(method=failure.request.method, url=failure.request.url)
        self.logger.warning(f"request failed: {failure}", extra=extra)
        raise failure
