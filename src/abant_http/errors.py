"""
HTTP 파이프라인 에러 클래스
- 전송/프로토콜/체인/취소 실패를 HttpFailure 계층으로 표현
- 재시도 가능 여부(retryable) 판별 포함
- 설정 오류는 HttpFailure 와 별개 (호출 코드의 버그)
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import HttpRequest, HttpResponse

# 재시도 대상 HTTP 상태 코드
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class AbantHttpError(Exception):
    """abant_http 의 모든 예외의 루트"""


class ConfigurationError(AbantHttpError):
    """설정 값이 없거나 잘못된 경우"""


class AlreadyConfigured(ConfigurationError):
    """이미 설정된 클라이언트에 configure() 를 다시 호출한 경우"""


class FailureKind(str, enum.Enum):
    """실패 종류"""
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    CHAIN = "chain"
    CANCELLED = "cancelled"


class HttpFailure(AbantHttpError):
    """
    요청 파이프라인의 실패 값

    response 체인의 on_rejected 로 전달되고, 복구되지 않으면 호출자에게 raise 된다.

    Attributes:
        kind: 실패 종류
        message: 에러 메시지
        request: 실패를 일으킨 (최종) 요청. 요청 빌드 전이면 None
        response: 부분 응답 (ProtocolError 등). 없으면 None
        cause: 원인 예외
        retryable: 재시도 가능 여부
    """

    kind: FailureKind = FailureKind.TRANSPORT
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        request: HttpRequest | None = None,
        response: HttpResponse | None = None,
        cause: BaseException | None = None,
        retryable: bool | None = None,
    ):
        self.message = message
        self.request = request
        self.response = response
        self.cause = cause
        self.retryable = self.default_retryable if retryable is None else retryable
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None

    def __str__(self) -> str:
        target = ""
        if self.request is not None:
            target = f" {self.request.method} {self.request.url}"
        return f"[{self.kind.value}]{target}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"message={self.message!r}, status_code={self.status_code!r})"
        )


class TransportError(HttpFailure):
    """네트워크 도달 불가, DNS 실패, 타임아웃 등"""

    kind = FailureKind.TRANSPORT
    default_retryable = True

    def __init__(self, message: str, *, timeout: bool = False, **kwargs):
        self.timeout = timeout
        super().__init__(message, **kwargs)


class ProtocolError(HttpFailure):
    """validate_status 를 통과하지 못한 응답"""

    kind = FailureKind.PROTOCOL

    def __init__(self, message: str, *, response: HttpResponse, **kwargs):
        kwargs.setdefault("retryable", response.status_code in RETRYABLE_STATUS_CODES)
        super().__init__(message, response=response, **kwargs)


class ChainError(HttpFailure):
    """interceptor 가 자체 예외를 던졌거나 체인 계약을 위반한 경우"""

    kind = FailureKind.CHAIN


class Cancelled(HttpFailure):
    """abort 신호로 전송이 취소된 경우"""

    kind = FailureKind.CANCELLED
