"""Interceptor 레코드 및 클라이언트 공통 설정 타입."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Union


def default_validate_status(status_code: int) -> bool:
    """2xx 만 성공으로 본다."""
    return 200 <= status_code < 300


# on_fulfilled / on_rejected 는 sync 함수 또는 coroutine 함수 모두 허용
Handler = Callable[[Any], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True, slots=True)
class Interceptor:
    """체인에 등록되는 가로채기 한 쌍.

    - on_fulfilled: 값(요청/응답)을 받아 변환된 값을 반환한다. None 이면 항등.
    - on_rejected: HttpFailure 를 받아 다시 raise 하거나 (response 체인 한정)
      HttpResponse 로 복구한다. None 이면 그대로 재전파.
    """

    on_fulfilled: Handler | None = None
    on_rejected: Handler | None = None


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """클라이언트 전송 설정. 생성 이후 변경되지 않는다."""

    base_url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = 30.0
    validate_status: Callable[[int], bool] = default_validate_status

    def __post_init__(self) -> None:
        # frozen 이므로 object.__setattr__ 로 읽기 전용 사본을 넣는다
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def is_empty(self) -> bool:
        return not self.base_url and not self.headers
