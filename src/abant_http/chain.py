"""
Interceptor 체인
- 등록 순서대로 실행되는 append-only 목록 (eject 는 슬롯만 비운다)
- fulfilled / rejected 두 상태를 오가며 값을 접는(fold) 러너
- 실행 시작 시점의 스냅샷만 사용하므로 실행 중 등록/제거의 영향을 받지 않는다
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Iterator, Literal

from ._types import Handler, Interceptor
from .errors import ChainError, HttpFailure
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

ChainKind = Literal["request", "response"]

_VALUE_TYPES: dict[str, type] = {
    "request": HttpRequest,
    "response": HttpResponse,
}


async def _call(handler: Handler, value: Any) -> Any:
    result = handler(value)
    if inspect.isawaitable(result):
        result = await result
    return result


class InterceptorChain:
    """
    한 종류(request/response)의 interceptor 목록

    사용법:
        chain = InterceptorChain("request")
        handle = chain.use(add_auth_header)
        request = await chain.run(request)
        chain.eject(handle)

    recoverable=False 인 체인(request 체인)은 on_rejected 가 값을 반환해
    실패를 복구하는 것을 허용하지 않는다.
    """

    def __init__(self, kind: ChainKind, *, recoverable: bool | None = None):
        if kind not in _VALUE_TYPES:
            raise ValueError(f"unknown chain kind: {kind!r}")
        self.kind = kind
        self.recoverable = kind == "response" if recoverable is None else recoverable
        self._value_type = _VALUE_TYPES[kind]
        self._slots: list[Interceptor | None] = []

    # --- registration ---

    def use(
        self,
        on_fulfilled: Handler | None = None,
        on_rejected: Handler | None = None,
    ) -> int:
        """interceptor 를 맨 뒤에 추가하고 제거용 handle 을 반환한다."""
        return self.add(Interceptor(on_fulfilled, on_rejected))

    def add(self, interceptor: Interceptor) -> int:
        self._slots.append(interceptor)
        handle = len(self._slots) - 1
        logger.debug(f"{self.kind} interceptor registered (handle={handle})")
        return handle

    def eject(self, handle: int) -> None:
        """handle 에 해당하는 interceptor 제거. 나머지 순서는 유지된다."""
        if not 0 <= handle < len(self._slots) or self._slots[handle] is None:
            raise KeyError(f"{self.kind} interceptor handle {handle} not found")
        self._slots[handle] = None

    def clear(self) -> None:
        self._slots = []

    def snapshot(self) -> tuple[Interceptor, ...]:
        return tuple(i for i in self._slots if i is not None)

    def __len__(self) -> int:
        return sum(1 for i in self._slots if i is not None)

    def __iter__(self) -> Iterator[Interceptor]:
        return iter(self.snapshot())

    # --- runner ---

    async def run(self, value: Any) -> Any:
        """fulfilled 상태에서 시작해 체인을 실행한다. 최종 실패는 raise."""
        return await self._fold(value, None)

    async def run_rejected(self, failure: HttpFailure) -> Any:
        """rejected 상태에서 시작해 체인을 실행한다."""
        return await self._fold(None, failure)

    async def _fold(self, value: Any, failure: HttpFailure | None) -> Any:
        for index, interceptor in enumerate(self.snapshot()):
            if failure is None:
                value, failure = await self._fulfill(index, interceptor, value)
            else:
                value, failure = await self._reject(index, interceptor, failure)
        if failure is not None:
            raise failure
        return value

    async def _fulfill(
        self, index: int, interceptor: Interceptor, value: Any
    ) -> tuple[Any, HttpFailure | None]:
        if interceptor.on_fulfilled is None:
            return value, None
        try:
            result = await _call(interceptor.on_fulfilled, value)
        except HttpFailure as e:
            return None, e
        except Exception as e:
            return None, self._chain_error(
                f"{self.kind} interceptor #{index} raised {type(e).__name__}: {e}",
                value,
                cause=e,
            )

        if not isinstance(result, self._value_type):
            logger.warning(
                f"{self.kind} interceptor #{index} returned "
                f"{type(result).__name__}, expected {self._value_type.__name__}"
            )
            return None, self._chain_error(
                f"{self.kind} interceptor #{index} must return "
                f"{self._value_type.__name__}, got {type(result).__name__}",
                value,
            )
        return result, None

    async def _reject(
        self, index: int, interceptor: Interceptor, failure: HttpFailure
    ) -> tuple[Any, HttpFailure | None]:
        if interceptor.on_rejected is None:
            return None, failure
        try:
            result = await _call(interceptor.on_rejected, failure)
        except HttpFailure as e:
            return None, e
        except Exception as e:
            return None, ChainError(
                f"{self.kind} rejection handler #{index} raised {type(e).__name__}: {e}",
                request=failure.request,
                response=failure.response,
                cause=e,
            )

        # 여기부터는 on_rejected 가 값을 반환한 경우 (복구 시도)
        if self.recoverable and isinstance(result, self._value_type):
            logger.debug(f"{self.kind} interceptor #{index} recovered {failure.kind.value} failure")
            return result, None

        reason = (
            "may not recover a failure"
            if not self.recoverable
            else f"returned {type(result).__name__} instead of re-raising or recovering"
        )
        logger.warning(f"{self.kind} rejection handler #{index} {reason}")
        return None, ChainError(
            f"{self.kind} rejection handler #{index} {reason}",
            request=failure.request,
            response=failure.response,
            cause=failure,
        )

    def _chain_error(
        self, message: str, value: Any, cause: BaseException | None = None
    ) -> ChainError:
        request = value if isinstance(value, HttpRequest) else None
        response = value if isinstance(value, HttpResponse) else None
        if response is not None:
            request = response.request
        return ChainError(message, request=request, response=response, cause=cause)
