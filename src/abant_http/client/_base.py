"""BaseClient ABC: interceptor 파이프라인을 소유하는 베이스."""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Mapping
from urllib.parse import urlsplit

from abant_http._types import ClientConfig, Handler
from abant_http.chain import InterceptorChain
from abant_http.errors import (
    AlreadyConfigured,
    Cancelled,
    ConfigurationError,
    HttpFailure,
    ProtocolError,
    TransportError,
)
from abant_http.models import HttpRequest, HttpResponse, Outcome, merge_headers

logger = logging.getLogger(__name__)

_ABSOLUTE_URL = re.compile(r"^[a-z][a-z\d+\-.]*://", re.IGNORECASE)

# timeout 인자 미지정 표시 (None 은 "타임아웃 없음" 이라 구분 필요)
_UNSET: Any = object()


def resolve_url(base_url: str, path: str) -> str:
    """
    path 가 절대 URL 이면 그대로, 아니면 base_url 뒤에 붙인다.

    scheme 없는 "//host/path" 는 base_url 의 scheme 을 따른다.
    """
    if _ABSOLUTE_URL.match(path):
        return path
    if path.startswith("//"):
        scheme = urlsplit(base_url).scheme
        if not scheme:
            raise ConfigurationError(
                f"base_url에 scheme이 없어 '{path}'를 해석할 수 없습니다."
            )
        return f"{scheme}:{path}"
    if not base_url:
        raise ConfigurationError(
            f"base_url이 설정되지 않아 상대 경로 '{path}'를 해석할 수 없습니다."
        )
    if not path:
        return base_url
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class Interceptors:
    """request / response 체인 묶음 (client.interceptors.request.use(...))"""

    def __init__(self) -> None:
        self.request = InterceptorChain("request")
        self.response = InterceptorChain("response")


class BaseClient(ABC):
    """HTTP 클라이언트 추상 베이스.

    - _do_send 만 구현하면 된다.
    - interceptor 체인과 설정은 베이스에서 처리한다.
    - async context manager 를 지원한다.
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()
        self._configured = config is not None
        self.interceptors = Interceptors()

    # --- configuration ---

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        **fields: Any,
    ) -> None:
        """설정을 한 번만 지정한다. 이미 설정된 경우 AlreadyConfigured."""
        if self._configured:
            raise AlreadyConfigured(
                f"client is already configured (base_url={self._config.base_url!r})"
            )
        self._config = ClientConfig(base_url=base_url, headers=headers or {}, **fields)
        self._configured = True
        logger.debug(f"client configured: base_url={base_url!r}")

    # --- interceptor registration ---

    def add_request_interceptor(
        self,
        on_fulfilled: Handler | None = None,
        on_rejected: Handler | None = None,
    ) -> int:
        return self.interceptors.request.use(on_fulfilled, on_rejected)

    def add_response_interceptor(
        self,
        on_fulfilled: Handler | None = None,
        on_rejected: Handler | None = None,
    ) -> int:
        return self.interceptors.response.use(on_fulfilled, on_rejected)

    def eject_request_interceptor(self, handle: int) -> None:
        self.interceptors.request.eject(handle)

    def eject_response_interceptor(self, handle: int) -> None:
        self.interceptors.response.eject(handle)

    # --- public API ---

    def build_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        json: Any = None,
        timeout: float | None = _UNSET,
    ) -> HttpRequest:
        """설정의 base_url / 기본 헤더 / timeout 을 적용한 초기 요청 생성"""
        if body is not None and json is not None:
            raise ValueError("body 와 json 은 동시에 지정할 수 없습니다.")
        return HttpRequest(
            method=method,
            url=resolve_url(self._config.base_url, path),
            headers=merge_headers(self._config.headers, headers),
            params=dict(params or {}),
            body=json if json is not None else body,
            timeout=self._config.timeout if timeout is _UNSET else timeout,
        )

    async def request(self, method: str, path: str, **options: Any) -> HttpResponse:
        """요청 파이프라인 실행. 최종 응답을 반환하거나 최종 HttpFailure 를 raise."""
        abort: asyncio.Event | None = options.pop("abort", None)
        request = self.build_request(method, path, **options)
        return await self.dispatch(request, abort=abort)

    async def send(self, method: str, path: str, **options: Any) -> Outcome:
        """request() 와 같지만 실패를 raise 하지 않고 값으로 반환한다."""
        try:
            return await self.request(method, path, **options)
        except HttpFailure as failure:
            return failure

    async def dispatch(
        self, request: HttpRequest, *, abort: asyncio.Event | None = None
    ) -> HttpResponse:
        """이미 만들어진 요청을 두 체인과 전송 계층에 통과시킨다."""
        try:
            request = await self.interceptors.request.run(request)
        except HttpFailure as failure:
            logger.debug(f"request chain failed ({failure.kind.value}), transport skipped")
            return await self.interceptors.response.run_rejected(failure)

        try:
            response = await self._transport(request, abort)
            if not self._config.validate_status(response.status_code):
                raise ProtocolError(
                    f"Request failed with status code {response.status_code}",
                    request=request,
                    response=response,
                )
        except HttpFailure as failure:
            return await self.interceptors.response.run_rejected(failure)
        except Exception as e:
            # 전송 구현의 예상 밖 예외도 reject 경로를 거쳐야 한다
            logger.warning(f"unexpected {type(e).__name__} from transport: {e}")
            failure = TransportError(
                f"{type(e).__name__}: {e}", request=request, cause=e, retryable=False
            )
            return await self.interceptors.response.run_rejected(failure)

        return await self.interceptors.response.run(response)

    async def _transport(
        self, request: HttpRequest, abort: asyncio.Event | None
    ) -> HttpResponse:
        logger.debug(f"-> {request.method} {request.url}")
        if abort is None:
            return await self._do_send(request)
        if abort.is_set():
            raise Cancelled("request aborted before sending", request=request)

        send = asyncio.ensure_future(self._do_send(request))
        aborted = asyncio.ensure_future(abort.wait())
        try:
            await asyncio.wait({send, aborted}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # 호출 task 자체의 취소는 Cancelled 로 바꾸지 않고 그대로 전파
            send.cancel()
            raise
        finally:
            aborted.cancel()
        if send.done():
            return send.result()
        send.cancel()
        await asyncio.wait({send})
        logger.debug(f"aborted {request.method} {request.url}")
        raise Cancelled("request aborted", request=request)

    # --- shortcuts ---

    async def get(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("GET", path, **options)

    async def delete(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("DELETE", path, **options)

    async def head(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("HEAD", path, **options)

    async def options(self, path: str, **options: Any) -> HttpResponse:
        return await self.request("OPTIONS", path, **options)

    async def post(self, path: str, body: Any = None, **options: Any) -> HttpResponse:
        return await self.request("POST", path, body=body, **options)

    async def put(self, path: str, body: Any = None, **options: Any) -> HttpResponse:
        return await self.request("PUT", path, body=body, **options)

    async def patch(self, path: str, body: Any = None, **options: Any) -> HttpResponse:
        return await self.request("PATCH", path, body=body, **options)

    # --- subclass hooks ---

    @abstractmethod
    async def _do_send(self, request: HttpRequest) -> HttpResponse:
        """실제 전송 구현. 전송 실패는 TransportError 로 raise 한다."""

    # --- context manager ---

    async def __aenter__(self) -> BaseClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """리소스 정리. 서브클래스에서 오버라이드 가능."""
