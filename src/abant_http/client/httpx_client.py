"""
httpx 기반 HTTP 클라이언트
- httpx.AsyncClient lazy 초기화, transport 주입 가능 (테스트용 MockTransport)
- httpx 예외 → TransportError 변환
- httpx.Response → HttpResponse 변환
"""

from __future__ import annotations

import httpx

from abant_http._types import ClientConfig
from abant_http.client._base import BaseClient
from abant_http.errors import TransportError
from abant_http.models import HttpRequest, HttpResponse

# 타임아웃 미지정 요청에 쓰는 연결 타임아웃
CONNECT_TIMEOUT = 10.0


class HttpClient(BaseClient):
    """
    httpx.AsyncClient 를 전송 계층으로 쓰는 파이프라인 클라이언트

    사용법:
        async with HttpClient(ClientConfig(base_url="https://api.example.com")) as client:
            response = await client.get("/users/42")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport_override = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        """httpx 클라이언트 lazy 초기화"""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(transport=self._transport_override)
        return self._http

    def _build_httpx_request(
        self, http: httpx.AsyncClient, request: HttpRequest
    ) -> httpx.Request:
        kwargs: dict = {
            "headers": request.headers,
            "params": request.params or None,
        }
        if isinstance(request.body, (bytes, str)):
            kwargs["content"] = request.body
        elif request.body is not None:
            kwargs["json"] = request.body

        if request.timeout is None:
            kwargs["timeout"] = httpx.Timeout(None)
        else:
            kwargs["timeout"] = httpx.Timeout(
                request.timeout, connect=min(CONNECT_TIMEOUT, request.timeout)
            )
        return http.build_request(request.method, request.url, **kwargs)

    async def _do_send(self, request: HttpRequest) -> HttpResponse:
        http = await self._get_http()
        try:
            raw_request = self._build_httpx_request(http, request)
        except (TypeError, ValueError, httpx.InvalidURL) as e:
            # 본문 JSON 인코딩 실패, 잘못된 URL 등: 재시도해도 같은 결과
            raise TransportError(
                f"request build failed: {e}", request=request, cause=e, retryable=False
            ) from e

        try:
            raw = await http.send(raw_request)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"timeout: {e}", request=request, cause=e, timeout=True
            ) from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise TransportError(
                f"{type(e).__name__}: {e}", request=request, cause=e, retryable=False
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"{type(e).__name__}: {e}", request=request, cause=e
            ) from e

        return self._parse_response(raw, request)

    def _parse_response(self, raw: httpx.Response, request: HttpRequest) -> HttpResponse:
        """httpx.Response 를 HttpResponse 로 변환"""
        return HttpResponse(
            status_code=raw.status_code,
            headers=dict(raw.headers),
            data=HttpResponse.decode_body(raw.content, raw.encoding),
            content=raw.content,
            request=request,
        )

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
