"""
요청 & 응답 모델
- 전송 계층(httpx)과 무관한 불변 Pydantic 모델
- interceptor 는 model_copy / with_header 로 새 값을 만들어 반환한다
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import HttpFailure


def merge_headers(
    base: Mapping[str, str], overrides: Mapping[str, str] | None
) -> dict[str, str]:
    """헤더 병합. 키는 대소문자 구분 없이 비교하고 overrides 가 이긴다."""
    merged = dict(base)
    for name, value in (overrides or {}).items():
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


class HttpRequest(BaseModel):
    """파이프라인을 통과하는 요청"""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = {}
    params: dict[str, Any] = {}
    body: Any = None
    timeout: float | None = None

    @field_validator("method")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.upper()

    def header(self, name: str, default: str | None = None) -> str | None:
        """대소문자 구분 없는 헤더 조회"""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default

    def with_headers(self, headers: Mapping[str, str]) -> HttpRequest:
        """헤더를 덮어쓴 새 요청 반환"""
        return self.model_copy(update={"headers": merge_headers(self.headers, headers)})

    def with_header(self, name: str, value: str) -> HttpRequest:
        return self.with_headers({name: value})


class HttpResponse(BaseModel):
    """
    전송 결과 응답

    data는 본문이 JSON이면 디코딩된 값, 아니면 텍스트, 비어 있으면 None.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: dict[str, str] = {}
    data: Any = None
    content: bytes = b""
    request: HttpRequest | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return default

    @staticmethod
    def decode_body(content: bytes, encoding: str | None = None) -> Any:
        """본문 디코딩. JSON 파싱 실패 시 텍스트로 폴백"""
        if not content:
            return None
        text = content.decode(encoding or "utf-8", errors="replace")
        try:
            return json.loads(text)
        except ValueError:
            return text


# 호출자에게 돌아가는 결과: 응답 또는 실패
Outcome = Union[HttpResponse, HttpFailure]
