"""BaseClient 파이프라인 테스트 (더미 전송 계층)."""

import asyncio

import pytest

from abant_http._types import ClientConfig
from abant_http.client._base import BaseClient, resolve_url
from abant_http.errors import (
    AlreadyConfigured,
    Cancelled,
    ChainError,
    ConfigurationError,
    FailureKind,
    HttpFailure,
    ProtocolError,
    TransportError,
)
from abant_http.models import HttpRequest, HttpResponse

CONFIG = ClientConfig(
    base_url="https://api.example.com",
    headers={"Content-Type": "application/json"},
)


class DummyClient(BaseClient):
    """테스트용 더미 클라이언트. 보낸 요청을 기록하고 고정 응답을 돌려준다."""

    def __init__(self, config=CONFIG, status_code: int = 200, data=None, error=None):
        super().__init__(config)
        self.sent: list[HttpRequest] = []
        self.status_code = status_code
        self.data = data if data is not None else {"ok": True}
        self.error = error

    async def _do_send(self, request: HttpRequest) -> HttpResponse:
        self.sent.append(request)
        if self.error is not None:
            raise self.error
        return HttpResponse(status_code=self.status_code, data=self.data, request=request)


class SlowClient(DummyClient):
    async def _do_send(self, request: HttpRequest) -> HttpResponse:
        self.sent.append(request)
        await asyncio.sleep(10)
        return HttpResponse(status_code=200, request=request)


class TestResolveUrl:
    def test_joins_with_single_slash(self):
        assert resolve_url("https://api.example.com/", "/users/42") == "https://api.example.com/users/42"
        assert resolve_url("https://api.example.com", "users/42") == "https://api.example.com/users/42"

    def test_absolute_url_is_kept(self):
        assert resolve_url("https://api.example.com", "https://other.example.com/x") == "https://other.example.com/x"

    def test_protocol_relative_url_uses_base_scheme(self):
        assert resolve_url("https://api.example.com", "//cdn.example.com/a") == "https://cdn.example.com/a"
        assert resolve_url("http://localhost:8000/api", "//cdn.example.com/a") == "http://cdn.example.com/a"

    def test_protocol_relative_url_without_base_scheme_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_url("", "//cdn.example.com/a")
        with pytest.raises(ConfigurationError):
            resolve_url("api.example.com", "//cdn.example.com/a")

    def test_empty_path_returns_base(self):
        assert resolve_url("https://api.example.com", "") == "https://api.example.com"

    def test_relative_path_without_base_raises(self):
        with pytest.raises(ConfigurationError):
            resolve_url("", "/users")


class TestConfigure:
    def test_configure_once(self):
        client = DummyClient(config=None)
        assert client.configured is False
        client.configure("https://api.example.com", {"Accept": "application/json"})
        assert client.configured is True
        assert client.config.base_url == "https://api.example.com"
        assert client.config.headers["Accept"] == "application/json"

    def test_second_configure_raises(self):
        client = DummyClient(config=None)
        client.configure("https://a.example.com")
        with pytest.raises(AlreadyConfigured):
            client.configure("https://b.example.com")
        assert client.config.base_url == "https://a.example.com"

    def test_configure_after_constructor_config_raises(self):
        client = DummyClient()
        with pytest.raises(AlreadyConfigured):
            client.configure("https://b.example.com")

    def test_config_headers_are_read_only(self):
        with pytest.raises(TypeError):
            CONFIG.headers["X-New"] = "1"

    @pytest.mark.asyncio
    async def test_unconfigured_client_accepts_absolute_url(self):
        client = DummyClient(config=None)
        await client.get("https://api.example.com/ping")
        assert client.sent[0].url == "https://api.example.com/ping"


class TestBuildRequest:
    def test_headers_merge_case_insensitive(self):
        client = DummyClient()
        request = client.build_request("post", "/orders", headers={"content-type": "text/plain"})
        assert request.method == "POST"
        assert request.headers == {"content-type": "text/plain"}

    def test_default_timeout_from_config(self):
        client = DummyClient()
        assert client.build_request("GET", "/").timeout == 30.0
        assert client.build_request("GET", "/", timeout=None).timeout is None

    def test_body_and_json_are_exclusive(self):
        client = DummyClient()
        with pytest.raises(ValueError):
            client.build_request("POST", "/", body="a", json={"b": 1})


class TestPipeline:
    @pytest.mark.asyncio
    async def test_identity_without_interceptors(self):
        client = DummyClient(data={"id": 42})
        response = await client.get("/users/42")

        assert response.status_code == 200
        assert response.data == {"id": 42}
        assert response.request is client.sent[0]

    @pytest.mark.asyncio
    async def test_request_interceptors_transform_in_order(self):
        client = DummyClient()
        client.add_request_interceptor(lambda r: r.with_header("X-Step", "1"))
        client.add_request_interceptor(lambda r: r.with_header("X-Step", r.header("X-Step") + "2"))

        await client.post("/orders", {"qty": 1})
        assert client.sent[0].header("X-Step") == "12"
        assert client.sent[0].body == {"qty": 1}

    @pytest.mark.asyncio
    async def test_response_interceptors_transform_in_order(self):
        client = DummyClient(data={"n": 1})

        def double(response):
            return response.model_copy(update={"data": {"n": response.data["n"] * 2}})

        def add_one(response):
            return response.model_copy(update={"data": {"n": response.data["n"] + 1}})

        client.add_response_interceptor(double)
        client.add_response_interceptor(add_one)
        response = await client.get("/n")
        assert response.data == {"n": 3}

    @pytest.mark.asyncio
    async def test_request_chain_failure_skips_transport(self):
        client = DummyClient()
        seen: list[HttpFailure] = []

        def deny(request):
            raise RuntimeError("no token")

        def observe(failure):
            seen.append(failure)
            raise failure

        client.add_request_interceptor(deny)
        client.add_response_interceptor(None, observe)

        with pytest.raises(ChainError):
            await client.get("/users")
        assert client.sent == []
        assert len(seen) == 1
        assert seen[0].kind is FailureKind.CHAIN

    @pytest.mark.asyncio
    async def test_unexpected_transport_exception_runs_reject_path(self):
        client = DummyClient(error=RuntimeError("driver bug"))
        seen: list[HttpFailure] = []

        def observe(failure):
            seen.append(failure)
            raise failure

        client.add_response_interceptor(None, observe)

        outcome = await client.send("GET", "/users")

        assert isinstance(outcome, TransportError)
        assert isinstance(outcome.cause, RuntimeError)
        assert outcome.retryable is False
        assert seen == [outcome]

    @pytest.mark.asyncio
    async def test_eject_client_interceptors_keeps_order(self):
        client = DummyClient(data={"n": 1})
        client.add_request_interceptor(lambda r: r.with_header("X-Step", "a"))
        skipped = client.add_request_interceptor(lambda r: r.with_header("X-Step", r.header("X-Step") + "b"))
        client.add_request_interceptor(lambda r: r.with_header("X-Step", r.header("X-Step") + "c"))

        steps: list[str] = []
        for name in "xyz":
            handle = client.add_response_interceptor(
                lambda response, name=name: steps.append(name) or response
            )
            if name == "y":
                dropped = handle

        client.eject_request_interceptor(skipped)
        client.eject_response_interceptor(dropped)
        await client.get("/n")

        assert client.sent[0].header("X-Step") == "ac"
        assert steps == ["x", "z"]
        with pytest.raises(KeyError):
            client.eject_response_interceptor(dropped)

    @pytest.mark.asyncio
    async def test_transport_failure_reaches_caller(self):
        client = DummyClient(error=TransportError("connection refused"))
        with pytest.raises(TransportError) as exc_info:
            await client.get("/users")
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_non_2xx_is_protocol_error(self):
        client = DummyClient(status_code=503, data={"error": "down"})
        with pytest.raises(ProtocolError) as exc_info:
            await client.get("/users")
        failure = exc_info.value
        assert failure.status_code == 503
        assert failure.response.data == {"error": "down"}
        assert failure.retryable is True

    @pytest.mark.asyncio
    async def test_validate_status_override(self):
        config = ClientConfig(base_url="https://api.example.com", validate_status=lambda s: s < 500)
        client = DummyClient(config=config, status_code=404)
        response = await client.get("/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_recovery_delivers_response(self):
        client = DummyClient(status_code=401)
        after: list[int] = []

        def recover(failure):
            return HttpResponse(status_code=200, data={"recovered": True}, request=failure.request)

        def record(response):
            after.append(response.status_code)
            return response

        client.add_response_interceptor(None, recover)
        client.add_response_interceptor(record)

        response = await client.get("/me")
        assert response.data == {"recovered": True}
        assert after == [200]

    @pytest.mark.asyncio
    async def test_send_returns_failure_as_value(self):
        client = DummyClient(error=TransportError("dns"))
        outcome = await client.send("GET", "/users")
        assert isinstance(outcome, TransportError)

        ok = await DummyClient().send("GET", "/users")
        assert isinstance(ok, HttpResponse)

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_independent(self):
        client = DummyClient()
        client.add_request_interceptor(lambda r: r.with_header("X-Path", r.url.rsplit("/", 1)[-1]))

        responses = await asyncio.gather(*(client.get(f"/items/{i}") for i in range(5)))
        assert [r.request.header("X-Path") for r in responses] == [str(i) for i in range(5)]


class TestAbort:
    @pytest.mark.asyncio
    async def test_abort_before_send(self):
        client = DummyClient()
        abort = asyncio.Event()
        abort.set()
        with pytest.raises(Cancelled):
            await client.get("/users", abort=abort)
        assert client.sent == []

    @pytest.mark.asyncio
    async def test_abort_in_flight_runs_reject_path(self):
        client = SlowClient()
        kinds: list[FailureKind] = []

        def observe(failure):
            kinds.append(failure.kind)
            raise failure

        client.add_response_interceptor(None, observe)
        abort = asyncio.Event()

        task = asyncio.ensure_future(client.get("/slow", abort=abort))
        await asyncio.sleep(0)
        abort.set()

        with pytest.raises(Cancelled) as exc_info:
            await task
        assert kinds == [FailureKind.CANCELLED]
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_completed_request_ignores_unset_abort(self):
        client = DummyClient()
        response = await client.get("/users", abort=asyncio.Event())
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_async_context_manager():
    async with DummyClient() as client:
        response = await client.get("/")
        assert response.ok
