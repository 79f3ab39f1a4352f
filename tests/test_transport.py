# tests/test_transport.py
"""
Unit tests for AaioHttpClient: request building and response classification.
"""
import asyncio
import json

import httpx
import pytest

from aaio_connect.errors import (
    ApiError,
    AuthenticationError,
    ErrorKind,
    GatewayTimeoutError,
    TransportError,
    ValidationError,
)
from aaio_connect.schemas.requests import CreatePayoffRequest
from aaio_connect.schemas.responses import BalanceResponse, CreatePayoffResponse, IpsResponse, OrderInfo
from aaio_connect.transport import AaioHttpClient, build_path

from conftest import API_KEY, BASE_URL, json_response

ORDER = {
    "type": "success",
    "id": "a1",
    "order_id": "o1",
    "amount": "100.00",
    "currency": "RUB",
    "status": "in_process",
    "merchant_id": "shop1",
}


class TestRequestBuilding:
    """Tests for headers, query strings and JSON bodies."""

    def test_empty_api_key_rejected(self):
        with pytest.raises(ValueError):
            AaioHttpClient("  ")

    def test_repr_hides_api_key(self):
        http = AaioHttpClient(API_KEY, base_url=BASE_URL)
        assert API_KEY not in repr(http)

    def test_build_path_percent_encodes(self):
        path = build_path("api/x", {"order_id": "a b/c", "skip": None, "n": 5})
        assert path == "api/x?order_id=a%20b%2Fc&n=5"

    def test_build_path_without_params(self):
        assert build_path("api/x") == "api/x"
        assert build_path("api/x", {"skip": None}) == "api/x"

    @pytest.mark.asyncio
    async def test_get_sends_headers_and_query(self, make_http):
        http, recorder = make_http(json_response(200, ORDER))

        async with http:
            info = await http.get(
                "api/informaciya-o-zakaze",
                {"merchant_id": "shop1", "order_id": "o 1"},
                response_model=OrderInfo,
            )

        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.headers["X-Api-Key"] == API_KEY
        assert request.headers["Accept"] == "application/json"
        assert request.url.host == "aaio.test"
        assert request.url.path == "/api/informaciya-o-zakaze"
        assert request.url.query == b"merchant_id=shop1&order_id=o%201"
        assert info.order_id == "o1"

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, make_http):
        http, recorder = make_http(json_response(200, {"type": "success", "id": "p1", "my_id": "m1"}))
        request_body = CreatePayoffRequest(my_id="m1", method="sbp", amount="10.50", wallet="79990001122")

        async with http:
            resp = await http.post("api/vyvod-sredstv", request_body, response_model=CreatePayoffResponse)

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/json"
        sent = json.loads(request.content)
        assert sent == {
            "my_id": "m1",
            "method": "sbp",
            "amount": "10.50",
            "wallet": "79990001122",
            "commission_type": 0,
        }
        assert resp.id == "p1"


class TestErrorClassification:
    """Tests mapping of non-2xx statuses and bad bodies to exceptions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_errors(self, make_http, status):
        http, _ = make_http(json_response(status, {"type": "error", "code": 1, "message": "bad key"}))

        async with http:
            with pytest.raises(AuthenticationError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        err = exc.value
        assert err.kind is ErrorKind.AUTHENTICATION
        assert err.status_code == status
        assert err.error_code == 1
        assert "bad key" in err.message
        assert err.retryable is False
        assert API_KEY not in str(err)

    @pytest.mark.asyncio
    async def test_bad_request_is_validation_error(self, make_http):
        http, _ = make_http(json_response(400, {"type": "error", "code": 7, "message": "amount"}))

        async with http:
            with pytest.raises(ValidationError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        assert exc.value.kind is ErrorKind.VALIDATION
        assert exc.value.status_code == 400
        assert exc.value.error_code == 7
        assert exc.value.retryable is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 502, 503, 429])
    async def test_server_errors_are_retryable_api_errors(self, make_http, status):
        http, _ = make_http(httpx.Response(status, text="<html>oops</html>"))

        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        err = exc.value
        assert type(err) is ApiError
        assert err.kind is ErrorKind.API
        assert err.status_code == status
        assert err.response_body == "<html>oops</html>"
        assert err.error_code is None
        assert err.retryable is True

    @pytest.mark.asyncio
    async def test_404_is_not_retryable(self, make_http):
        http, _ = make_http(httpx.Response(404, text="not found"))

        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get("api/unknown", response_model=BalanceResponse)

        assert exc.value.retryable is False

    @pytest.mark.asyncio
    async def test_unparsable_200_keeps_raw_body(self, make_http):
        http, _ = make_http(httpx.Response(200, text="definitely not json"))

        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        assert exc.value.message == "invalid response body"
        assert exc.value.response_body == "definitely not json"
        assert exc.value.status_code == 200

    @pytest.mark.asyncio
    async def test_wrong_shape_200_is_invalid_body(self, make_http):
        http, _ = make_http(json_response(200, {"type": "success", "ips": "not-a-list"}))

        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get("ip-adresa-servisa", response_model=IpsResponse)

        assert exc.value.message == "invalid response body"
        assert "not-a-list" in exc.value.response_body

    @pytest.mark.asyncio
    async def test_error_type_in_200_body(self, make_http):
        http, _ = make_http(json_response(200, {"type": "error", "code": 3, "message": "Merchant not found"}))

        async with http:
            with pytest.raises(ApiError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        assert exc.value.error_code == 3
        assert exc.value.message == "Merchant not found"
        assert exc.value.retryable is False


class TestTransportFailures:
    """Tests network-level failures and per-call deadlines."""

    @pytest.mark.asyncio
    async def test_connect_error_is_transport_error(self, make_http):
        http, _ = make_http(httpx.ConnectError("connection refused"))

        async with http:
            with pytest.raises(TransportError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        assert exc.value.kind is ErrorKind.TRANSPORT
        assert isinstance(exc.value.__cause__, httpx.ConnectError)
        assert exc.value.retryable is True

    @pytest.mark.asyncio
    async def test_httpx_timeout_is_gateway_timeout(self, make_http):
        http, _ = make_http(httpx.ReadTimeout("read timed out"))

        async with http:
            with pytest.raises(GatewayTimeoutError) as exc:
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse)

        assert isinstance(exc.value, TransportError)
        assert exc.value.kind is ErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_per_call_deadline(self):
        async def slow(request):
            await asyncio.sleep(5)
            return json_response(200, {"type": "success"})

        http = AaioHttpClient(API_KEY, base_url=BASE_URL, transport=httpx.MockTransport(slow))

        async with http:
            loop = asyncio.get_running_loop()
            started = loop.time()
            with pytest.raises(GatewayTimeoutError):
                await http.get("api/poluchenie-balansa", response_model=BalanceResponse, timeout=0.05)

        assert loop.time() - started < 1

    @pytest.mark.asyncio
    async def test_task_cancellation_is_not_converted(self):
        started = asyncio.Event()

        async def hang(request):
            started.set()
            await asyncio.sleep(5)
            return json_response(200, {"type": "success"})

        http = AaioHttpClient(API_KEY, base_url=BASE_URL, transport=httpx.MockTransport(hang))

        async with http:
            task = asyncio.ensure_future(http.get("api/poluchenie-balansa", response_model=BalanceResponse))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
