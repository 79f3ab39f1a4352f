import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from .errors import (
    ApiError,
    AuthenticationError,
    GatewayTimeoutError,
    TransportError,
    ValidationError,
)
from .settings import settings
from .utils.http import client, retry_policy

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _error_details(body: str) -> Tuple[Optional[int], Optional[str]]:
    # AAIO отвечает {"type": "error", "code": 3, "message": "..."}
    try:
        js = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(js, dict):
        return None, None
    code = js.get("code")
    try:
        code = int(code) if code is not None else None
    except (TypeError, ValueError):
        code = None
    message = js.get("message")
    return code, str(message) if message else None


def _with_gateway_message(default: str, message: Optional[str]) -> str:
    return f"{default}: {message}" if message else default


def build_path(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    items = [(k, v) for k, v in (params or {}).items() if v is not None]
    if not items:
        return path
    query = "&".join(f"{quote(str(k), safe='')}={quote(str(v), safe='')}" for k, v in items)
    return f"{path}?{query}"


class AaioHttpClient:
    """
    HTTP-транспорт AAIO:
      - один пул соединений httpx на экземпляр, заголовки Accept + X-Api-Key
      - GET с query-параметрами, POST с JSON-телом
      - не-2xx и сетевые сбои превращаются в исключения из errors.py
    Одна попытка на вызов, повторы делает RetryingTransport.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = settings.AAIO_BASE_URL,
        timeout_sec: float = settings.HTTP_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key or not api_key.strip():
            raise ValueError("API key cannot be empty")
        self.base_url = base_url.rstrip("/")
        self._client = client(
            base_url=f"{self.base_url}/",
            timeout_sec=timeout_sec,
            headers={"Accept": "application/json", "X-Api-Key": api_key},
            transport=transport,
        )

    def __repr__(self):
        return f"<{self.__class__.__name__}(base_url={self.base_url!r})>"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # ---- Public API ----
    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        response_model: Type[T],
        timeout: Optional[float] = None,
    ) -> T:
        url = build_path(path, params)
        logger.debug("GET %s", url)
        return await self._send("GET", path, url, response_model, timeout)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        response_model: Type[T],
        timeout: Optional[float] = None,
    ) -> T:
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        logger.debug("POST %s", path)
        return await self._send("POST", path, path, response_model, timeout, json=body)

    # ---- Internals ----
    async def _send(
        self,
        method: str,
        path: str,
        url: str,
        response_model: Type[T],
        timeout: Optional[float],
        **kwargs: Any,
    ) -> T:
        try:
            if timeout is None:
                resp = await self._client.request(method, url, **kwargs)
            else:
                async with asyncio.timeout(timeout):
                    resp = await self._client.request(method, url, **kwargs)
        except (TimeoutError, httpx.TimeoutException) as e:
            logger.warning("Request timeout for %s %s", method, path)
            raise GatewayTimeoutError(f"Request timeout for {path}") from e
        except httpx.RequestError as e:
            logger.error("HTTP request failed for %s %s: %s", method, path, e)
            raise TransportError(f"Network error while calling {path}") from e
        return self._process(resp, path, response_model)

    def _process(self, resp: httpx.Response, path: str, response_model: Type[T]) -> T:
        status = resp.status_code
        body = resp.text

        if not resp.is_success:
            logger.warning("AAIO returned status %s for %s: %s", status, path, body)
            code, message = _error_details(body)
            if status in (401, 403):
                raise AuthenticationError(
                    _with_gateway_message("Authentication failed. Check your API key", message),
                    status, code, body,
                )
            if status == 400:
                raise ValidationError(
                    _with_gateway_message("Request validation failed. Check request parameters", message),
                    status, code, body,
                )
            raise ApiError(
                _with_gateway_message(f"API request failed with status {status}", message),
                status, code, body,
            )

        try:
            js = resp.json()
        except ValueError as e:
            logger.error("Failed to decode response from %s: %s", path, body)
            raise ApiError("invalid response body", status, None, body) from e

        # AAIO иногда отдаёт ошибку с кодом 200
        if isinstance(js, dict) and js.get("type") == "error":
            code, message = _error_details(body)
            logger.warning("AAIO returned error for %s: %s", path, body)
            raise ApiError(message or "AAIO returned an error", status, code, body)

        try:
            return response_model.model_validate(js)
        except PydanticValidationError as e:
            logger.error("Unexpected response shape from %s: %s", path, body)
            raise ApiError("invalid response body", status, None, body) from e


class RetryingTransport:
    """Тот же get/post, что у AaioHttpClient, но с retry_policy поверх."""

    def __init__(self, http: AaioHttpClient, max_retries: int = settings.RETRY_MAX, sleep=asyncio.sleep):
        self.http = http
        self.base_url = http.base_url
        self.max_retries = max_retries
        self._sleep = sleep

    def _policy(self):
        return retry_policy(max_retries=self.max_retries, sleep=self._sleep)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any):
        return await self._policy()(self.http.get)(path, params, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any):
        return await self._policy()(self.http.post)(path, body, **kwargs)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
