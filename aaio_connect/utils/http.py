import asyncio
import logging
from typing import Dict, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception, before_sleep_log

from ..errors import AaioError

logger = logging.getLogger(__name__)


def client(
    base_url: str = "",
    timeout_sec: float = 30,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=timeout_sec, headers=headers, transport=transport)


def is_transient(exc: BaseException) -> bool:
    # сеть, 429 и 5xx; 400/401/403 и прочие ответы шлюза не повторяем
    return isinstance(exc, AaioError) and exc.retryable


def retry_policy(max_retries: int = 3, sleep=asyncio.sleep):
    """
    Повторы: 1 + max_retries попыток, пауза 2^attempt секунд (2, 4, 8), без джиттера.
    После исчерпания наружу уходит последняя ошибка как есть.
    """
    return retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=2, exp_base=2),
        retry=retry_if_exception(is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
