from typing import Optional

import httpx

from ..settings import Settings, settings
from ..transport import AaioHttpClient, RetryingTransport
from .business import BusinessClient
from .wallet import WalletClient

# Сборка клиентов из настроек: https://aaio.so, таймаут 30s, 3 повтора.


def _transport(cfg: Settings, transport: Optional[httpx.AsyncBaseTransport]) -> RetryingTransport:
    http = AaioHttpClient(
        api_key=cfg.AAIO_API_KEY or "",
        base_url=cfg.AAIO_BASE_URL,
        timeout_sec=cfg.HTTP_TIMEOUT_SEC,
        transport=transport,
    )
    return RetryingTransport(http, max_retries=cfg.RETRY_MAX)


def build_business_client(
    cfg: Settings = settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> BusinessClient:
    if not cfg.AAIO_MERCHANT_ID:
        raise ValueError("AAIO_MERCHANT_ID is not configured")
    if not cfg.AAIO_SECRET_KEY_1:
        raise ValueError("AAIO_SECRET_KEY_1 is not configured")
    return BusinessClient(
        _transport(cfg, transport),
        merchant_id=cfg.AAIO_MERCHANT_ID,
        secret_key_1=cfg.AAIO_SECRET_KEY_1,
        secret_key_2=cfg.AAIO_SECRET_KEY_2,
        webhook_ip_check=cfg.WEBHOOK_IP_CHECK,
    )


def build_wallet_client(
    cfg: Settings = settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> WalletClient:
    return WalletClient(_transport(cfg, transport), secret_key_payoff=cfg.AAIO_SECRET_KEY_PAYOFF)
