import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..schemas.requests import CreatePayoffRequest
from ..schemas.responses import (
    BalanceResponse,
    CreatePayoffResponse,
    IpsResponse,
    PayoffInfo,
    PayoffMethod,
    PayoffMethodsResponse,
    PayoffRatesResponse,
    SbpBank,
    SbpBanksResponse,
)
from ..schemas.webhooks import LegacyPayoffWebhookData, PayoffWebhookData
from ..transport import RetryingTransport
from ..utils.security import format_amount, legacy_payoff_sign_fields, payoff_sign_fields, verify_sign
from .base import require

logger = logging.getLogger(__name__)

W = TypeVar("W", bound=BaseModel)


def _parse_webhook(model: Type[W], webhook: Any) -> W:
    if webhook is None:
        raise ValidationError("Webhook payload is required")
    if isinstance(webhook, model):
        return webhook
    try:
        return model.model_validate(webhook)
    except PydanticValidationError as e:
        raise ValidationError(f"Malformed payoff webhook: {e.error_count()} invalid field(s)") from e


class WalletClient:
    """
    AAIO кошелёк: баланс и выплаты.
    Две схемы подписи вебхука выплаты живут раздельно:
      - validate_payoff_webhook:        sha256(my_id:status:amount:secret)
      - validate_legacy_payoff_webhook: sha256(id:secret_payoff:amount_down)
    """

    name = "aaio_wallet"

    def __init__(self, http: RetryingTransport, secret_key_payoff: Optional[str] = None):
        self.http = http
        self._secret_key_payoff = secret_key_payoff

    async def get_balance(self, timeout: Optional[float] = None) -> BalanceResponse:
        logger.info("Fetching account balance")
        return await self.http.get("api/poluchenie-balansa", response_model=BalanceResponse, timeout=timeout)

    async def create_payoff(self, request: CreatePayoffRequest, timeout: Optional[float] = None) -> CreatePayoffResponse:
        if request is None:
            raise ValidationError("Payoff request is required")
        require(request.my_id, "Payoff ID")
        require(request.method, "Method")
        require(request.wallet, "Wallet")
        if request.amount <= 0:
            raise ValidationError("Amount must be positive")
        logger.info("Creating payoff %s for amount %s via %s", request.my_id, request.amount, request.method)
        return await self.http.post("api/vyvod-sredstv", request, response_model=CreatePayoffResponse, timeout=timeout)

    async def get_payoff_info(
        self,
        my_id: Optional[str] = None,
        aaio_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> PayoffInfo:
        """Поиск выплаты по своему my_id или по id AAIO; нужен хотя бы один."""
        my_id = my_id if my_id and my_id.strip() else None
        aaio_id = aaio_id if aaio_id and aaio_id.strip() else None
        if my_id is None and aaio_id is None:
            raise ValidationError("Payoff ID or AAIO ID cannot be empty")
        logger.info("Fetching payoff info for my_id=%s id=%s", my_id, aaio_id)
        return await self.http.get(
            "api/informaciya-o-zayavke-na-vyvod-sredstv",
            {"my_id": my_id, "id": aaio_id},
            response_model=PayoffInfo,
            timeout=timeout,
        )

    async def get_payoff_methods(self, timeout: Optional[float] = None) -> List[PayoffMethod]:
        logger.info("Fetching available payoff methods")
        resp = await self.http.get(
            "api/dostupnye-metody-dlya-vyvoda-sredstv", response_model=PayoffMethodsResponse, timeout=timeout
        )
        return resp.list

    async def get_payoff_rates(
        self, method: str, amount: Union[Decimal, int, str], timeout: Optional[float] = None
    ) -> PayoffRatesResponse:
        require(method, "Method")
        logger.info("Fetching payoff rates for %s with amount %s", method, amount)
        return await self.http.get(
            "api/kurs-valyut-pri-vyvode-sredstv",
            {"method": method, "amount": format_amount(amount)},
            response_model=PayoffRatesResponse,
            timeout=timeout,
        )

    async def get_sbp_banks(self, timeout: Optional[float] = None) -> List[SbpBank]:
        logger.info("Fetching SBP banks list")
        resp = await self.http.get(
            "api/banki-dlya-vyvoda-sredstv-na-sbp", response_model=SbpBanksResponse, timeout=timeout
        )
        return resp.list

    def validate_payoff_webhook(self, webhook: Union[PayoffWebhookData, Dict[str, Any]], secret_key: str) -> bool:
        webhook = _parse_webhook(PayoffWebhookData, webhook)
        secret = require(secret_key, "Secret key")
        fields = payoff_sign_fields(webhook.my_id, webhook.status, webhook.amount, secret)
        if not verify_sign(fields, webhook.sign):
            logger.warning("Payoff webhook signature validation failed for %s", webhook.my_id)
            return False
        return True

    def validate_legacy_payoff_webhook(
        self,
        webhook: Union[LegacyPayoffWebhookData, Dict[str, Any]],
        secret_key_payoff: Optional[str] = None,
    ) -> bool:
        webhook = _parse_webhook(LegacyPayoffWebhookData, webhook)
        secret = require(secret_key_payoff or self._secret_key_payoff, "Payoff secret key")
        fields = legacy_payoff_sign_fields(webhook.id, secret, webhook.amount_down)
        if not verify_sign(fields, webhook.sign):
            logger.warning("Legacy payoff webhook signature validation failed for %s", webhook.id)
            return False
        return True

    async def get_service_ips(self, timeout: Optional[float] = None) -> IpsResponse:
        logger.info("Fetching AAIO service IPs")
        return await self.http.get("ip-adresa-servisa", response_model=IpsResponse, timeout=timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
