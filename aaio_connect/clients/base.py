import asyncio
from decimal import Decimal
from typing import Any, List, Optional, Protocol, Union

from ..errors import ValidationError
from ..schemas.requests import CreateOrderRequest, CreatePayoffRequest
from ..schemas.responses import (
    BalanceResponse,
    CreateOrderResponse,
    CreatePayoffResponse,
    IpsResponse,
    OrderInfo,
    PaymentMethod,
    PayoffInfo,
    PayoffMethod,
    PayoffRatesResponse,
    SbpBank,
)
from ..schemas.webhooks import LegacyPayoffWebhookData, PaymentWebhookData, PayoffWebhookData
from ..services.payment_waiter import Timeout


class BusinessApi(Protocol):
    # Заказы мерчанта
    async def create_order(self, request: CreateOrderRequest, timeout: Optional[float] = None) -> CreateOrderResponse:
        ...

    async def get_order_info(
        self, order_id: str, merchant_id: Optional[str] = None, timeout: Optional[float] = None
    ) -> OrderInfo:
        ...

    async def get_payment_methods(
        self, merchant_id: Optional[str] = None, timeout: Optional[float] = None
    ) -> List[PaymentMethod]:
        ...

    async def validate_payment_webhook(
        self,
        webhook: Union[PaymentWebhookData, dict],
        secret_key: Optional[str] = None,
        request_ip: Optional[str] = None,
    ) -> bool:
        ...

    async def wait_for_payment(
        self,
        order_id: str,
        timeout: Optional[Timeout] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OrderInfo:
        ...


class WalletApi(Protocol):
    # Баланс и выплаты
    async def get_balance(self, timeout: Optional[float] = None) -> BalanceResponse:
        ...

    async def create_payoff(self, request: CreatePayoffRequest, timeout: Optional[float] = None) -> CreatePayoffResponse:
        ...

    async def get_payoff_info(
        self, my_id: Optional[str] = None, aaio_id: Optional[str] = None, timeout: Optional[float] = None
    ) -> PayoffInfo:
        ...

    async def get_payoff_methods(self, timeout: Optional[float] = None) -> List[PayoffMethod]:
        ...

    async def get_payoff_rates(
        self, method: str, amount: Union[Decimal, int, str], timeout: Optional[float] = None
    ) -> PayoffRatesResponse:
        ...

    async def get_sbp_banks(self, timeout: Optional[float] = None) -> List[SbpBank]:
        ...

    def validate_payoff_webhook(self, webhook: Union[PayoffWebhookData, dict], secret_key: str) -> bool:
        ...

    def validate_legacy_payoff_webhook(
        self, webhook: Union[LegacyPayoffWebhookData, dict], secret_key_payoff: Optional[str] = None
    ) -> bool:
        ...

    async def get_service_ips(self, timeout: Optional[float] = None) -> IpsResponse:
        ...


def require(value: Any, what: str) -> str:
    """Проверка обязательного идентификатора до похода в сеть."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{what} cannot be empty")
    return str(value)
