import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..errors import SecurityError, ValidationError
from ..schemas.requests import CreateOrderRequest
from ..schemas.responses import CreateOrderResponse, IpsResponse, OrderInfo, PaymentMethod, PaymentMethodsResponse
from ..schemas.webhooks import PaymentWebhookData
from ..services.payment_waiter import PaymentWaiter, Timeout
from ..settings import settings
from ..transport import RetryingTransport, build_path
from ..utils.security import generate_sign, payment_sign_fields, verify_sign
from .base import require

logger = logging.getLogger(__name__)


class BusinessClient:
    """
    AAIO для мерчанта:
      - POST merchant/pay                                   (создать заказ)
      - GET  api/informaciya-o-zakaze                       (статус заказа)
      - GET  api/dostupnye-metody-dlya-sozdaniya-zakaza     (методы оплаты)
      - GET  ip-adresa-servisa                              (IP AAIO для проверки вебхука)
    Плюс проверка подписи вебхука и ожидание оплаты (PaymentWaiter).
    """

    name = "aaio_business"

    def __init__(
        self,
        http: RetryingTransport,
        merchant_id: str,
        secret_key_1: str,
        secret_key_2: Optional[str] = None,
        webhook_ip_check: bool = settings.WEBHOOK_IP_CHECK,
        waiter: Optional[PaymentWaiter] = None,
    ):
        if not merchant_id or not merchant_id.strip():
            raise ValueError("Merchant ID cannot be empty")
        if not secret_key_1 or not secret_key_1.strip():
            raise ValueError("Secret key 1 cannot be empty")
        self.http = http
        self.merchant_id = merchant_id
        self._secret_key_1 = secret_key_1
        self._secret_key_2 = secret_key_2
        self.webhook_ip_check = webhook_ip_check
        self.waiter = waiter or PaymentWaiter(self)

    def __repr__(self):
        return f"<{self.__class__.__name__}(merchant_id={self.merchant_id!r})>"

    # ---- Utils ----
    def _order_sign(self, request: CreateOrderRequest) -> str:
        return generate_sign(
            payment_sign_fields(
                self.merchant_id, request.amount, request.currency, self._secret_key_1, request.order_id
            )
        )

    def _prepare_order(self, request: CreateOrderRequest) -> Dict[str, Any]:
        if request is None:
            raise ValidationError("Order request is required")
        require(request.order_id, "Order ID")
        require(request.currency, "Currency")
        if request.amount <= 0:
            raise ValidationError("Amount must be positive")
        stamped = request.model_copy(update={"merchant_id": self.merchant_id})
        body = stamped.model_dump(mode="json", by_alias=True, exclude_none=True)
        body["sign"] = self._order_sign(stamped)
        return body

    # ---- API ----
    async def create_order(self, request: CreateOrderRequest, timeout: Optional[float] = None) -> CreateOrderResponse:
        body = self._prepare_order(request)
        logger.info("Creating order %s for amount %s %s", request.order_id, request.amount, request.currency)
        return await self.http.post("merchant/pay", body, response_model=CreateOrderResponse, timeout=timeout)

    def build_payment_url(self, request: CreateOrderRequest) -> str:
        """
        Ссылка на форму оплаты старого API: merchant/pay?...&sign=...
        Подпись та же, что у вебхука оплаты, но с secret_key_1.
        """
        body = self._prepare_order(request)
        params = {
            "merchant_id": body["merchant_id"],
            "amount": body["amount"],
            "currency": body["currency"],
            "order_id": body["order_id"],
            "sign": body["sign"],
            "desc": body.get("desc"),
            "lang": body.get("lang"),
            "method": body.get("method"),
            "email": body.get("email"),
            "referral": body.get("referral"),
            "us_key": body.get("us_key"),
        }
        return f"{self.http.base_url}/{build_path('merchant/pay', params)}"

    async def get_order_info(
        self, order_id: str, merchant_id: Optional[str] = None, timeout: Optional[float] = None
    ) -> OrderInfo:
        require(order_id, "Order ID")
        logger.info("Fetching order info for %s", order_id)
        return await self.http.get(
            "api/informaciya-o-zakaze",
            {"merchant_id": merchant_id or self.merchant_id, "order_id": order_id},
            response_model=OrderInfo,
            timeout=timeout,
        )

    async def get_payment_methods(
        self, merchant_id: Optional[str] = None, timeout: Optional[float] = None
    ) -> List[PaymentMethod]:
        logger.info("Fetching available payment methods")
        resp = await self.http.get(
            "api/dostupnye-metody-dlya-sozdaniya-zakaza",
            {"merchant_id": merchant_id or self.merchant_id},
            response_model=PaymentMethodsResponse,
            timeout=timeout,
        )
        return resp.list

    async def validate_payment_webhook(
        self,
        webhook: Union[PaymentWebhookData, Dict[str, Any]],
        secret_key: Optional[str] = None,
        request_ip: Optional[str] = None,
    ) -> bool:
        """
        False, если подпись не сошлась. SecurityError, если включена проверка IP
        и запрос пришёл не с адреса из списка AAIO.
        """
        if webhook is None:
            raise ValidationError("Webhook payload is required")
        if not isinstance(webhook, PaymentWebhookData):
            try:
                webhook = PaymentWebhookData.model_validate(webhook)
            except PydanticValidationError as e:
                raise ValidationError(f"Malformed payment webhook: {e.error_count()} invalid field(s)") from e
        # secret_key_1 подписывает ссылку на оплату, которую видит покупатель,
        # поэтому вебхук проверяем только вторым ключом
        secret = require(secret_key or self._secret_key_2, "Secret key 2")
        if secret == self._secret_key_1:
            raise ValidationError("Webhook secret must differ from secret key 1")

        fields = payment_sign_fields(webhook.merchant_id, webhook.amount, webhook.currency, secret, webhook.order_id)
        if not verify_sign(fields, webhook.sign):
            logger.warning("Payment webhook signature validation failed for order %s", webhook.order_id)
            return False

        if self.webhook_ip_check and request_ip:
            logger.debug("Validating webhook IP: %s", request_ip)
            ips = await self.http.get("ip-adresa-servisa", response_model=IpsResponse)
            if request_ip not in ips.ips:
                logger.error("Webhook from untrusted IP: %s", request_ip)
                raise SecurityError(f"Request from untrusted IP: {request_ip}", request_ip=request_ip)
            logger.debug("IP validation passed for %s", request_ip)

        return True

    async def wait_for_payment(
        self,
        order_id: str,
        timeout: Optional[Timeout] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OrderInfo:
        return await self.waiter.wait_for_completion(order_id, timeout=timeout, cancel_event=cancel_event)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
