from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class _Webhook(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # суммы держим строкой: подпись считается по тексту, который прислал шлюз
    @field_validator("*", mode="before")
    @classmethod
    def _numbers_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class PaymentWebhookData(_Webhook):
    """
    Уведомление об оплате заказа (POST от AAIO на URL оповещения).
    sign = sha256(merchant_id:amount:currency:secret:order_id)
    """

    merchant_id: str
    order_id: str
    amount: str
    currency: str = "RUB"
    profit: Optional[str] = None
    commission: Optional[str] = None
    method: Optional[str] = None
    email: Optional[str] = None
    sign: str


class PayoffWebhookData(_Webhook):
    """sign = sha256(my_id:status:amount:secret)"""

    my_id: str
    status: str
    amount: str
    sign: str


class LegacyPayoffWebhookData(_Webhook):
    """
    Уведомление о выплате старого API.
    sign = sha256(id:secret_payoff:amount_down)
    """

    id: str
    my_id: Optional[str] = None
    method: Optional[str] = None
    wallet: Optional[str] = None
    amount: Optional[str] = None
    amount_down: str
    commission: Optional[str] = None
    status: Optional[str] = None
    sign: str
