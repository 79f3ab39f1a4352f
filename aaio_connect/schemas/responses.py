from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import OrderStatus, PayoffStatus

# Упрощенные модели ответов AAIO: обязательны только поля, без которых
# клиенту нечего делать, остальное Optional и extra="allow".


class GatewayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str = "success"


class OrderInfo(GatewayResponse):
    id: str = ""
    order_id: str
    amount: Decimal
    currency: str = "RUB"
    method: Optional[str] = None
    status: OrderStatus
    merchant_id: str = ""
    description: Optional[str] = Field(default=None, alias="desc")
    email: Optional[str] = None
    date: Optional[int] = None
    expired_date: Optional[int] = None
    complete_date: Optional[int] = None


class CreateOrderResponse(GatewayResponse):
    url: Optional[str] = None
    id: Optional[str] = None
    message: Optional[str] = None


class PaymentMethod(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    min: Decimal = Decimal(0)
    max: Decimal = Decimal(0)
    commission_percent: Decimal = Decimal(0)
    commission_sum: Decimal = Decimal(0)


class PaymentMethodsResponse(GatewayResponse):
    list: List[PaymentMethod] = []


class BalanceResponse(GatewayResponse):
    balance: Decimal = Decimal(0)
    referral: Decimal = Decimal(0)
    hold: Decimal = Decimal(0)


class CreatePayoffResponse(GatewayResponse):
    id: Optional[str] = None
    my_id: Optional[str] = None
    message: Optional[str] = None


class PayoffInfo(GatewayResponse):
    id: str = ""
    my_id: str
    amount: Decimal
    method: str = ""
    wallet: str = ""
    status: PayoffStatus
    date: Optional[int] = None
    complete_date: Optional[int] = None


class PayoffMethod(PaymentMethod):
    pass


class PayoffMethodsResponse(GatewayResponse):
    list: List[PayoffMethod] = []


class PayoffRatesResponse(GatewayResponse):
    rate: Decimal
    from_currency: str = Field(default="", alias="from")
    to_currency: str = Field(default="", alias="to")


class SbpBank(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str
    name: str


class SbpBanksResponse(GatewayResponse):
    list: List[SbpBank] = []


class IpsResponse(GatewayResponse):
    ips: List[str] = []
