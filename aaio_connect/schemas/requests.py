from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # merchant_id проставляет BusinessClient
    merchant_id: str = ""
    amount: Decimal
    currency: str = "RUB"
    order_id: str
    description: Optional[str] = Field(default=None, alias="desc")
    method: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    lang: Optional[str] = None
    referral: Optional[str] = None
    success_url: Optional[str] = None
    fail_url: Optional[str] = None
    us_key: Optional[str] = None


class CreatePayoffRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    my_id: str
    method: str
    amount: Decimal
    wallet: str
    commission_type: int = 0
