import hmac, hashlib
from decimal import Decimal
from typing import Any, List, Sequence

# Подписи AAIO: sha256(":".join(fields)) в нижнем регистре.
# Порядок полей задаётся типом сообщения, секрет стоит внутри списка.
SIGN_DELIMITER = ":"


def format_amount(value: Any) -> str:
    """
    Сумма в подписи должна совпадать с текстом, который прислал шлюз,
    поэтому строки и Decimal не нормализуем.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise TypeError("amount must be a number or a string")
    return str(value)


def generate_sign(fields: Sequence[str]) -> str:
    joined = SIGN_DELIMITER.join(str(f) for f in fields)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def verify_sign(fields: Sequence[str], claimed_signature: Any) -> bool:
    if not isinstance(claimed_signature, str) or not claimed_signature:
        return False
    expected = generate_sign(fields)
    return hmac.compare_digest(expected.encode("ascii"), claimed_signature.strip().lower().encode("utf-8"))


# ---- Схемы подписи ----
def payment_sign_fields(merchant_id: str, amount: Any, currency: str, secret: str, order_id: str) -> List[str]:
    return [merchant_id, format_amount(amount), currency, secret, order_id]


def payoff_sign_fields(my_id: str, status: str, amount: Any, secret: str) -> List[str]:
    # вебхук выплаты бизнес-API
    return [my_id, status, format_amount(amount), secret]


def legacy_payoff_sign_fields(payoff_id: str, secret_payoff: str, amount_down: Any) -> List[str]:
    # вебхук выплаты старого API: другой порядок и другой секрет
    return [payoff_id, secret_payoff, format_amount(amount_down)]
