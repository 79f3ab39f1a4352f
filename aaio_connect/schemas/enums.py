from enum import Enum


class _GatewayStatus(str, Enum):
    @classmethod
    def _missing_(cls, value):
        # в документации AAIO встречается и "pending", и "in_process"
        if isinstance(value, str) and value.strip().lower() in {"pending", "in_process"}:
            return cls("in_process")
        return None


class OrderStatus(_GatewayStatus):
    PENDING = "in_process"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class PayoffStatus(_GatewayStatus):
    PENDING = "in_process"
    SUCCESS = "success"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PayoffStatus.PENDING
