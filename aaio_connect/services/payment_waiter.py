import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Optional, Protocol, Union

from ..errors import (
    PaymentFailedError,
    PaymentWaitCancelledError,
    PaymentWaitTimeoutError,
    ValidationError,
)
from ..schemas.enums import OrderStatus
from ..schemas.responses import OrderInfo
from ..settings import settings
from ..utils.cancellation import CancelScope, ScopeStopped, StopReason

logger = logging.getLogger(__name__)

Timeout = Union[float, timedelta]


class OrderInfoSource(Protocol):
    async def get_order_info(self, order_id: str) -> OrderInfo:
        ...


def default_jitter() -> float:
    return random.random()


def _seconds(value: Timeout) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass
class _PollState:
    scope: CancelScope
    delay: float
    polls: int = 0
    last_status: Optional[OrderStatus] = None


class PaymentWaiter:
    """
    Ждёт, пока заказ станет success или failed, опрашивая статус
    с экспоненциальной паузой (1s, 2s, 4s ... максимум 5 минут) и джиттером [0, 1s).

    Без таймаута ждём settings.WAIT_TIMEOUT_SEC (3 дня), чтобы ожидание
    всегда было ограничено. Состояние опроса живёт только внутри одного вызова,
    параллельные ожидания разных заказов друг от друга не зависят.
    """

    def __init__(
        self,
        source: OrderInfoSource,
        start_delay: float = settings.WAIT_START_DELAY_SEC,
        max_delay: float = settings.WAIT_MAX_DELAY_SEC,
        default_timeout: Timeout = settings.WAIT_TIMEOUT_SEC,
        jitter: Callable[[], float] = default_jitter,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.source = source
        self.start_delay = start_delay
        self.max_delay = max_delay
        self.default_timeout = _seconds(default_timeout)
        self._jitter = jitter
        self._clock = clock

    async def wait_for_completion(
        self,
        order_id: str,
        timeout: Optional[Timeout] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> OrderInfo:
        if not order_id or not order_id.strip():
            raise ValidationError("Order ID cannot be empty")
        effective = self.default_timeout if timeout is None else _seconds(timeout)
        if effective <= 0:
            raise ValidationError("Wait timeout must be positive")

        state = _PollState(scope=CancelScope(effective, cancel_event, clock=self._clock), delay=self.start_delay)
        logger.info("Starting payment wait for order %s with timeout %s", order_id, timedelta(seconds=effective))

        try:
            while True:
                info = await state.scope.run(self.source.get_order_info(order_id))
                state.polls += 1
                state.last_status = info.status

                if info.status is OrderStatus.SUCCESS:
                    logger.info(
                        "Payment completed for order %s after %.1fs (%d polls)",
                        order_id, state.scope.elapsed(), state.polls,
                    )
                    return info

                if info.status is OrderStatus.FAILED:
                    logger.warning("Payment failed for order %s", order_id)
                    raise PaymentFailedError(order_id)

                pause = state.delay + self._jitter()
                logger.debug("Order %s still pending, waiting %.2fs before next poll", order_id, pause)
                await state.scope.sleep(pause)
                state.delay = min(state.delay * 2, self.max_delay)
        except ScopeStopped as e:
            elapsed = state.scope.elapsed()
            if e.reason is StopReason.DEADLINE:
                logger.warning(
                    "Payment wait timeout for order %s after %.1fs (last status %s)",
                    order_id, elapsed, state.last_status,
                )
                raise PaymentWaitTimeoutError(order_id, effective, elapsed) from None
            logger.info("Payment wait for order %s cancelled after %.1fs", order_id, elapsed)
            raise PaymentWaitCancelledError(order_id, elapsed) from None
