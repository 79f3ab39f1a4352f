import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


class StopReason(str, Enum):
    DEADLINE = "deadline"
    CANCELLED = "cancelled"


class ScopeStopped(Exception):
    def __init__(self, reason: StopReason):
        self.reason = reason
        super().__init__(f"scope stopped: {reason.value}")


class CancelScope:
    """
    Общий сигнал остановки для одного ожидания: абсолютный дедлайн
    плюс необязательный asyncio.Event от вызывающего кода.
    Если сработало и то и другое, причиной считается дедлайн.
    """

    def __init__(
        self,
        timeout: float,
        cancel_event: Optional[asyncio.Event] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._clock = clock or asyncio.get_running_loop().time
        self.started = self._clock()
        self.deadline = self.started + timeout
        self.cancel_event = cancel_event

    @property
    def reason(self) -> Optional[StopReason]:
        if self._clock() >= self.deadline:
            return StopReason.DEADLINE
        if self.cancel_event is not None and self.cancel_event.is_set():
            return StopReason.CANCELLED
        return None

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._clock())

    def elapsed(self) -> float:
        return self._clock() - self.started

    def check(self) -> None:
        reason = self.reason
        if reason is not None:
            raise ScopeStopped(reason)

    async def run(self, aw: Awaitable[T]) -> T:
        try:
            self.check()
        except ScopeStopped:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise
        task = asyncio.ensure_future(aw)
        try:
            await self._wait(task, self.remaining())
        except BaseException:
            task.cancel()
            raise
        if task.done():
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled():
            task.exception()
        # таймер цикла может сработать чуть раньше дедлайна
        raise ScopeStopped(self.reason or StopReason.DEADLINE)

    async def sleep(self, delay: float) -> None:
        self.check()
        await self._wait(None, min(delay, self.remaining()))
        self.check()

    async def _wait(self, task: Optional[asyncio.Future], timeout: float) -> None:
        waiters = set()
        if task is not None:
            waiters.add(task)
        stopper = None
        if self.cancel_event is not None:
            stopper = asyncio.ensure_future(self.cancel_event.wait())
            waiters.add(stopper)
        try:
            if waiters:
                await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            else:
                await asyncio.sleep(timeout)
        finally:
            if stopper is not None:
                stopper.cancel()
