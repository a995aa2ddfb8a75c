import asyncio
import math
import random
from typing import Awaitable, Callable


class BusyBackoff:
    """
    Randomized exponential backoff between resubmissions of a query a node
    answered with BUSY.

    The delay before attempt ``n`` (n >= 1) is
    ``floor(base_ms * U(0, 1) * (2**n - 1))`` milliseconds. There is no cap on
    the number of attempts; the caller's deadline bounds the loop.
    """

    def __init__(
        self,
        base_ms: float = 500.0,
        random_fn: Callable[[], float] = random.random,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_ms = base_ms
        self._random = random_fn
        self._sleep = sleep

    def max_delay_ms(self, attempt: int) -> float:
        return self.base_ms * (2 ** attempt - 1)

    def delay_ms(self, attempt: int) -> int:
        if attempt <= 0:
            return 0
        return math.floor(self.base_ms * self._random() * (2 ** attempt - 1))

    async def wait(self, attempt: int) -> int:
        """Suspend for the attempt's delay and return it in milliseconds."""
        delay = self.delay_ms(attempt)
        await self._sleep(delay / 1000.0)
        return delay
