import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

_logger = logging.getLogger("aa_api")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry failed attempts with a geometrically growing delay.

    - retries: how many retries follow the first attempt (0 means a single attempt)
    - delay: wait before the first retry, in milliseconds
    - backoff: factor applied to the wait after each retry

    The delay is not capped and every failure kind is retried the same way.
    """

    retries: int = 10
    delay: float = 1e3
    backoff: float = 1.5

    def delays(self) -> Iterator[float]:
        """Yield the wait (ms) before each retry, in order."""
        delay = self.delay
        for _ in range(self.retries):
            yield delay
            delay *= self.backoff

    def call(self, fn: Callable[[], T], sleep: Callable[[float], object] = time.sleep) -> T:
        tries, delay = 0, self.delay
        while True:
            try:
                return fn()
            except Exception as e:
                tries += 1
                if tries > self.retries:
                    raise
                self._log_failure(tries, delay, e)
                sleep(delay / 1e3)
                delay *= self.backoff

    async def acall(
        self,
        fn: Callable[[], Awaitable[T]],
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> T:
        tries, delay = 0, self.delay
        while True:
            try:
                return await fn()
            except Exception as e:
                tries += 1
                if tries > self.retries:
                    raise
                self._log_failure(tries, delay, e)
                await sleep(delay / 1e3)
                delay *= self.backoff

    def _log_failure(self, tries: int, delay: float, error: BaseException) -> None:
        _logger.warning(
            f"attempt {tries}/{self.retries + 1} failed ({type(error).__name__}: {error}); "
            f"retrying in {delay:.0f}ms"
        )
