import threading
import time
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_MIN_INTERVAL = 0.2


class RateLimiter:
    """Enforces a minimum delay between consecutive outbound requests.

    Every caller that shares an instance is serialized through it, so the
    spacing holds across all clients using the same limiter.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initializes the limiter.

        Args:
            min_interval: Minimum seconds between two requests.
            clock: Monotonic clock returning seconds.
            sleep: Function used to wait; tests pass a fake that advances
                a fake clock.
        """
        self.min_interval = min_interval
        self.clock = clock
        self.sleep = sleep
        self._lock = threading.Lock()
        self._last_request: float | None = None

    def wait(self) -> None:
        """Blocks until the next request may be sent and claims that slot."""
        with self._lock:
            now = self.clock()
            if self._last_request is not None:
                remaining = self.min_interval - (now - self._last_request)
                if remaining > 0:
                    logger.debug("rate_limit_sleep", seconds=round(remaining, 3))
                    self.sleep(remaining)
                    now = self.clock()
            self._last_request = now


_shared_limiter = RateLimiter()


def shared_rate_limiter() -> RateLimiter:
    """Returns the process-wide limiter used by API clients by default."""
    return _shared_limiter
