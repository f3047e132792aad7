from collections import deque
from collections.abc import Callable
from threading import RLock
from time import monotonic


class UpstreamBudgetExceededError(Exception):
    """Raised when the outbound call allowance for the window is spent."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"upstream budget exhausted, retry in {retry_after}s")
        self.retry_after = retry_after


class UpstreamBudget:
    """Sliding-window allowance of calls to the contributions API.

    The allowance is shared by every client: only requests that miss the
    response cache and would reach upstream are charged.
    """

    def __init__(
        self,
        max_calls: int = 30,
        window_seconds: int = 60,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.max_calls = max(1, max_calls)
        self.window_seconds = max(1, window_seconds)
        self._clock = clock
        self._calls: deque[float] = deque()
        self._lock = RLock()

    def remaining(self) -> int:
        with self._lock:
            self._forget_expired(self._clock())
            return self.max_calls - len(self._calls)

    def acquire(self) -> None:
        """Charge one upstream call against the window.

        Raises:
            UpstreamBudgetExceededError: If the window is already full.
        """

        with self._lock:
            now = self._clock()
            self._forget_expired(now)

            if len(self._calls) >= self.max_calls:
                oldest = self._calls[0]
                retry_after = max(1, int(self.window_seconds - (now - oldest)))
                raise UpstreamBudgetExceededError(retry_after)

            self._calls.append(now)

    def _forget_expired(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._calls and self._calls[0] <= cutoff:
            self._calls.popleft()
