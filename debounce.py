"""Trailing-edge debounce built on a cancelable timer."""
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Delay calls to ``func`` until input has been quiet for ``wait`` seconds.

    Each call replaces the pending value, so only the last value seen within
    the quiet window is ever applied.
    """

    def __init__(
        self,
        func: Callable[[Any], None],
        wait: float = 0.3,
        timer_factory: Callable[..., Any] = threading.Timer
    ):
        """
        Args:
            func: Callback receiving the settled value
            wait: Quiet interval in seconds
            timer_factory: Builds the timer; must match threading.Timer's
                           signature and expose start() and cancel()
        """
        self.func = func
        self.wait = wait
        self.timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._value: Any = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def __call__(self, value: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._value = value
            timer = self.timer_factory(self.wait, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()
        logger.debug("Scheduled %r in %.3fs", value, self.wait)

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer call or cancel() superseded this timer
            if generation != self._generation or self._timer is None:
                return
            value = self._value
            self._timer = None
            self._value = None
        self.func(value)

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            self._timer = None
            self._value = None
            self._generation += 1
        logger.debug("Cancelled pending call")

    def flush(self) -> Optional[Any]:
        """
        Apply the pending call right away.

        Returns:
            The applied value, or None when nothing was pending
        """
        with self._lock:
            if self._timer is None:
                return None
            self._timer.cancel()
            value = self._value
            self._timer = None
            self._value = None
            self._generation += 1
        self.func(value)
        return value
