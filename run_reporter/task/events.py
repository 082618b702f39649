"""Task lifecycle events and the channel that serializes them.

Lanes run concurrently and may post events from any thread. The reporter
must see them one at a time in a single global order, so every event goes
through one EventChannel and is dispatched by its single consumer loop.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .schema import Test, TestError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskStart:
    """The whole task started. Fires once, before any test events."""


@dataclass(frozen=True)
class TestRunStart:
    """A lane started running a test."""
    __test__ = False  # not a pytest test class

    test: Test
    lane: Optional[str] = None


@dataclass(frozen=True)
class TestRunDone:
    """A lane finished running a test."""
    __test__ = False  # not a pytest test class

    test: Test
    lane: Optional[str] = None
    errs: tuple[TestError, ...] = ()
    unstable: bool = False


@dataclass(frozen=True)
class TaskDone:
    """The whole task finished. Fires once, after every test is reported.

    warnings: None = take warnings from the task's warning log.
    """
    warnings: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class ScreenshotCaptured:
    """A screenshot was taken for a test.

    Either path points at an already saved file, or data carries the
    base64-encoded image for the screenshot store to save.
    """
    test: Test
    path: Optional[str] = None
    data: Optional[str] = None


TaskEvent = Union[TaskStart, TestRunStart, TestRunDone, TaskDone, ScreenshotCaptured]


_CLOSED = object()


class EventChannel:
    """Single-consumer channel feeding task events to one handler.

    Producers call post() from any thread; drain() runs the consumer loop
    on the calling thread until close() is seen.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = False
        self._lock = threading.Lock()

    def post(self, event: TaskEvent) -> None:
        """Enqueue an event for the consumer."""
        with self._lock:
            if self._closed:
                raise RuntimeError(f"Cannot post {type(event).__name__} to a closed channel.")
            self._queue.put(event)

    def post_all(self, events) -> None:
        for event in events:
            self.post(event)

    def close(self) -> None:
        """Stop accepting events; drain() returns after the ones already posted."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def drain(
        self,
        handler: Callable[[TaskEvent], None],
        timeout: Optional[float] = None,
    ) -> int:
        """Dispatch events to handler, in arrival order, until the channel closes.

        Args:
            handler: Called once per event. An exception stops the loop and
                     propagates to the caller.
            timeout: Maximum seconds to wait for each event. None = wait forever.

        Returns:
            Number of events dispatched.

        Raises:
            TimeoutError: If no event arrives within timeout.
        """
        dispatched = 0

        while True:
            try:
                event = self._queue.get(timeout=timeout)
            except queue.Empty:
                raise TimeoutError(
                    f"No task event within {timeout:.1f}s ({dispatched} dispatched)"
                ) from None

            if event is _CLOSED:
                logger.debug("Event channel closed after %d events", dispatched)
                return dispatched

            logger.debug("Dispatching %s", type(event).__name__)
            handler(event)
            dispatched += 1
