"""Report queue for multi-lane test runs.

Holds one ReportItem per scheduled test, in schedule order. Lanes report
back per test; an item leaves the queue, always from the front, once every
lane has reported it.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from ..errors import EmptyReportQueueError, TestNotQueuedError
from ..task.schema import Fixture, Test, TestError


@dataclass
class ReportItem:
    """Aggregated state of one test across all lanes."""
    fixture: Fixture
    test: Test
    pending_runs: int
    errs: list[TestError] = field(default_factory=list)
    unstable: bool = False
    screenshot_path: Optional[str] = None
    start_time: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.pending_runs == 0


class ReportQueue:
    """Ordered report items, consumed strictly from the front."""

    def __init__(self, items: Sequence[ReportItem] = ()):
        self._items: list[ReportItem] = list(items)

    @classmethod
    def create(cls, tests: Sequence[Test], lanes_per_test: int) -> "ReportQueue":
        """Build one item per test, in the given order.

        Raises:
            ValueError: If lanes_per_test is less than 1. A test with no
                        lanes would never be reported.
        """
        if lanes_per_test < 1:
            raise ValueError(
                f"Tests must be scheduled on at least one lane, got {lanes_per_test}."
            )

        return cls(
            ReportItem(fixture=test.fixture, test=test, pending_runs=lanes_per_test)
            for test in tests
        )

    def find_by_test(self, test: Test) -> ReportItem:
        """Return the queued item tracking test.

        Raises:
            TestNotQueuedError: If the test is not queued.
        """
        for item in self._items:
            if item.test is test:
                return item
        raise TestNotQueuedError(getattr(test, "full_name", repr(test)))

    def remove_front(self) -> ReportItem:
        """Remove and return the front item.

        Raises:
            EmptyReportQueueError: If the queue is empty.
        """
        if not self._items:
            raise EmptyReportQueueError()
        return self._items.pop(0)

    def peek_front(self) -> Optional[ReportItem]:
        """The current front item, or None if the queue is empty."""
        return self._items[0] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[ReportItem]:
        return iter(self._items)
