"""Exceptions raised when the event stream breaks the reporter's contract.

Test failures are never raised: they are collected as data and reported.
These exceptions mean the event source delivered something the report
queue cannot make sense of, and continuing would misorder or double-count
results.
"""


class ReporterError(Exception):
    """Base class for report engine contract violations."""


class TestNotQueuedError(ReporterError, LookupError):
    """An event referenced a test that is not in the report queue."""

    __test__ = False  # not a pytest test class

    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(
            f"Test '{test_name}' is not in the report queue "
            f"(never scheduled, or already reported)."
        )


class EmptyReportQueueError(ReporterError, IndexError):
    """The report queue was shifted while empty."""

    def __init__(self) -> None:
        super().__init__("Cannot remove from an empty report queue.")


class QueueOrderError(ReporterError, RuntimeError):
    """A test completed before the test at the front of the queue."""

    def __init__(self, completed_name: str, front_name: str):
        self.completed_name = completed_name
        self.front_name = front_name
        super().__init__(
            f"Test '{completed_name}' completed on all lanes while "
            f"'{front_name}' is still at the front of the report queue. "
            f"Lanes must complete tests in queue order."
        )
