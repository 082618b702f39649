"""Result aggregator for multi-lane test runs.

Every test runs on every lane. Lanes report start and completion per test
in whatever order they get there; the aggregator merges the lanes' results
per test and hands them to the reporter plugin one test at a time, in
schedule order, announcing each fixture before its first test.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..errors import QueueOrderError
from ..task.events import (
    ScreenshotCaptured,
    TaskDone,
    TaskEvent,
    TaskStart,
    TestRunDone,
    TestRunStart,
)
from ..task.schema import TaskPlan, TestError
from ..task.screenshots import ScreenshotStore
from ..task.warning_log import WarningLog
from .clock import Clock, SystemClock
from .plugin_host import ReporterPluginHost
from .report_queue import ReportItem, ReportQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestRunInfo:
    """Final result of one test, merged across lanes."""
    __test__ = False  # not a pytest test class

    errs: tuple[TestError, ...]
    duration_ms: int
    unstable: bool
    screenshot_path: Optional[str] = None

    @property
    def passed(self) -> bool:
        return not self.errs


def sort_errors(errs: list[TestError]) -> tuple[TestError, ...]:
    """Order errors by lane, then error type, whatever order lanes reported in."""
    return tuple(sorted(errs, key=lambda e: (e.user_agent, e.type)))


class Aggregator:
    """Turns a task's lifecycle events into ordered reporter calls.

    The aggregator owns the report queue and the passed counter. It has no
    thread of its own: each call to handle() (or an on_* method) processes
    one event, and events must arrive in a single global order.
    """

    def __init__(
        self,
        plan: TaskPlan,
        plugin_host: ReporterPluginHost,
        screenshots: Optional[ScreenshotStore] = None,
        warning_log: Optional[WarningLog] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize aggregator.

        Args:
            plan: Scheduled tests, fixture-contiguous, and the lanes running them.
            plugin_host: Receives the ordered report calls.
            screenshots: Queried when a test is finalized. None = no screenshots.
            warning_log: Source of task-done warnings when the event has none.
            clock: Time source. Default: SystemClock.

        Raises:
            ValueError: If the plan has no lanes.
        """
        self.plan = plan
        self.plugin_host = plugin_host
        self.screenshots = screenshots if screenshots is not None else ScreenshotStore()
        self.warning_log = warning_log if warning_log is not None else WarningLog()
        self.clock = clock if clock is not None else SystemClock()

        self.passed = 0
        self.test_count = plan.test_count
        self.report_queue = ReportQueue.create(plan.tests, len(plan.lanes))

        self._task_started = False
        self._task_done = False

    def handle(self, event: TaskEvent) -> None:
        """Dispatch one event to its handler."""
        if isinstance(event, TestRunStart):
            self.on_test_run_start(event)
        elif isinstance(event, TestRunDone):
            self.on_test_run_done(event)
        elif isinstance(event, ScreenshotCaptured):
            self.on_screenshot_captured(event)
        elif isinstance(event, TaskStart):
            self.on_task_start(event)
        elif isinstance(event, TaskDone):
            self.on_task_done(event)
        else:
            raise TypeError(f"Unsupported task event: {type(event).__name__}")

    def on_screenshot_captured(self, event: ScreenshotCaptured) -> None:
        if event.data is not None:
            self.screenshots.capture(event.test, event.data)
        elif event.path is not None:
            self.screenshots.register(event.test, event.path)
        else:
            raise ValueError(f"Screenshot for {event.test.full_name} has neither path nor data.")

    def on_task_start(self, event: TaskStart) -> None:
        if self._task_started:
            raise RuntimeError("Task start was already reported.")
        self._task_started = True

        start_time = self.clock.now()
        logger.info(
            "Task started: %d tests on %d lanes", self.test_count, len(self.plan.lanes)
        )
        self.plugin_host.report_task_start(start_time, self.plan.lane_labels, self.test_count)

        first = self.report_queue.peek_front()
        if first is not None:
            self._report_fixture_start(first)

    def on_test_run_start(self, event: TestRunStart) -> None:
        item = self._find_item(event.test)

        # The first lane to start a test starts its timer.
        if item.start_time is None:
            item.start_time = self.clock.monotonic()

    def on_test_run_done(self, event: TestRunDone) -> None:
        item = self._find_item(event.test)

        item.pending_runs -= 1
        item.unstable = item.unstable or event.unstable
        item.errs.extend(event.errs)

        if item.is_complete:
            if self.screenshots.has_captured_for(item.test):
                item.screenshot_path = self.screenshots.get_path_for(item.test)
            self._shift_report_queue(item)

    def on_task_done(self, event: TaskDone) -> None:
        if self._task_done:
            raise RuntimeError("Task done was already reported.")
        self._task_done = True

        if self.report_queue:
            logger.warning(
                "Task done with %d tests never reported by every lane",
                len(self.report_queue),
            )

        end_time = self.clock.now()
        warnings = (
            list(event.warnings) if event.warnings is not None else self.warning_log.messages
        )
        logger.info("Task done: %d/%d passed", self.passed, self.test_count)
        self.plugin_host.report_task_done(end_time, self.passed, warnings)

    def _find_item(self, test) -> ReportItem:
        try:
            return self.report_queue.find_by_test(test)
        except LookupError:
            logger.error("Event for unqueued test %r", test)
            raise

    def _create_test_run_info(self, item: ReportItem) -> TestRunInfo:
        start = item.start_time if item.start_time is not None else self.clock.monotonic()
        return TestRunInfo(
            errs=sort_errors(item.errs),
            duration_ms=int(round((self.clock.monotonic() - start) * 1000)),
            unstable=item.unstable,
            screenshot_path=item.screenshot_path,
        )

    def _shift_report_queue(self, item: ReportItem) -> None:
        front = self.report_queue.peek_front()
        if front is not item:
            front_name = front.test.full_name if front is not None else "<empty>"
            logger.error(
                "Out-of-order completion: %s finished before %s",
                item.test.full_name, front_name,
            )
            raise QueueOrderError(item.test.full_name, front_name)

        test_run_info = self._create_test_run_info(item)
        if test_run_info.passed:
            self.passed += 1

        self.report_queue.remove_front()
        self.plugin_host.report_test_done(item.test.name, test_run_info)

        # Tests are fixture-contiguous, so a new fixture at the front
        # means the previous fixture is finished.
        next_item = self.report_queue.peek_front()
        if next_item is not None and next_item.fixture is not item.fixture:
            self._report_fixture_start(next_item)

    def _report_fixture_start(self, item: ReportItem) -> None:
        logger.info("Fixture started: %s", item.fixture.name)
        self.plugin_host.report_fixture_start(item.fixture.name, item.fixture.path)
