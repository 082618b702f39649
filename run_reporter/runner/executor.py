"""Replay executor - feeds a recorded run through the reporter.

Coordinates the full replay flow:
1. Validate task plan
2. Wire screenshot store, warning log and JSON reporter
3. Post recorded events to the event channel
4. Drain the channel into the aggregator
5. Save report
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from ..errors import ReporterError
from ..reporting.aggregator import Aggregator
from ..reporting.clock import Clock
from ..reporting.json_reporter import JsonReporter
from ..reporting.plugin_host import ReporterPluginHost
from ..task.events import EventChannel, TaskEvent
from ..task.schema import TaskPlan
from ..task.screenshots import ScreenshotStore
from ..task.validator import validate_plan
from ..task.warning_log import WarningLog

logger = logging.getLogger(__name__)


@dataclass
class ReporterConfig:
    """Configuration for a replay run."""
    save_report: bool = False
    report_dir: Optional[Path] = None
    report_name: str = "run_report.json"
    pretty_output: bool = True
    screenshot_dir: Optional[Path] = None


@dataclass
class ReplayResult:
    """Outcome of replaying one recorded run."""
    report: dict[str, Any] = field(default_factory=dict)
    events_dispatched: int = 0
    error: Optional[str] = None
    report_path: Optional[str] = None

    @property
    def all_passed(self) -> bool:
        return self.error is None and bool(self.report) and self.report["passed"] == self.report["total"]

    def to_flow_json(self) -> dict:
        """Convert to CLI-compatible JSON output."""
        reporter = JsonReporter()
        if self.error is not None:
            return {
                "success": False,
                "command": "replay",
                "data": {"events_dispatched": self.events_dispatched},
                "message": f"Replay failed: {self.error}",
            }
        return reporter.generate_flow_output(self.report, self.report_path)


class ReplayExecutor:
    """Replays recorded task events through an Aggregator.

    Contract violations in the event stream (events for unscheduled or
    already reported tests, out-of-order completion) abort the replay and
    are recorded as the result's error.
    """

    def __init__(
        self,
        plan: TaskPlan,
        config: Optional[ReporterConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize replay executor.

        Args:
            plan: Parsed task plan.
            config: Reporter configuration.
            clock: Time source for the aggregator. Default: system clock.
        """
        self.plan = plan
        self.config = config or ReporterConfig()
        self.clock = clock

    def execute(self, events: Sequence[TaskEvent]) -> ReplayResult:
        """Replay events and collect the JSON report.

        Raises:
            ValueError: If the task plan is invalid.
        """
        validation = validate_plan(self.plan)
        if not validation.valid:
            errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
            raise ValueError(f"Invalid task plan: {errors_str}")

        warning_log = WarningLog()
        for warning in validation.warnings:
            logger.warning("%s: %s", warning.path, warning.message)
            warning_log.add_warning(warning.message)

        result = ReplayResult()
        reporter = JsonReporter(write_on_done=False, pretty=self.config.pretty_output)
        aggregator = Aggregator(
            self.plan,
            ReporterPluginHost(reporter, out_stream=io.StringIO()),
            screenshots=ScreenshotStore(self.config.screenshot_dir),
            warning_log=warning_log,
            clock=self.clock,
        )

        channel = EventChannel()
        channel.post_all(events)
        channel.close()

        try:
            result.events_dispatched = channel.drain(aggregator.handle)
        except (ReporterError, RuntimeError, TypeError, ValueError) as e:
            result.error = f"{type(e).__name__}: {e}"
            logger.error("Replay aborted: %s", result.error)
            return result

        result.report = reporter.report

        if self.config.save_report:
            result.report_path = self._save_report(reporter, result.report)

        return result

    def _save_report(self, reporter: JsonReporter, report: dict[str, Any]) -> str:
        report_dir = self.config.report_dir or Path(".")
        saved_path = reporter.save(report, report_dir / self.config.report_name)
        logger.info("Report saved: %s", saved_path)
        return str(saved_path)
