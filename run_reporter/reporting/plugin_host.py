"""Host for reporter output plugins.

A plugin receives four calls, in this order: task start, then for each
fixture a fixture start followed by its test results, then task done.
The host forwards them and gives the plugin an output stream to write to.
"""

import logging
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Protocol, TextIO

if TYPE_CHECKING:
    from .aggregator import TestRunInfo

logger = logging.getLogger(__name__)


class ReporterPlugin(Protocol):
    def report_task_start(
        self, start_time: datetime, user_agents: list[str], test_count: int
    ) -> None: ...

    def report_fixture_start(self, name: str, path: str) -> None: ...

    def report_test_done(self, name: str, test_run_info: "TestRunInfo") -> None: ...

    def report_task_done(
        self, end_time: datetime, passed: int, warnings: list[str]
    ) -> None: ...


class ReporterPluginHost:
    """Forwards reporter calls to a plugin and owns its output stream."""

    def __init__(self, plugin: ReporterPlugin, out_stream: Optional[TextIO] = None):
        """Initialize plugin host.

        Args:
            plugin: Output plugin receiving the report calls.
            out_stream: Stream plugins write to. Default: sys.stdout.
        """
        self.plugin = plugin
        self.out_stream = out_stream if out_stream is not None else sys.stdout

        # Plugins that want to write through the host get a back-reference.
        if hasattr(plugin, "attach"):
            plugin.attach(self)

    def write(self, text: str) -> "ReporterPluginHost":
        self.out_stream.write(text)
        return self

    def newline(self) -> "ReporterPluginHost":
        self.out_stream.write("\n")
        return self

    def report_task_start(
        self, start_time: datetime, user_agents: list[str], test_count: int
    ) -> None:
        logger.debug("report_task_start: %d tests on %s", test_count, user_agents)
        self.plugin.report_task_start(start_time, user_agents, test_count)

    def report_fixture_start(self, name: str, path: str) -> None:
        logger.debug("report_fixture_start: %s (%s)", name, path)
        self.plugin.report_fixture_start(name, path)

    def report_test_done(self, name: str, test_run_info: "TestRunInfo") -> None:
        logger.debug(
            "report_test_done: %s (%d errors, %d ms)",
            name, len(test_run_info.errs), test_run_info.duration_ms,
        )
        self.plugin.report_test_done(name, test_run_info)

    def report_task_done(
        self, end_time: datetime, passed: int, warnings: list[str]
    ) -> None:
        logger.debug("report_task_done: %d passed, %d warnings", passed, len(warnings))
        self.plugin.report_task_done(end_time, passed, warnings)
