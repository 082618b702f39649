from __future__ import annotations

from typing import List, Tuple

import pytest

from run_reporter.reporting.aggregator import Aggregator
from run_reporter.reporting.clock import ManualClock
from run_reporter.reporting.plugin_host import ReporterPluginHost
from run_reporter.task.schema import Fixture, Lane, TaskPlan, Test
from run_reporter.task.screenshots import ScreenshotStore
from run_reporter.task.warning_log import WarningLog


class RecordingPlugin:
    def __init__(self) -> None:
        self.calls: List[Tuple] = []

    def report_task_start(self, start_time, user_agents, test_count) -> None:
        self.calls.append(("task_start", start_time, list(user_agents), test_count))

    def report_fixture_start(self, name, path) -> None:
        self.calls.append(("fixture_start", name, path))

    def report_test_done(self, name, test_run_info) -> None:
        self.calls.append(("test_done", name, test_run_info))

    def report_task_done(self, end_time, passed, warnings) -> None:
        self.calls.append(("task_done", end_time, passed, list(warnings)))

    def kinds(self) -> List[str]:
        return [call[0] for call in self.calls]

    def test_done(self) -> List[Tuple]:
        return [call for call in self.calls if call[0] == "test_done"]

    def info_for(self, name: str):
        for call in self.test_done():
            if call[1] == name:
                return call[2]
        raise AssertionError(f"{name} was not reported")


def make_plan(layout: List[Tuple[str, List[str]]], lanes: List[str]) -> TaskPlan:
    tests = []
    for fixture_name, test_names in layout:
        fixture = Fixture(fixture_name, f"tests/{fixture_name.lower()}.js")
        tests.extend(Test(name, fixture) for name in test_names)
    return TaskPlan(tests=tests, lanes=[Lane(label) for label in lanes])


class Harness:
    def __init__(self, plan: TaskPlan) -> None:
        self.plan = plan
        self.plugin = RecordingPlugin()
        self.clock = ManualClock()
        self.screenshots = ScreenshotStore()
        self.warning_log = WarningLog()
        self.aggregator = Aggregator(
            plan,
            ReporterPluginHost(self.plugin),
            screenshots=self.screenshots,
            warning_log=self.warning_log,
            clock=self.clock,
        )

    def test(self, name: str) -> Test:
        for test in self.plan.tests:
            if test.name == name:
                return test
        raise KeyError(name)


@pytest.fixture
def harness_factory():
    def build(layout, lanes) -> Harness:
        return Harness(make_plan(layout, lanes))

    return build
