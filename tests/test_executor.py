from __future__ import annotations

import base64
import io
import json
from pathlib import Path

import pytest
from PIL import Image

from run_reporter.reporting.clock import ManualClock
from run_reporter.runner.executor import ReplayExecutor, ReporterConfig
from run_reporter.task.events import ScreenshotCaptured, TaskDone, TaskStart, TestRunDone, TestRunStart
from run_reporter.task.schema import Fixture, Lane, TaskPlan, Test, TestError

from conftest import make_plan


def _events_for(plan, failing=()):
    events = [TaskStart()]
    for test in plan.tests:
        for label in plan.lane_labels:
            events.append(TestRunStart(test, label))
        for label in plan.lane_labels:
            errs = (TestError(label, "assertion"),) if test.name in failing else ()
            events.append(TestRunDone(test, label, errs=errs))
    events.append(TaskDone())
    return events


def test_replay_collects_report() -> None:
    plan = make_plan([("A", ["a1", "a2"]), ("B", ["b1"])], ["chrome", "firefox"])

    result = ReplayExecutor(plan, clock=ManualClock()).execute(_events_for(plan, failing={"a2"}))

    assert result.error is None
    assert result.events_dispatched == 1 + 3 * 4 + 1
    assert result.report["passed"] == 2
    assert [f["name"] for f in result.report["fixtures"]] == ["A", "B"]
    assert not result.all_passed
    assert result.to_flow_json()["message"] == "1 of 3 tests failed"


def test_replay_saves_report(tmp_path: Path) -> None:
    plan = make_plan([("A", ["a1"])], ["chrome"])
    config = ReporterConfig(save_report=True, report_dir=tmp_path)

    result = ReplayExecutor(plan, config).execute(_events_for(plan))

    assert result.all_passed
    assert result.report_path == str(tmp_path / "run_report.json")
    saved = json.loads(Path(result.report_path).read_text(encoding="utf-8"))
    assert saved["passed"] == 1


def test_replay_rejects_invalid_plan() -> None:
    a, b = Fixture("A"), Fixture("B")
    plan = TaskPlan(tests=[Test("a1", a), Test("b1", b), Test("a2", a)], lanes=[Lane("x")])

    with pytest.raises(ValueError, match="not contiguous"):
        ReplayExecutor(plan).execute([])


def test_replay_aborts_on_out_of_order_completion() -> None:
    plan = make_plan([("A", ["a1", "a2"])], ["chrome"])
    a1, a2 = plan.tests
    events = [TaskStart(), TestRunDone(a2, "chrome"), TestRunDone(a1, "chrome"), TaskDone()]

    result = ReplayExecutor(plan).execute(events)

    assert result.error is not None
    assert result.error.startswith("QueueOrderError")
    flow = result.to_flow_json()
    assert flow["success"] is False
    assert flow["message"].startswith("Replay failed")


def test_replay_plan_warnings_reach_task_done() -> None:
    plan = make_plan([("A", ["same", "same"])], ["chrome"])

    result = ReplayExecutor(plan).execute(_events_for(plan))

    assert result.report["warnings"] == ["Duplicate test name 'same' in fixture 'A'."]


def _png_b64() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (3, 3), color=(10, 10, 200)).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def test_replay_saves_screenshot_data_under_screenshot_dir(tmp_path: Path) -> None:
    plan = make_plan([("A", ["a1"])], ["chrome"])
    (a1,) = plan.tests
    config = ReporterConfig(screenshot_dir=tmp_path / "shots")
    events = [
        TaskStart(),
        TestRunStart(a1, "chrome"),
        ScreenshotCaptured(a1, data=_png_b64()),
        TestRunDone(a1, "chrome"),
        TaskDone(),
    ]

    result = ReplayExecutor(plan, config).execute(events)

    saved = tmp_path / "shots" / "A_a1.png"
    assert result.error is None
    assert saved.exists()
    assert result.report["fixtures"][0]["tests"][0]["screenshot_path"] == str(saved)


def test_replay_fails_on_undecodable_screenshot(tmp_path: Path) -> None:
    plan = make_plan([("A", ["a1"])], ["chrome"])
    (a1,) = plan.tests
    config = ReporterConfig(screenshot_dir=tmp_path)
    events = [TaskStart(), ScreenshotCaptured(a1, data="not base64!"), TestRunDone(a1, "chrome")]

    result = ReplayExecutor(plan, config).execute(events)

    assert result.error is not None
    assert result.error.startswith("ValueError")
    assert result.to_flow_json()["success"] is False
