"""YAML loaders for task plans and recorded event logs.

A plan file lists the lanes and the fixtures with their tests:

    lanes: [chrome, firefox]
    fixtures:
      - name: Login
        path: tests/login.js
        tests: [valid password, wrong password]

An event log is a list of events referencing tests as "<fixture>/<test>":

    - event: task-start
    - {event: test-run-start, test: Login/valid password, lane: chrome}
    - {event: test-run-done, test: Login/valid password, lane: chrome,
       errors: [{type: assertion, message: ...}], unstable: false}
    - {event: task-done, warnings: [...]}
"""

from pathlib import Path
from typing import Any, Union

import yaml

from .events import (
    ScreenshotCaptured,
    TaskDone,
    TaskEvent,
    TaskStart,
    TestRunDone,
    TestRunStart,
)
from .schema import Fixture, Lane, TaskPlan, Test, TestError

EVENT_KINDS = ("task-start", "test-run-start", "test-run-done", "task-done")


def _load_yaml(file_path: Union[str, Path], kind: str) -> Any:
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"{kind} file not found: {file_path}")

    if file_path.suffix not in (".yaml", ".yml"):
        raise ValueError(f"Expected .yaml or .yml file, got: {file_path.suffix}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Empty {kind.lower()} file: {file_path}")

    return data


def parse_plan(file_path: Union[str, Path]) -> TaskPlan:
    """Parse a YAML plan file into a TaskPlan.

    Raises:
        FileNotFoundError: If the plan file doesn't exist.
        ValueError: If the YAML is malformed or missing required fields.
    """
    data = _load_yaml(file_path, "Plan")
    return parse_plan_data(data, source=str(file_path))


def parse_plan_data(data: dict, source: str = "<inline>") -> TaskPlan:
    """Parse a TaskPlan from an already loaded mapping.

    Tests are queued in file order, fixture by fixture.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Plan must be a YAML mapping, got {type(data).__name__}")

    lanes_data = data.get("lanes", [])
    if not isinstance(lanes_data, list):
        raise ValueError(f"'lanes' must be a list in {source}")
    lanes = [Lane(label=str(label)) for label in lanes_data]

    fixtures_data = data.get("fixtures", [])
    if not isinstance(fixtures_data, list):
        raise ValueError(f"'fixtures' must be a list in {source}")

    tests: list[Test] = []
    for i, f_data in enumerate(fixtures_data):
        if not isinstance(f_data, dict):
            raise ValueError(f"Fixture {i} must be a mapping in {source}")
        _require_fields(f_data, ["name"], f"fixtures[{i}]", source)

        fixture = Fixture(name=str(f_data["name"]), path=str(f_data.get("path", "")))

        test_names = f_data.get("tests", [])
        if not isinstance(test_names, list):
            raise ValueError(f"'fixtures[{i}].tests' must be a list in {source}")
        tests.extend(Test(name=str(name), fixture=fixture) for name in test_names)

    return TaskPlan(tests=tests, lanes=lanes)


def parse_events(file_path: Union[str, Path], plan: TaskPlan) -> list[TaskEvent]:
    """Parse a YAML event log, resolving test references against the plan.

    Raises:
        FileNotFoundError: If the event file doesn't exist.
        ValueError: If an event is malformed or references an unknown test.
    """
    data = _load_yaml(file_path, "Event log")
    return parse_events_data(data, plan, source=str(file_path))


def parse_events_data(
    data: list, plan: TaskPlan, source: str = "<inline>"
) -> list[TaskEvent]:
    """Parse events from an already loaded list.

    A test-run-done entry with a "screenshot" key (saved file path) or a
    "screenshot_data" key (base64 image) yields a ScreenshotCaptured event
    ahead of the TestRunDone it belongs to.
    """
    if not isinstance(data, list):
        raise ValueError(f"Event log must be a YAML list, got {type(data).__name__}")

    events: list[TaskEvent] = []
    for i, e_data in enumerate(data):
        context = f"events[{i}]"
        if not isinstance(e_data, dict):
            raise ValueError(f"Event {i} must be a mapping in {source}")
        _require_fields(e_data, ["event"], context, source)

        kind = e_data["event"]
        if kind == "task-start":
            events.append(TaskStart())

        elif kind == "test-run-start":
            test = _resolve_test(e_data, plan, context, source)
            events.append(TestRunStart(test=test, lane=e_data.get("lane")))

        elif kind == "test-run-done":
            test = _resolve_test(e_data, plan, context, source)
            lane = e_data.get("lane")
            errs = _parse_errors(e_data.get("errors", []), lane, context, source)

            if e_data.get("screenshot_data"):
                events.append(ScreenshotCaptured(test=test, data=str(e_data["screenshot_data"])))
            elif e_data.get("screenshot"):
                events.append(ScreenshotCaptured(test=test, path=str(e_data["screenshot"])))

            events.append(TestRunDone(
                test=test,
                lane=lane,
                errs=errs,
                unstable=bool(e_data.get("unstable", False)),
            ))

        elif kind == "task-done":
            warnings = e_data.get("warnings")
            if warnings is not None and not isinstance(warnings, list):
                raise ValueError(f"'{context}.warnings' must be a list in {source}")
            events.append(TaskDone(
                warnings=tuple(str(w) for w in warnings) if warnings is not None else None,
            ))

        else:
            raise ValueError(
                f"Unknown event '{kind}' in {context} ({source}). "
                f"Must be one of: {', '.join(EVENT_KINDS)}"
            )

    return events


def _resolve_test(e_data: dict, plan: TaskPlan, context: str, source: str) -> Test:
    _require_fields(e_data, ["test"], context, source)
    test = plan.find_test(str(e_data["test"]))
    if test is None:
        raise ValueError(f"Unknown test '{e_data['test']}' in {context} ({source})")
    return test


def _parse_errors(
    errors_data: Any, lane: Any, context: str, source: str
) -> tuple[TestError, ...]:
    if not isinstance(errors_data, list):
        raise ValueError(f"'{context}.errors' must be a list in {source}")

    errs = []
    for j, err in enumerate(errors_data):
        if isinstance(err, str):
            err = {"message": err}
        if not isinstance(err, dict):
            raise ValueError(f"'{context}.errors[{j}]' must be a mapping in {source}")
        errs.append(TestError(
            user_agent=str(err.get("user_agent", lane or "")),
            type=str(err.get("type", "error")),
            message=str(err.get("message", "")),
        ))
    return tuple(errs)


def _require_fields(
    data: dict, fields: list[str], context: str, source: str
) -> None:
    """Check that required fields exist in a dictionary."""
    for field_name in fields:
        if field_name not in data:
            raise ValueError(
                f"Missing required field '{field_name}' in {context} ({source})"
            )
