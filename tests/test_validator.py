from __future__ import annotations

from run_reporter.task.schema import Fixture, Lane, TaskPlan, Test
from run_reporter.task.validator import validate_plan

from conftest import make_plan


def test_valid_plan() -> None:
    result = validate_plan(make_plan([("A", ["a1"]), ("B", ["b1"])], ["chrome"]))
    assert result.valid
    assert str(result) == "Valid"


def test_no_lanes_is_an_error() -> None:
    result = validate_plan(make_plan([("A", ["a1"])], []))
    assert not result.valid
    assert result.errors[0].path == "lanes"


def test_duplicate_and_empty_lane_labels() -> None:
    result = validate_plan(make_plan([("A", ["a1"])], ["chrome", "", "chrome"]))
    assert [e.path for e in result.errors] == ["lanes[1]", "lanes[2]"]


def test_split_fixture_is_an_error() -> None:
    a = Fixture("A")
    b = Fixture("B")
    plan = TaskPlan(
        tests=[Test("a1", a), Test("b1", b), Test("a2", a)],
        lanes=[Lane("chrome")],
    )

    result = validate_plan(plan)

    assert not result.valid
    assert result.errors[0].path == "tests[2]"
    assert "not contiguous" in result.errors[0].message


def test_warnings_for_empty_plan_and_duplicate_names() -> None:
    assert validate_plan(make_plan([], ["chrome"])).warning_count == 1

    result = validate_plan(make_plan([("A", ["same", "same"])], ["chrome"]))
    assert result.valid
    assert result.warnings[0].path == "tests[1]"
    assert str(result) == "Valid (1 warnings)"
