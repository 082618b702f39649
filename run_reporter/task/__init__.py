"""Task module - scheduled run model and lifecycle events."""

from .events import (
    EventChannel,
    ScreenshotCaptured,
    TaskDone,
    TaskEvent,
    TaskStart,
    TestRunDone,
    TestRunStart,
)
from .parser import parse_events, parse_events_data, parse_plan, parse_plan_data
from .schema import (
    Fixture,
    Lane,
    TaskPlan,
    Test,
    TestError,
    ValidationError,
    ValidationResult,
)
from .screenshots import ScreenshotStore
from .validator import validate_plan
from .warning_log import WarningLog

__all__ = [
    "EventChannel",
    "ScreenshotCaptured",
    "TaskDone",
    "TaskEvent",
    "TaskStart",
    "TestRunDone",
    "TestRunStart",
    "parse_events",
    "parse_events_data",
    "parse_plan",
    "parse_plan_data",
    "Fixture",
    "Lane",
    "TaskPlan",
    "Test",
    "TestError",
    "ValidationError",
    "ValidationResult",
    "ScreenshotStore",
    "validate_plan",
    "WarningLog",
]
