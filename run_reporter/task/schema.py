"""Task data models for multi-lane test runs.

Defines the fixtures, tests and lanes a run is scheduled with, and the
error records lanes report back.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(eq=False)
class Fixture:
    """A named group of tests sharing setup context.

    Compared by identity: two fixtures are the same group only if they
    are the same object.
    """
    name: str
    path: str = ""

    def __repr__(self) -> str:
        return f"Fixture({self.name!r}, {self.path!r})"


@dataclass(eq=False)
class Test:
    """A single scheduled test. Compared by identity, like Fixture."""
    __test__ = False  # not a pytest test class

    name: str
    fixture: Fixture

    @property
    def full_name(self) -> str:
        """Fixture-qualified name, used to reference tests in event logs."""
        return f"{self.fixture.name}/{self.name}"

    def __repr__(self) -> str:
        return f"Test({self.full_name!r})"


@dataclass(frozen=True)
class Lane:
    """One concurrent execution context (e.g. a browser connection)."""
    label: str

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class TestError:
    """An error reported by one lane for one test run."""
    __test__ = False  # not a pytest test class

    user_agent: str
    type: str
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "user_agent": self.user_agent,
            "type": self.type,
            "message": self.message,
        }


@dataclass
class TaskPlan:
    """A scheduled run: tests in queue order plus the lanes running them."""
    tests: list[Test] = field(default_factory=list)
    lanes: list[Lane] = field(default_factory=list)

    @property
    def lane_labels(self) -> list[str]:
        return [lane.label for lane in self.lanes]

    @property
    def test_count(self) -> int:
        return len(self.tests)

    @property
    def fixtures(self) -> list[Fixture]:
        """Distinct fixtures in first-seen order."""
        seen: list[Fixture] = []
        for test in self.tests:
            if not any(f is test.fixture for f in seen):
                seen.append(test.fixture)
        return seen

    def find_test(self, full_name: str) -> Optional[Test]:
        """Look up a test by its fixture-qualified name."""
        for test in self.tests:
            if test.full_name == full_name:
                return test
        return None


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of task plan validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({self.warning_count} warnings)"
            return msg
        return f"Invalid: {self.error_count} errors, {self.warning_count} warnings"
