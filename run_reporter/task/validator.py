"""Task plan validator.

Validates parsed TaskPlan objects against the scheduling rules the
report queue depends on.
"""

from .schema import Fixture, TaskPlan, ValidationError, ValidationResult


def validate_plan(plan: TaskPlan) -> ValidationResult:
    """Validate a parsed TaskPlan.

    Checks:
    - Lanes (at least one, non-empty unique labels)
    - Tests of one fixture are scheduled contiguously
    - Test names are unique within their fixture

    Args:
        plan: Parsed TaskPlan to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    _validate_lanes(plan, errors)
    _validate_tests(plan, errors, warnings)

    if not plan.tests:
        warnings.append(ValidationError(
            path="fixtures",
            message="No tests scheduled. The report will be empty.",
            severity="warning",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_lanes(plan: TaskPlan, errors: list[ValidationError]) -> None:
    """Validate the lanes tests are scheduled on."""
    if not plan.lanes:
        errors.append(ValidationError(
            path="lanes",
            message="At least one lane is required; tests scheduled on zero lanes never complete.",
        ))
        return

    seen: set[str] = set()
    for i, lane in enumerate(plan.lanes):
        if not lane.label:
            errors.append(ValidationError(
                path=f"lanes[{i}]",
                message="Lane label must not be empty.",
            ))
        elif lane.label in seen:
            errors.append(ValidationError(
                path=f"lanes[{i}]",
                message=f"Duplicate lane label '{lane.label}'.",
            ))
        seen.add(lane.label)


def _validate_tests(
    plan: TaskPlan,
    errors: list[ValidationError],
    warnings: list[ValidationError],
) -> None:
    """Validate test ordering and naming."""
    closed: list[Fixture] = []  # fixtures whose contiguous block has ended
    current = None
    names_by_fixture: dict[Fixture, set[str]] = {}

    for i, test in enumerate(plan.tests):
        path = f"tests[{i}]"
        fixture = test.fixture

        if fixture is not current:
            if any(f is fixture for f in closed):
                errors.append(ValidationError(
                    path=path,
                    message=(
                        f"Fixture '{fixture.name}' is not contiguous: test "
                        f"'{test.name}' is scheduled after another fixture started."
                    ),
                ))
            if current is not None:
                closed.append(current)
            current = fixture

        names = names_by_fixture.setdefault(fixture, set())
        if test.name in names:
            warnings.append(ValidationError(
                path=path,
                message=f"Duplicate test name '{test.name}' in fixture '{fixture.name}'.",
                severity="warning",
            ))
        names.add(test.name)
