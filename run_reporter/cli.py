"""CLI entry point for run-reporter.

    run-reporter replay <plan.yaml> <events.yaml> [options]
    run-reporter validate <plan.yaml>
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .runner.executor import ReplayExecutor, ReporterConfig
from .task.parser import parse_events, parse_plan
from .task.validator import validate_plan

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def output_error(message: str, command: str, **extra) -> None:
    """Output error in CLI JSON format."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for diagnostics on stderr.",
)
def main(log_level: str) -> None:
    """Ordered result reporting for multi-lane test runs."""
    configure_logging(log_level)


@main.command()
@click.argument("plan_file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("events_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--save-report", is_flag=True, help="Save the JSON report to a file.")
@click.option(
    "--report-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for saved reports.",
)
@click.option(
    "--screenshot-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory screenshots are saved to.",
)
@click.option("--compact", is_flag=True, help="Print JSON on one line.")
def replay(
    plan_file: Path,
    events_file: Path,
    save_report: bool,
    report_dir: Optional[Path],
    screenshot_dir: Optional[Path],
    compact: bool,
) -> None:
    """Replay a recorded event log through the reporter."""
    try:
        plan = parse_plan(plan_file)
        events = parse_events(events_file, plan)
    except (FileNotFoundError, ValueError, OSError) as e:
        output_error(f"Failed to load run: {e}", "replay")
        sys.exit(1)

    config = ReporterConfig(
        save_report=save_report,
        report_dir=report_dir,
        pretty_output=not compact,
        screenshot_dir=screenshot_dir,
    )

    try:
        result = ReplayExecutor(plan, config).execute(events)
    except ValueError as e:
        output_error(str(e), "replay")
        sys.exit(1)

    flow_output = result.to_flow_json()
    indent = None if compact else 2
    click.echo(json.dumps(flow_output, indent=indent, ensure_ascii=False))

    if result.report_path:
        click.echo(f"Report saved: {result.report_path}", err=True)

    if not flow_output.get("success", False):
        sys.exit(1)


@main.command()
@click.argument("plan_file", type=click.Path(dir_okay=False, path_type=Path))
def validate(plan_file: Path) -> None:
    """Check a task plan without replaying anything."""
    try:
        plan = parse_plan(plan_file)
    except (FileNotFoundError, ValueError, OSError) as e:
        output_error(f"Failed to parse plan: {e}", "validate")
        sys.exit(1)

    validation = validate_plan(plan)
    for issue in validation.errors + validation.warnings:
        click.echo(f"{issue.severity.upper()} {issue.path}: {issue.message}", err=True)

    output = {
        "success": validation.valid,
        "command": "validate",
        "data": {
            "tests": plan.test_count,
            "fixtures": len(plan.fixtures),
            "lanes": plan.lane_labels,
            "errors": validation.error_count,
            "warnings": validation.warning_count,
        },
        "message": str(validation),
    }
    click.echo(json.dumps(output, ensure_ascii=False))

    if not validation.valid:
        sys.exit(1)


if __name__ == "__main__":
    main()
