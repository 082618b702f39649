"""JSON reporter plugin for multi-lane test runs.

Builds a structured JSON report from the aggregator's ordered calls.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .aggregator import TestRunInfo
    from .plugin_host import ReporterPluginHost


class JsonReporter:
    """Collects reporter calls into a JSON-serializable report."""

    def __init__(self, write_on_done: bool = True, pretty: bool = True):
        """Initialize JSON reporter.

        Args:
            write_on_done: Write the report to the host stream on task done.
            pretty: Indent the written JSON.
        """
        self.write_on_done = write_on_done
        self.pretty = pretty
        self.report: dict[str, Any] = {}
        self._host: Optional["ReporterPluginHost"] = None
        self._fixture: Optional[dict[str, Any]] = None

    def attach(self, host: "ReporterPluginHost") -> None:
        self._host = host

    def report_task_start(
        self, start_time: datetime, user_agents: list[str], test_count: int
    ) -> None:
        self.report = {
            "start_time": start_time.isoformat(),
            "end_time": None,
            "lanes": list(user_agents),
            "total": test_count,
            "passed": 0,
            "failed": 0,
            "fixtures": [],
            "warnings": [],
        }
        self._fixture = None

    def report_fixture_start(self, name: str, path: str) -> None:
        self._fixture = {"name": name, "path": path, "tests": []}
        self.report["fixtures"].append(self._fixture)

    def report_test_done(self, name: str, test_run_info: "TestRunInfo") -> None:
        if self._fixture is None:
            raise RuntimeError(f"Test '{name}' reported before any fixture start.")

        self._fixture["tests"].append({
            "name": name,
            "status": "passed" if test_run_info.passed else "failed",
            "errs": [e.to_dict() for e in test_run_info.errs],
            "duration_ms": test_run_info.duration_ms,
            "unstable": test_run_info.unstable,
            "screenshot_path": test_run_info.screenshot_path,
        })

    def report_task_done(
        self, end_time: datetime, passed: int, warnings: list[str]
    ) -> None:
        reported = sum(len(f["tests"]) for f in self.report["fixtures"])
        self.report["end_time"] = end_time.isoformat()
        self.report["passed"] = passed
        self.report["failed"] = reported - passed
        self.report["warnings"] = list(warnings)

        if self.write_on_done and self._host is not None:
            self._host.write(self.to_json_string(self.report, pretty=self.pretty)).newline()

    @property
    def all_passed(self) -> bool:
        return bool(self.report) and self.report["passed"] == self.report["total"]

    def save(self, report: dict[str, Any], path: Path) -> Path:
        """Save report to a JSON file.

        Args:
            report: Report dictionary.
            path: Output file path.

        Returns:
            Path to the saved file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        return path

    def to_json_string(self, report: dict[str, Any], pretty: bool = True) -> str:
        """Convert report to JSON string."""
        if pretty:
            return json.dumps(report, indent=2, ensure_ascii=False)
        return json.dumps(report, ensure_ascii=False)

    def generate_flow_output(
        self,
        report: dict[str, Any],
        report_path: Optional[str] = None,
    ) -> dict[str, Any]:
        """Generate CLI-compatible JSON output.

        {
            "success": bool,
            "command": "replay",
            "data": { ... },
            "message": str
        }

        Args:
            report: Report dictionary.
            report_path: Path where report was saved.

        Returns:
            CLI envelope dictionary.
        """
        total = report.get("total", 0)
        passed = report.get("passed", 0)
        failed = total - passed
        all_passed = failed == 0

        data: dict[str, Any] = {
            "total_tests": total,
            "passed": passed,
            "failed": failed,
            "lanes": report.get("lanes", []),
            "fixtures": report.get("fixtures", []),
            "warnings": report.get("warnings", []),
        }

        if report_path:
            data["report_path"] = report_path

        if not all_passed:
            message = f"{failed} of {total} tests failed"
        else:
            message = "All tests passed"

        return {
            "success": all_passed,
            "command": "replay",
            "data": data,
            "message": message,
        }
