"""Reporting module - ordered result aggregation and output plugins."""

from .aggregator import Aggregator, TestRunInfo, sort_errors
from .clock import Clock, ManualClock, SystemClock
from .json_reporter import JsonReporter
from .plugin_host import ReporterPlugin, ReporterPluginHost
from .report_queue import ReportItem, ReportQueue

__all__ = [
    "Aggregator",
    "TestRunInfo",
    "sort_errors",
    "Clock",
    "ManualClock",
    "SystemClock",
    "JsonReporter",
    "ReporterPlugin",
    "ReporterPluginHost",
    "ReportItem",
    "ReportQueue",
]
