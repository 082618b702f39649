"""Run reporter - ordered result reporting for multi-lane test runs."""

__version__ = "0.1.0"
