"""Runner module - replay of recorded runs."""

from .executor import ReplayExecutor, ReplayResult, ReporterConfig

__all__ = [
    "ReplayExecutor",
    "ReplayResult",
    "ReporterConfig",
]
