"""Run aggregation and progress rendering."""

from .progress import ProgressReporter, format_progress
from .runner import RunAggregator, ScenarioExecutor, ensure_unique

__all__ = ["ProgressReporter", "RunAggregator", "ScenarioExecutor", "ensure_unique", "format_progress"]
