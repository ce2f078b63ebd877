"""Single-line progress indicator rewritten in place with carriage returns."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from pycaliper.domain.models import Scenario

__all__ = ["LINE_WIDTH", "SCENARIO_WIDTH", "ProgressReporter", "format_progress"]

RETURN = "\r"
LINE_WIDTH = 80
SCENARIO_WIDTH = 63
"""Leaves room for the percentage prefix and the measurement suffix within ``LINE_WIDTH``."""


def format_progress(index: int, total: int, scenario: Scenario) -> str:
    """Return the progress text shown before scenario ``index`` of ``total`` runs."""
    percent = _round_half_up(index / total * 100) if total else 0
    description = str(scenario)[:SCENARIO_WIDTH]
    return f"{percent:2d}% {description:<{SCENARIO_WIDTH}}"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(slots=True)
class ProgressReporter:
    """Render progress for a run on ``stream``."""

    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def before_measurement(self, index: int, total: int, scenario: Scenario) -> None:
        self._write(RETURN + format_progress(index, total, scenario))

    def after_measurement(self, nanos_per_trial: float) -> None:
        self._write(f" {_round_half_up(nanos_per_trial):10d}ns")

    def clear(self) -> None:
        """Blank the progress line and return the cursor to column zero."""
        self._write(RETURN + " " * LINE_WIDTH + RETURN)

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
