"""Sequential, out-of-process execution of a scenario selection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable

from pycaliper.domain.models import Run, RunSettings, Scenario
from pycaliper.errors import ConfigurationError, DuplicateScenarioError, UserCodeError
from pycaliper.execution.launcher import fork_and_measure
from pycaliper.host import resolve_host_uuid
from pycaliper.orchestration.progress import ProgressReporter

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["RunAggregator", "ScenarioExecutor", "ensure_unique"]

logger = logging.getLogger(__name__)

ScenarioExecutor = Callable[[Scenario, RunSettings], float]
"""Measures one scenario and returns nanoseconds per trial."""


def _now() -> datetime:
    return datetime.now(UTC)


def ensure_unique(scenarios: Sequence[Scenario]) -> None:
    """Reject selections that would collide in the result mapping."""
    seen: set[Scenario] = set()
    for scenario in scenarios:
        if scenario in seen:
            raise DuplicateScenarioError(scenario)
        seen.add(scenario)


@dataclass(slots=True)
class RunAggregator:
    """Measure every scenario in order, one child process at a time."""

    settings: RunSettings
    execute: ScenarioExecutor = fork_and_measure
    progress: ProgressReporter = field(default_factory=ProgressReporter)
    host_uuid: Callable[[], str] = resolve_host_uuid
    clock: Callable[[], datetime] = _now

    def run(self, scenarios: Sequence[Scenario]) -> Run:
        """Return the immutable run for ``scenarios``; abort on the first failure."""
        ensure_unique(scenarios)
        executed_by_uuid = self.host_uuid()
        executed_at = self.clock()
        results: dict[Scenario, float] = {}
        total = len(scenarios)
        logger.info("Running %d scenario(s) of %s", total, self.settings.suite_name)

        try:
            for index, scenario in enumerate(scenarios):
                self.progress.before_measurement(index, total, scenario)
                nanos_per_trial = self.execute(scenario, self.settings)
                self.progress.after_measurement(nanos_per_trial)
                results[scenario] = nanos_per_trial
        except ConfigurationError:
            raise
        except Exception as exc:
            raise UserCodeError(exc) from exc

        self.progress.clear()
        return Run(
            measurements=MappingProxyType(results),
            suite_name=self.settings.suite_name,
            executed_by_uuid=executed_by_uuid,
            executed_at=executed_at,
        )
