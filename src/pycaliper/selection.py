"""Expand benchmark, parameter and VM choices into an ordered scenario list."""

from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import sys
from typing import TYPE_CHECKING

from pycaliper.benchmark import load_suite
from pycaliper.domain.models import BENCHMARK_KEY, VM_KEY, Scenario
from pycaliper.errors import InvalidArgumentError
from pycaliper.orchestration.runner import ensure_unique

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from pycaliper.benchmark import Benchmark

__all__ = ["ScenarioSelection", "parse_defines"]


def parse_defines(items: Iterable[str]) -> dict[str, list[str]]:
    """Parse ``name=v1,v2`` items into a mapping of parameter values."""
    parsed: dict[str, list[str]] = {}
    for item in items:
        name, sep, raw_values = item.partition("=")
        name = name.strip()
        if not sep or not name:
            message = f"Expected NAME=VALUE[,VALUE...], got '{item}'"
            raise InvalidArgumentError(message)
        values = [value.strip() for value in raw_values.split(",") if value.strip()]
        if not values:
            message = f"Parameter '{name}' needs at least one value"
            raise InvalidArgumentError(message)
        parsed.setdefault(name, []).extend(values)
    return parsed


@dataclass(slots=True)
class ScenarioSelection:
    """Cartesian product of benchmarks, parameter values and VMs for one suite."""

    suite_name: str
    benchmarks: Sequence[str] = ()
    parameters: Mapping[str, Sequence[str]] = field(default_factory=dict)
    vms: Sequence[str] = ()

    def select(self) -> list[Scenario]:
        """Return every scenario in a stable order, rejecting duplicates."""
        suite = load_suite(self.suite_name)
        benchmarks = list(self.benchmarks) or suite.benchmark_names()
        parameters = _with_suite_defaults(suite, self.parameters)
        if not benchmarks:
            message = f"Suite '{self.suite_name}' defines no time_* benchmarks"
            raise InvalidArgumentError(message)
        vms = list(self.vms) or [sys.executable]

        names = sorted(parameters)
        value_lists = [parameters[name] for name in names]
        scenarios: list[Scenario] = []
        for benchmark in benchmarks:
            for values in itertools.product(*value_lists):
                chosen = dict(zip(names, values, strict=True))
                for vm in vms:
                    scenarios.append(
                        Scenario(
                            variables={**chosen, BENCHMARK_KEY: benchmark, VM_KEY: vm},
                            parameters={**chosen, BENCHMARK_KEY: benchmark},
                        ),
                    )
        ensure_unique(scenarios)
        return scenarios


def _with_suite_defaults(
    suite: type[Benchmark],
    parameters: Mapping[str, Sequence[str]],
) -> dict[str, list[str]]:
    merged = {name: [str(value) for value in values] for name, values in suite.parameters.items()}
    merged.update({name: list(values) for name, values in parameters.items()})
    return merged
