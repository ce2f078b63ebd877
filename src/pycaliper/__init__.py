"""Out-of-process benchmark orchestration.

Suites subclass :class:`Benchmark`; ``pycaliper.cli.run_suite`` (or the
``pycaliper run`` command) measures them.
"""

from .benchmark import Benchmark
from .domain.models import Run, RunSettings, Scenario

__all__ = ["Benchmark", "Run", "RunSettings", "Scenario"]
