"""Render a finished run as a rich table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from pycaliper.domain.models import Run

__all__ = ["build_results_table", "display_results"]

_BAR_WIDTH = 30


def _varying_variables(run: Run) -> list[str]:
    """Return variable names whose value differs between scenarios."""
    seen: dict[str, set[str]] = {}
    for scenario in run.measurements:
        for name, value in scenario.variables.items():
            seen.setdefault(name, set()).add(value)
    if len(run.measurements) <= 1:
        return sorted(seen)
    return sorted(name for name, values in seen.items() if len(values) > 1)


def build_results_table(run: Run) -> Table:
    """Return a table with one row per scenario in execution order."""
    columns = _varying_variables(run)
    table = Table(title=f"{run.suite_name} ({run.executed_at:%Y-%m-%d %H:%M:%S %Z})")
    for name in columns:
        table.add_column(name, style="bold")
    table.add_column("ns", justify="right")
    table.add_column("linear runtime")

    slowest = max(run.measurements.values(), default=0.0)
    for scenario, nanos in run.measurements.items():
        width = round(_BAR_WIDTH * nanos / slowest) if slowest > 0 else 0
        row = [scenario.variables.get(name, "") for name in columns]
        row.extend([f"{nanos:,.2f}", "=" * width])
        table.add_row(*row)
    return table


def display_results(run: Run, console: Console) -> None:
    """Print ``run`` on ``console``."""
    if not run.measurements:
        console.print("[yellow]No scenarios were measured.[/yellow]")
        return
    console.print(build_results_table(run))
