"""Typer CLI entry points for pycaliper."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.logging import RichHandler

from .benchmark import suite_name
from .config import LoadError, load_scenarios
from .domain.models import RunSettings
from .errors import UserError
from .host import resolve_host_uuid
from .orchestration import ProgressReporter, RunAggregator
from .reporting import display_results, post_results
from .selection import ScenarioSelection, parse_defines

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .benchmark import Benchmark
    from .domain.models import Scenario

app = typer.Typer(help="Run benchmark suites with one forked interpreter per scenario.")
console = Console()
error_console = Console(stderr=True)

SUITE_ARGUMENT = typer.Argument(
    ...,
    help="Suite to run, e.g. 'package.module:ClassName'.",
)
WARMUP_OPTION = typer.Option(
    3000,
    "--warmup-millis",
    "--warmupMillis",
    min=0,
    envvar="PYCALIPER_WARMUP_MILLIS",
    help="Milliseconds each child spends warming up before measuring.",
)
RUN_OPTION = typer.Option(
    1000,
    "--run-millis",
    "--runMillis",
    min=1,
    envvar="PYCALIPER_RUN_MILLIS",
    help="Approximate milliseconds each child spends in its measured batch.",
)
BENCHMARK_OPTION = typer.Option(
    None,
    "--benchmark",
    "-b",
    help="Benchmark (time_* method without prefix) to run; repeatable. Defaults to all.",
)
DEFINE_OPTION = typer.Option(
    None,
    "--define",
    "-D",
    help="Parameter values as NAME=V1,V2; repeatable. Defaults to the suite's declared values.",
)
VM_OPTION = typer.Option(
    None,
    "--vm",
    help="Interpreter command line for the child, e.g. 'python3.13 -X dev'; repeatable.",
)
SCENARIOS_FILE_OPTION = typer.Option(
    None,
    "--scenarios-file",
    file_okay=True,
    dir_okay=False,
    exists=True,
    readable=True,
    resolve_path=True,
    help="YAML file listing explicit scenarios; replaces --benchmark/--define/--vm.",
)
ENV_FILE_OPTION = typer.Option(
    None,
    "--env-file",
    "-e",
    resolve_path=True,
    file_okay=True,
    dir_okay=False,
    help="Optional .env file(s) used to substitute ${VAR} placeholders in the scenario file.",
)
POST_HOST_OPTION = typer.Option(
    "none",
    "--post-host",
    envvar="PYCALIPER_POST_HOST",
    help="Collector URL prefix that results are posted to, or 'none' to disable posting.",
)
VERBOSE_OPTION = typer.Option(
    default=False,
    help="Log orchestration details to stderr.",
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _build_aggregator(settings: RunSettings) -> RunAggregator:
    return RunAggregator(settings, progress=ProgressReporter(console.file))


def _select_scenarios(
    suite: str,
    *,
    scenarios_file: Path | None,
    env_files: list[Path] | None,
    benchmarks: list[str] | None,
    defines: list[str] | None,
    vms: list[str] | None,
) -> list[Scenario]:
    if scenarios_file is not None:
        try:
            result = load_scenarios(scenarios_file, env_files=env_files)
        except LoadError as exc:
            raise typer.BadParameter(str(exc)) from exc
        console.print(f"[dim]Scenarios loaded from {result.source}[/dim]")
        return list(result)
    selection = ScenarioSelection(
        suite_name=suite,
        benchmarks=benchmarks or (),
        parameters=parse_defines(defines or ()),
        vms=vms or (),
    )
    return selection.select()


@app.command()
def run(
    suite: str = SUITE_ARGUMENT,
    warmup_millis: int = WARMUP_OPTION,
    run_millis: int = RUN_OPTION,
    benchmark: list[str] | None = BENCHMARK_OPTION,
    define: list[str] | None = DEFINE_OPTION,
    vm: list[str] | None = VM_OPTION,
    scenarios_file: Path | None = SCENARIOS_FILE_OPTION,
    env_file: list[Path] | None = ENV_FILE_OPTION,
    post_host: str = POST_HOST_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Measure every selected scenario of SUITE, report, and optionally publish."""
    _configure_logging(verbose)
    settings = RunSettings(
        suite_name=suite,
        warmup_millis=warmup_millis,
        run_millis=run_millis,
        post_host=post_host,
    )
    try:
        scenarios = _select_scenarios(
            suite,
            scenarios_file=scenarios_file,
            env_files=list(env_file) if env_file else None,
            benchmarks=benchmark,
            defines=define,
            vms=vm,
        )
        result = _build_aggregator(settings).run(scenarios)
    except UserError as exc:
        exc.display(error_console)
        raise typer.Exit(code=1) from exc

    display_results(result, console)
    post_results(result, settings.post_host, console=console, error_console=error_console)


@app.command()
def host() -> None:
    """Print the identifier that groups this host's results."""
    console.print(resolve_host_uuid(), markup=False)


def main(argv: Sequence[str] | None = None) -> None:
    """Console entry point."""
    app(args=list(argv) if argv is not None else None, prog_name="pycaliper")


def run_suite(suite: type[Benchmark] | str, *args: str) -> None:
    """Run ``suite`` with ``args``; the suite name is appended after the options."""
    main(["run", *args, suite_name(suite)])
