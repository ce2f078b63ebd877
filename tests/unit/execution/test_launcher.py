"""Tests for child process command construction and supervision."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from pycaliper.domain.models import RunSettings, Scenario
from pycaliper.errors import ConfigurationError
from pycaliper.execution import ENTRY_POINT, ChildProcess, build_command, child_environment, fork_and_measure


def test_build_command_orders_vm_entry_point_timing_parameters_and_suite() -> None:
    """The command follows the child protocol exactly."""
    scenario = Scenario(
        variables={"vm": "python3  -X dev", "benchmark": "sort", "size": "10"},
        parameters={"size": "10", "benchmark": "sort"},
    )
    settings = RunSettings(suite_name="pkg.mod:Suite", warmup_millis=10, run_millis=20)

    command = build_command(scenario, settings)

    assert command == [
        "python3",
        "-X",
        "dev",
        "-m",
        ENTRY_POINT,
        "--warmupMillis",
        "10",
        "--runMillis",
        "20",
        "-Dsize=10",
        "-Dbenchmark=sort",
        "pkg.mod:Suite",
    ]


def test_child_environment_exports_import_path() -> None:
    """The parent's import path reaches the child, ahead of any inherited PYTHONPATH."""
    env = child_environment({"PYTHONPATH": "/opt/extra", "KEEP": "1"})
    entries = env["PYTHONPATH"].split(os.pathsep)
    assert entries[-1] == "/opt/extra"
    assert [entry for entry in sys.path if entry] == entries[:-1]
    assert env["KEEP"] == "1"


def test_child_process_merges_stderr_and_reaps_the_process() -> None:
    """Both output streams arrive on one channel and the exit status is observed."""
    code = "import sys; print('out', flush=True); print('err', file=sys.stderr, flush=True)"
    with ChildProcess([sys.executable, "-c", code]) as child:
        lines = list(child.lines())
    assert lines == ["out", "err"]
    assert child.returncode == 0


def test_child_process_runs_in_the_parent_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Children inherit the working directory of the orchestrator."""
    monkeypatch.chdir(tmp_path)
    with ChildProcess([sys.executable, "-c", "import os; print(os.getcwd())"]) as child:
        lines = list(child.lines())
    assert Path(lines[0]).resolve() == tmp_path.resolve()


def test_child_process_start_failure_is_a_configuration_error() -> None:
    """A missing interpreter surfaces with the attempted command."""
    command = ["definitely-not-an-interpreter-binary", "-m", ENTRY_POINT]
    with pytest.raises(ConfigurationError, match="Failed to start") as excinfo, ChildProcess(command):
        pass
    assert excinfo.value.command == tuple(command)


def test_fork_and_measure_reads_the_child_result(fake_child_vm: str) -> None:
    """The measurement printed by the child becomes the return value."""
    scenario = Scenario(variables={"vm": fake_child_vm}, parameters={"value": "1500.25"})
    settings = RunSettings(suite_name="pkg.mod:Suite", warmup_millis=0, run_millis=1)
    assert fork_and_measure(scenario, settings) == 1500.25
