"""Tests for scenario selection."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import pytest

from pycaliper.errors import DuplicateScenarioError, InvalidArgumentError, InvalidSuiteError, UserCodeError
from pycaliper.selection import ScenarioSelection, parse_defines

if TYPE_CHECKING:
    from pathlib import Path


def test_parse_defines_splits_and_merges_values() -> None:
    """Repeated names accumulate values; whitespace and empty items are ignored."""
    assert parse_defines(["size=10, 100", "mode=fast", "size=1000"]) == {
        "size": ["10", "100", "1000"],
        "mode": ["fast"],
    }


@pytest.mark.parametrize("item", ["size", "=10", "size=", "size= , "])
def test_parse_defines_rejects_malformed_items(item: str) -> None:
    """Every define needs a name and at least one value."""
    with pytest.raises(InvalidArgumentError):
        parse_defines([item])


def test_explicit_matrix_varies_benchmark_then_parameters_then_vm(sample_suite: str) -> None:
    """Benchmarks, then parameter values, then VMs vary from slowest to fastest."""
    selection = ScenarioSelection(
        sample_suite,
        benchmarks=["sort"],
        parameters={"size": ["1", "2"]},
        vms=["python3", "pypy3"],
    )

    scenarios = selection.select()

    assert [(s.variables["size"], s.variables["vm"]) for s in scenarios] == [
        ("1", "python3"),
        ("1", "pypy3"),
        ("2", "python3"),
        ("2", "pypy3"),
    ]
    assert scenarios[0].parameters == {"size": "1", "benchmark": "sort"}
    assert scenarios[0].variables == {"size": "1", "benchmark": "sort", "vm": "python3"}


def test_suite_defaults_fill_in_benchmarks_and_parameters(sample_suite: str) -> None:
    """Missing choices come from the suite's declared benchmarks and parameters."""
    scenarios = ScenarioSelection(sample_suite).select()

    assert [(s.parameters["benchmark"], s.parameters["size"]) for s in scenarios] == [
        ("reverse", "10"),
        ("reverse", "100"),
        ("sort", "10"),
        ("sort", "100"),
    ]
    assert {s.variables["vm"] for s in scenarios} == {sys.executable}


def test_explicit_parameters_override_suite_defaults(sample_suite: str) -> None:
    """Command line values replace the declared values of the same parameter."""
    scenarios = ScenarioSelection(sample_suite, parameters={"size": ["5"]}).select()
    assert [s.parameters["size"] for s in scenarios] == ["5", "5"]


def test_explicit_benchmarks_and_parameters_keep_other_suite_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Parameters missing from the command line still expand over their declared values."""
    module_name = "pycaliper_two_parameter_suite"
    (tmp_path / f"{module_name}.py").write_text(
        "from pycaliper import Benchmark\n"
        "\n"
        "\n"
        "class TreeSuite(Benchmark):\n"
        "    parameters = {'size': [10, 100], 'depth': [1, 2]}\n"
        "\n"
        "    def time_sort(self, reps: int) -> None:\n"
        "        pass\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, module_name, raising=False)

    scenarios = ScenarioSelection(
        f"{module_name}:TreeSuite",
        benchmarks=["sort"],
        parameters={"size": ["10"]},
    ).select()

    assert [dict(s.parameters) for s in scenarios] == [
        {"depth": "1", "size": "10", "benchmark": "sort"},
        {"depth": "2", "size": "10", "benchmark": "sort"},
    ]


def test_duplicate_vms_are_rejected(sample_suite: str) -> None:
    """Repeating a VM would produce indistinguishable scenarios."""
    selection = ScenarioSelection(
        sample_suite,
        benchmarks=["sort"],
        parameters={"size": ["1"]},
        vms=["python3", "python3"],
    )
    with pytest.raises(DuplicateScenarioError, match="more than once"):
        selection.select()


def test_unknown_suite_module_is_invalid() -> None:
    """A suite module that does not exist is reported as an invalid suite."""
    with pytest.raises(InvalidSuiteError, match="could not be found"):
        ScenarioSelection("pycaliper_missing_suite_module:Suite").select()


def test_failing_suite_import_is_attributed_to_user_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Errors raised while importing the suite module belong to the benchmark author."""
    module_name = "pycaliper_broken_suite_module"
    (tmp_path / f"{module_name}.py").write_text("raise ValueError('broken suite')\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, module_name, raising=False)

    with pytest.raises(UserCodeError) as excinfo:
        ScenarioSelection(f"{module_name}:Suite").select()
    assert isinstance(excinfo.value.cause, ValueError)
