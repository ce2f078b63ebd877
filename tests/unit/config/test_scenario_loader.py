"""Tests for scenario file loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pycaliper.config import LoadError, load_environment, load_scenarios

if TYPE_CHECKING:
    from pathlib import Path


def test_load_scenarios_with_env_substitution(tmp_path: Path) -> None:
    """Placeholders resolve from env files, overrides and inline defaults."""
    env_file = tmp_path / "bench.env"
    env_file.write_text("PYTHON=python3.13\n", encoding="utf-8")
    scenarios_yaml = tmp_path / "scenarios.yaml"
    scenarios_yaml.write_text(
        """
        scenarios:
          - variables:
              vm: ${PYTHON} -X dev
              benchmark: sort
            parameters:
              benchmark: sort
              size: ${SIZE:-10}
          - variables:
              vm: ${PYTHON}
              benchmark: sort
            parameters:
              benchmark: sort
              size: ${BIG}
        """,
        encoding="utf-8",
    )

    result = load_scenarios(scenarios_yaml, env_files=[env_file], overrides={"BIG": "1000"})

    assert result.source == scenarios_yaml
    assert len(result.items) == 2
    first, second = result.items
    assert first.variables["vm"] == "python3.13 -X dev"
    assert first.parameters == {"benchmark": "sort", "size": "10"}
    assert second.parameters["size"] == "1000"


def test_load_scenarios_supports_plain_list(tmp_path: Path) -> None:
    """A top-level list is accepted and numbers become text."""
    scenarios_yaml = tmp_path / "scenarios.yaml"
    scenarios_yaml.write_text(
        """
        - variables: {vm: python3, size: 5}
          parameters: {size: 5}
        """,
        encoding="utf-8",
    )
    items = list(load_scenarios(scenarios_yaml))
    assert items[0].parameters == {"size": "5"}


def test_load_scenarios_empty_file(tmp_path: Path) -> None:
    """An empty document yields no scenarios."""
    scenarios_yaml = tmp_path / "empty.yaml"
    scenarios_yaml.write_text("", encoding="utf-8")
    assert load_scenarios(scenarios_yaml).items == []


@pytest.mark.parametrize(
    ("content", "match"),
    [
        ("- variables:\n    vm: ${MISSING}\n", "Missing environment variable 'MISSING'"),
        ("- variables: {size: 1}\n", "Invalid scenario #1"),
        ("runs: []\n", "'scenarios' key"),
        ("scenarios: 3\n", "must be a list"),
        ("- just-a-string\n", "must be mappings"),
        ("scenarios: [\n", "Invalid YAML"),
    ],
)
def test_load_scenarios_rejects_bad_payloads(tmp_path: Path, content: str, match: str) -> None:
    """Malformed files raise LoadError with a descriptive message."""
    scenarios_yaml = tmp_path / "bad.yaml"
    scenarios_yaml.write_text(content, encoding="utf-8")
    with pytest.raises(LoadError, match=match):
        load_scenarios(scenarios_yaml)


def test_missing_files_raise(tmp_path: Path) -> None:
    """Missing scenario or env files are reported."""
    with pytest.raises(LoadError, match="Scenario file not found"):
        load_scenarios(tmp_path / "absent.yaml")
    with pytest.raises(LoadError, match="Environment file not found"):
        load_environment([tmp_path / "absent.env"])


def test_load_environment_later_files_win(tmp_path: Path) -> None:
    """Values from later env files override earlier ones and the base mapping."""
    first = tmp_path / "first.env"
    second = tmp_path / "second.env"
    first.write_text("A=1\nB=1\n", encoding="utf-8")
    second.write_text("B=2\n", encoding="utf-8")
    assert load_environment([first, second], base={"A": "0", "C": "0"}) == {"A": "1", "B": "2", "C": "0"}
