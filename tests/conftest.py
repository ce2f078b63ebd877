"""Shared fixtures for pycaliper tests."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING
import uuid

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

SAMPLE_SUITE = '''
from pycaliper import Benchmark


class ListSuite(Benchmark):
    parameters = {"size": [10, 100]}
    size = 10

    def set_up(self) -> None:
        self.items = list(range(self.size, 0, -1))

    def time_sort(self, reps: int) -> None:
        for _ in range(reps):
            sorted(self.items)

    def time_reverse(self, reps: int) -> None:
        for _ in range(reps):
            self.items[::-1]
'''

FAKE_CHILD = '''
import sys

values = dict(arg[2:].split("=", 1) for arg in sys.argv[1:] if arg.startswith("-D"))
print(values.get("value", ""))
if "extra" in values:
    print(values["extra"])
'''


@pytest.fixture
def sample_suite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[str]:
    """Write an importable suite module and return its ``module:Class`` name."""
    module_name = f"sample_suite_{uuid.uuid4().hex}"
    (tmp_path / f"{module_name}.py").write_text(SAMPLE_SUITE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    yield f"{module_name}:ListSuite"
    sys.modules.pop(module_name, None)


@pytest.fixture
def fake_child_vm(tmp_path: Path) -> str:
    """Return a VM command line that echoes the ``value`` (and ``extra``) parameters."""
    script = tmp_path / "fake_child.py"
    script.write_text(FAKE_CHILD, encoding="utf-8")
    return f"{sys.executable} {script}"
