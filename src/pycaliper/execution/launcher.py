"""Launch one child interpreter per scenario and harvest its measurement."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import IO, TYPE_CHECKING, Self

from pycaliper.errors import ConfigurationError
from pycaliper.execution.measurement import extract_measurement

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from types import TracebackType

    from pycaliper.domain.models import RunSettings, Scenario

__all__ = [
    "ENTRY_POINT",
    "ChildProcess",
    "build_command",
    "child_environment",
    "fork_and_measure",
]

logger = logging.getLogger(__name__)

ENTRY_POINT = "pycaliper.child"
"""Module run with ``-m`` inside every child interpreter."""


def build_command(scenario: Scenario, settings: RunSettings, *, entry_point: str = ENTRY_POINT) -> list[str]:
    """Return the full command line used to measure ``scenario``."""
    command = scenario.vm_command()
    command.extend(["-m", entry_point])
    command.extend(["--warmupMillis", str(settings.warmup_millis)])
    command.extend(["--runMillis", str(settings.run_millis)])
    command.extend(f"-D{key}={value}" for key, value in scenario.parameters.items())
    command.append(settings.suite_name)
    return command


def child_environment(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return the environment for a child, exporting this interpreter's import path."""
    env = dict(os.environ if base is None else base)
    entries = [entry for entry in sys.path if entry]
    inherited = env.get("PYTHONPATH")
    if inherited:
        entries.append(inherited)
    env["PYTHONPATH"] = os.pathsep.join(entries)
    return env


class ChildProcess:
    """Owned handle on a single child process with a merged output stream.

    Use as a context manager; leaving the block closes the stream and waits
    for the process so that no child outlives its scenario.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Record how the child will be started."""
        self.command = list(command)
        self.cwd = cwd or Path.cwd()
        self.env = dict(env) if env is not None else child_environment()
        self.returncode: int | None = None
        self._process: subprocess.Popen[str] | None = None

    def __enter__(self) -> Self:
        """Start the child."""
        logger.debug("Launching %s", " ".join(self.command))
        try:
            self._process = subprocess.Popen(  # noqa: S603 - command comes from the scenario selection
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                cwd=self.cwd,
                env=self.env,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            message = f"Failed to start {' '.join(self.command)}: {exc}"
            raise ConfigurationError(message, command=self.command) from exc
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the output stream and reap the process."""
        if self._process is None:
            return
        stream = self._process.stdout
        if stream is not None:
            stream.close()
        self.returncode = self._process.wait()
        logger.debug("Child exited with status %s", self.returncode)

    @property
    def stdout(self) -> IO[str]:
        """Return the combined stdout/stderr stream of the running child."""
        if self._process is None or self._process.stdout is None:
            message = "Child process has not been started"
            raise RuntimeError(message)
        return self._process.stdout

    def lines(self) -> Iterator[str]:
        """Yield output lines without their terminators until the stream closes."""
        for line in self.stdout:
            yield line.rstrip("\r\n")


def fork_and_measure(scenario: Scenario, settings: RunSettings) -> float:
    """Run ``scenario`` in a fresh child interpreter and return nanos per trial."""
    command = build_command(scenario, settings)
    with ChildProcess(command) as child:
        return extract_measurement(child.lines(), command)
