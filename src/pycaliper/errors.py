"""Failure taxonomy shared by the orchestration pipeline and the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.traceback import Traceback

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console

    from pycaliper.domain.models import Scenario

__all__ = [
    "ConfigurationError",
    "DuplicateScenarioError",
    "HostIdentityError",
    "InvalidArgumentError",
    "InvalidSuiteError",
    "PublishError",
    "UserCodeError",
    "UserError",
]


class ConfigurationError(RuntimeError):
    """Raised when a child process cannot be started or breaks its output protocol."""

    def __init__(self, message: str, *, command: Sequence[str] = (), output: Sequence[str] = ()) -> None:
        """Keep the exact command line and every captured output line."""
        self.command = tuple(command)
        self.output = tuple(output)
        lines = [message]
        lines.extend(f"  {line}" for line in self.output)
        super().__init__("\n".join(lines))


class PublishError(RuntimeError):
    """Raised when results cannot be transmitted to the remote collector."""


class HostIdentityError(RuntimeError):
    """Raised when the host identity file cannot be read or written."""


class UserError(Exception):
    """Failure that knows how to present itself to the person running a suite."""

    def display(self, console: Console) -> None:
        """Render the failure on ``console``."""
        console.print(f"[red]Error:[/red] {escape(str(self))}")


class InvalidArgumentError(UserError):
    """Raised for malformed command line or scenario arguments."""


class InvalidSuiteError(UserError):
    """Raised when a suite name does not resolve to a benchmark class."""


class DuplicateScenarioError(UserError):
    """Raised when a selection contains the same scenario more than once."""

    def __init__(self, scenario: Scenario) -> None:
        """Store the offending scenario."""
        message = f"Scenario selected more than once: {scenario}"
        super().__init__(message)
        self.scenario = scenario


class UserCodeError(UserError):
    """Wraps an exception raised by benchmark code rather than by the harness."""

    def __init__(self, cause: BaseException) -> None:
        """Attribute ``cause`` to the benchmark author."""
        message = f"An exception was thrown from the benchmark code: {cause!r}"
        super().__init__(message)
        self.cause = cause

    def display(self, console: Console) -> None:
        """Print the attribution line followed by the original traceback."""
        console.print("[red]An exception was thrown from the benchmark code.[/red]")
        console.print(Traceback.from_exception(type(self.cause), self.cause, self.cause.__traceback__))
