"""Parse the single-line measurement protocol spoken by child processes.

A well-behaved child prints exactly one line holding a non-negative decimal
number (nanoseconds per trial) and then exits without further output. The
parser below tracks that as a two-state machine: it waits for the result line,
then expects end of stream. Anything else is a protocol violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import TYPE_CHECKING

from pycaliper.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = [
    "MeasurementParser",
    "ParseOutcome",
    "ParseResult",
    "extract_measurement",
    "parse_nanos",
]

logger = logging.getLogger(__name__)


class ParseOutcome(Enum):
    """Terminal classification of a child's output."""

    MEASURED = "measured"
    MALFORMED = "malformed"
    NO_OUTPUT = "no-output"


class _State(Enum):
    AWAITING_RESULT = "awaiting-result"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing a child's output stream."""

    outcome: ParseOutcome
    nanos_per_trial: float | None
    lines: tuple[str, ...]


@dataclass(slots=True)
class MeasurementParser:
    """Incremental parser fed one output line at a time."""

    _state: _State = _State.AWAITING_RESULT
    _value: float | None = None
    _lines: list[str] = field(default_factory=list)

    def feed(self, line: str) -> None:
        """Consume one line of output, without its line terminator."""
        self._lines.append(line)
        if self._state is _State.AWAITING_RESULT:
            self._value = parse_nanos(line)
            self._state = _State.DONE
            return
        # Any line after the result breaks the protocol.
        self._value = None

    def finish(self) -> ParseResult:
        """Classify everything fed so far."""
        lines = tuple(self._lines)
        if not lines:
            return ParseResult(ParseOutcome.NO_OUTPUT, None, lines)
        if len(lines) == 1 and self._value is not None:
            return ParseResult(ParseOutcome.MEASURED, self._value, lines)
        return ParseResult(ParseOutcome.MALFORMED, None, lines)


def parse_nanos(text: str) -> float | None:
    """Return ``text`` as a non-negative finite float, or ``None``."""
    # Digit separators are Python syntax, not part of a decimal number.
    if "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def extract_measurement(lines: Iterable[str], command: Sequence[str]) -> float:
    """Drain ``lines`` and return the single measurement they must contain."""
    parser = MeasurementParser()
    for line in lines:
        parser.feed(line)
    result = parser.finish()
    if result.outcome is ParseOutcome.MEASURED and result.nanos_per_trial is not None:
        return result.nanos_per_trial

    joined = " ".join(command)
    if result.outcome is ParseOutcome.NO_OUTPUT:
        message = f"Failed to execute {joined}: no output"
    else:
        message = f"Failed to execute {joined}"
    logger.error("%s\n%s", message, "\n".join(f"  {line}" for line in result.lines))
    raise ConfigurationError(message, command=command, output=result.lines)
