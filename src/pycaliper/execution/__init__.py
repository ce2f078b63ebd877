"""Child process execution and measurement extraction."""

from .launcher import ENTRY_POINT, ChildProcess, build_command, child_environment, fork_and_measure
from .measurement import MeasurementParser, ParseOutcome, ParseResult, extract_measurement, parse_nanos

__all__ = [
    "ENTRY_POINT",
    "ChildProcess",
    "MeasurementParser",
    "ParseOutcome",
    "ParseResult",
    "build_command",
    "child_environment",
    "extract_measurement",
    "fork_and_measure",
    "parse_nanos",
]
