"""Entry point executed inside every child interpreter.

Usage::

    python -m pycaliper.child --warmupMillis 3000 --runMillis 1000 -Dsize=10 pkg.mod:Suite

The process prints exactly one line, the measured nanoseconds per trial, and
nothing else. Failures surface as a traceback on stderr, which the parent
merges into the same stream and reports as a protocol violation.
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import TYPE_CHECKING, Callable

from pycaliper.benchmark import load_suite
from pycaliper.domain.models import BENCHMARK_KEY
from pycaliper.errors import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = ["main", "measure"]

_NANOS_PER_MILLI = 1_000_000


def measure(
    trial: Callable[[int], object],
    *,
    warmup_millis: int,
    run_millis: int,
    clock: Callable[[], int] = time.perf_counter_ns,
) -> float:
    """Warm ``trial`` up, then time one batch sized to roughly ``run_millis``."""
    reps = 1
    deadline = clock() + warmup_millis * _NANOS_PER_MILLI
    while True:
        started = clock()
        trial(reps)
        finished = clock()
        elapsed = max(finished - started, 1)
        if finished >= deadline:
            break
        if elapsed * 2 < deadline - finished:
            reps *= 2

    nanos_per_rep = elapsed / reps
    reps = max(1, int(run_millis * _NANOS_PER_MILLI / nanos_per_rep))
    started = clock()
    trial(reps)
    return max(clock() - started, 0) / reps


def _parse_define(item: str) -> tuple[str, str]:
    key, sep, value = item.partition("=")
    if not sep or not key:
        message = f"Expected -Dkey=value, got -D{item}"
        raise InvalidArgumentError(message)
    return key, value


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pycaliper.child", description="Measure one benchmark scenario.")
    parser.add_argument("--warmupMillis", dest="warmup_millis", type=int, required=True)
    parser.add_argument("--runMillis", dest="run_millis", type=int, required=True)
    parser.add_argument("-D", dest="defines", action="append", default=[], metavar="KEY=VALUE")
    parser.add_argument("suite", help="Suite to measure, e.g. 'package.module:ClassName'.")
    return parser.parse_args(list(argv) if argv is not None else None)


def main(argv: Iterable[str] | None = None) -> None:
    """Measure the requested scenario and print nanoseconds per trial."""
    args = _parse_args(argv)
    values = dict(_parse_define(item) for item in args.defines)
    benchmark_name = values.pop(BENCHMARK_KEY, None)

    suite = load_suite(args.suite)
    instance = suite()
    instance.apply_parameters(values)
    trial = instance.timed_method(benchmark_name)
    instance.set_up()
    try:
        nanos_per_trial = measure(trial, warmup_millis=args.warmup_millis, run_millis=args.run_millis)
    finally:
        instance.tear_down()
    sys.stdout.write(f"{nanos_per_trial}\n")
    sys.stdout.flush()


if __name__ == "__main__":
    main()
