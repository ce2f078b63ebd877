"""Benchmark base class and suite loading.

A suite is a ``Benchmark`` subclass whose timed methods are named
``time_<name>`` and accept the number of repetitions to execute::

    class ListSuite(Benchmark):
        parameters = {"size": [10, 1000]}
        size = 10

        def set_up(self) -> None:
            self.items = list(range(self.size))

        def time_sort(self, reps: int) -> None:
            for _ in range(reps):
                sorted(self.items)

Suites are named ``package.module:ClassName`` (or ``package.module.ClassName``).
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from pycaliper.errors import InvalidArgumentError, InvalidSuiteError, UserCodeError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

__all__ = ["TIMED_PREFIX", "Benchmark", "load_suite", "suite_name"]

TIMED_PREFIX = "time_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class Benchmark:
    """Base class for suites measured in a forked interpreter."""

    parameters: ClassVar[Mapping[str, Sequence[object]]] = {}

    def set_up(self) -> None:
        """Prepare state before timing; parameters are already applied."""

    def tear_down(self) -> None:
        """Release state after timing."""

    @classmethod
    def benchmark_names(cls) -> list[str]:
        """Return the names of the timed methods, without their prefix."""
        return sorted(
            name.removeprefix(TIMED_PREFIX)
            for name in dir(cls)
            if name.startswith(TIMED_PREFIX) and callable(getattr(cls, name))
        )

    def apply_parameters(self, values: Mapping[str, str]) -> None:
        """Set each parameter attribute, coercing text to the declared value type."""
        for name, raw in values.items():
            declared = self.parameters.get(name)
            if declared is None:
                message = f"{type(self).__name__} declares no parameter '{name}'"
                raise InvalidArgumentError(message)
            sample = declared[0] if declared else getattr(self, name, raw)
            setattr(self, name, _coerce(raw, sample))

    def timed_method(self, name: str | None = None) -> Callable[[int], object]:
        """Return the bound timed method ``name`` (or the only one when omitted)."""
        names = self.benchmark_names()
        if name is None:
            if len(names) != 1:
                message = f"{type(self).__name__} defines {len(names)} benchmarks; pick one of {names}"
                raise InvalidArgumentError(message)
            name = names[0]
        if name not in names:
            message = f"{type(self).__name__} has no benchmark '{name}'; available: {names}"
            raise InvalidArgumentError(message)
        return getattr(self, TIMED_PREFIX + name)


def _coerce(raw: str, sample: object) -> object:
    if isinstance(sample, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        message = f"Invalid boolean value: {raw}"
        raise InvalidArgumentError(message)
    if isinstance(sample, (int, float)):
        try:
            return type(sample)(raw)
        except ValueError as exc:
            message = f"Invalid {type(sample).__name__} value: {raw}"
            raise InvalidArgumentError(message) from exc
    return raw


def suite_name(suite: type[Benchmark] | str) -> str:
    """Return the fully-qualified name used to locate ``suite`` in a child."""
    if isinstance(suite, str):
        return suite
    return f"{suite.__module__}:{suite.__qualname__}"


def load_suite(name: str) -> type[Benchmark]:
    """Import and return the suite class called ``name``."""
    module_name, attribute = _split_suite_name(name)
    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        if exc.name is not None and (module_name == exc.name or module_name.startswith(f"{exc.name}.")):
            message = f"Suite module '{module_name}' could not be found"
            raise InvalidSuiteError(message) from exc
        raise UserCodeError(exc) from exc
    except Exception as exc:
        raise UserCodeError(exc) from exc

    target: Any = module
    for part in attribute.split("."):
        target = getattr(target, part, None)
        if target is None:
            message = f"Suite '{name}' not found in module '{module_name}'"
            raise InvalidSuiteError(message)
    if not isinstance(target, type) or not issubclass(target, Benchmark):
        message = f"Suite '{name}' is not a Benchmark subclass"
        raise InvalidSuiteError(message)
    return target


def _split_suite_name(name: str) -> tuple[str, str]:
    if ":" in name:
        module_name, attribute = name.split(":", 1)
    else:
        module_name, _, attribute = name.rpartition(".")
    if not module_name or not attribute:
        message = f"Suite name must look like 'package.module:ClassName', got '{name}'"
        raise InvalidSuiteError(message)
    return module_name, attribute
