"""Load scenario definitions from YAML files with ``.env`` substitution."""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import re
from typing import TYPE_CHECKING, Any, cast

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

from dotenv import dotenv_values
from pydantic import ValidationError
import yaml

from pycaliper.domain.models import Scenario

__all__ = [
    "LoadError",
    "LoadResult",
    "load_environment",
    "load_scenarios",
]

_PLACEHOLDER = re.compile(r"\$\{([^}]*)\}")


class LoadError(RuntimeError):
    """Raised when a scenario file or environment file cannot be loaded."""


@dataclass(slots=True)
class LoadResult:
    """Scenarios loaded from ``source``, in file order."""

    items: list[Scenario]
    source: Path

    def __iter__(self) -> Iterator[Scenario]:
        """Iterate over the loaded scenarios."""
        return iter(self.items)

    def __len__(self) -> int:  # pragma: no cover - trivial
        """Return the number of loaded scenarios."""
        return len(self.items)


def load_environment(
    env_files: Sequence[str | Path] | None = None,
    *,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge ``base`` with the values of each ``.env`` file, later files winning."""
    combined: dict[str, str] = dict(base or {})
    for env_file in env_files or ():
        path = Path(env_file)
        if not path.exists():
            message = f"Environment file not found: {path}"
            raise LoadError(message)
        values = dotenv_values(path, encoding="utf-8")
        combined.update({key: value for key, value in values.items() if value is not None})
    return combined


def load_scenarios(
    yaml_path: str | Path,
    *,
    env_files: Sequence[str | Path] | None = None,
    overrides: Mapping[str, str] | None = None,
) -> LoadResult:
    """Load ``Scenario`` entries from a YAML list or a mapping with a ``scenarios`` key."""
    path = Path(yaml_path)
    payload = _read_yaml(path)
    env = load_environment(env_files, base=overrides)
    entries = _scenario_entries(payload, path)
    items: list[Scenario] = []
    for position, entry in enumerate(entries, start=1):
        resolved = _substitute(entry, env)
        try:
            items.append(Scenario.model_validate(resolved))
        except ValidationError as exc:
            message = f"Invalid scenario #{position} in {path}: {exc}"
            raise LoadError(message) from exc
    return LoadResult(items=items, source=path)


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        message = f"Scenario file not found: {path}"
        raise LoadError(message)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors are rare
        message = f"Failed to read scenario file: {path}"
        raise LoadError(message) from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        message = f"Invalid YAML in scenario file: {path}"
        raise LoadError(message) from exc


def _scenario_entries(payload: Any, source: Path) -> list[dict[str, Any]]:
    if payload is None:
        return []
    if isinstance(payload, dict):
        mapping = cast("dict[str, Any]", payload)
        if "scenarios" not in mapping:
            message = f"Scenario file {source} must be a list or contain a 'scenarios' key"
            raise LoadError(message)
        payload = mapping["scenarios"]
    if not isinstance(payload, list):
        message = f"Scenarios in {source} must be a list"
        raise LoadError(message)
    entries: list[dict[str, Any]] = []
    for item in cast("list[Any]", payload):
        if not isinstance(item, dict):
            message = f"Scenario entries must be mappings in {source}"
            raise LoadError(message)
        entries.append(cast("dict[str, Any]", item))
    return entries


def _substitute(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _PLACEHOLDER.sub(lambda match: _resolve_placeholder(match.group(1), env), value)
    if isinstance(value, list):
        return [_substitute(item, env) for item in cast("list[Any]", value)]
    if isinstance(value, dict):
        return {key: _substitute(item, env) for key, item in cast("dict[Any, Any]", value).items()}
    return value


def _resolve_placeholder(placeholder: str, env: Mapping[str, str]) -> str:
    key, sep, default = placeholder.partition(":-")
    if key in env:
        return env[key]
    if sep:
        return default
    message = f"Missing environment variable '{key}' referenced in scenario file"
    raise LoadError(message)
