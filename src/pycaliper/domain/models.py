"""Domain models for pycaliper runs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

VM_KEY = "vm"
"""Variable holding the interpreter command line of a scenario."""

BENCHMARK_KEY = "benchmark"
"""Variable and parameter naming the timed method of a suite."""


class Scenario(BaseModel):
    """One benchmark configuration, measured once in its own child process."""

    model_config = ConfigDict(frozen=True)

    variables: Mapping[str, str]
    parameters: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("variables", "parameters", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(key): str(item) for key, item in value.items()}  # pyright: ignore[reportUnknownVariableType]
        return value

    @field_validator("variables", "parameters", mode="after")
    @classmethod
    def _freeze(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        # Contents feed __hash__ and must stay fixed.
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _require_vm(self) -> Scenario:
        if not self.variables.get(VM_KEY, "").strip():
            message = f"Scenario variables must include a non-empty '{VM_KEY}' entry"
            raise ValueError(message)
        return self

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.variables.items())), tuple(sorted(self.parameters.items()))))

    def __str__(self) -> str:
        return ", ".join(f"{key}={value}" for key, value in sorted(self.variables.items()))

    def vm_command(self) -> list[str]:
        """Return the interpreter invocation split on whitespace."""
        return self.variables[VM_KEY].split()


class RunSettings(BaseModel):
    """Run-level configuration supplied by the argument source."""

    suite_name: str
    warmup_millis: int = Field(default=3000, ge=0)
    run_millis: int = Field(default=1000, ge=1)
    post_host: str = "none"


class MeasurementRecord(BaseModel):
    """Serialised form of one scenario and its measurement."""

    variables: dict[str, str]
    parameters: dict[str, str]
    nanos_per_trial: float


class RunPayload(BaseModel):
    """Serialised form of a run as sent to the remote collector."""

    suite_name: str
    executed_by_uuid: str
    executed_at: datetime
    measurements: list[MeasurementRecord]


@dataclass(frozen=True, slots=True)
class Run:
    """Immutable record of every scenario measured in one invocation.

    ``measurements`` iterates in execution order.
    """

    measurements: Mapping[Scenario, float]
    suite_name: str
    executed_by_uuid: str
    executed_at: datetime

    def __len__(self) -> int:
        return len(self.measurements)

    def to_payload(self) -> RunPayload:
        """Return the pydantic payload used for publishing."""
        records = [
            MeasurementRecord(
                variables=dict(scenario.variables),
                parameters=dict(scenario.parameters),
                nanos_per_trial=nanos,
            )
            for scenario, nanos in self.measurements.items()
        ]
        return RunPayload(
            suite_name=self.suite_name,
            executed_by_uuid=self.executed_by_uuid,
            executed_at=self.executed_at,
            measurements=records,
        )
