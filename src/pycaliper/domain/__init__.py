"""Domain models for pycaliper."""

from .models import BENCHMARK_KEY, VM_KEY, MeasurementRecord, Run, RunPayload, RunSettings, Scenario

__all__ = [
    "BENCHMARK_KEY",
    "VM_KEY",
    "MeasurementRecord",
    "Run",
    "RunPayload",
    "RunSettings",
    "Scenario",
]
