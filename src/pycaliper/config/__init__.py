"""Scenario file loading for pycaliper."""

from .loader import LoadError, LoadResult, load_environment, load_scenarios

__all__ = ["LoadError", "LoadResult", "load_environment", "load_scenarios"]
