"""Command-line entry points for salinity risk scoring."""

from importlib import import_module
from types import ModuleType

__all__: list[str] = []


def __getattr__(name: str) -> ModuleType:
    # Importing the Typer app eagerly would pull in FastAPI schemas for every
    # ``import cli``; resolve ``cli.app`` to the module on first access instead.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(f"module 'cli' has no attribute {name!r}")
