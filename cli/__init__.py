"""Typer client for the batch file processor.

``cli.app`` is resolved on first access so importing ``cli.config`` or
``cli.client`` does not pull in Typer and the processing services.
"""

from importlib import import_module
from types import ModuleType

__all__ = ["app"]


def __getattr__(name: str) -> ModuleType:
    if name != "app":
        raise AttributeError(f"module 'cli' has no attribute {name!r}")
    return import_module("cli.app")
