"""
wpforge Runtime Layer.

The Runtime protocol the engine provisions against, and a LocalRuntime
that implements it on a host directory.
"""

from .base import Runtime, join_paths, resolve_path
from .local import LocalRuntime

__all__ = [
    "LocalRuntime",
    "Runtime",
    "join_paths",
    "resolve_path",
]
