"""High-level operator workflows."""

from .import_flow import ImportSession

__all__ = ["ImportSession"]
