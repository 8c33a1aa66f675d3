"""Detecting and resolving conflicts between live files and templates."""

from ..types import ConflictRecord, Resolution, ResolveReport, Strategy
from .resolver import ConflictResolver
from .scanner import binding_states, scan

__all__ = [
    "ConflictRecord",
    "ConflictResolver",
    "Resolution",
    "ResolveReport",
    "Strategy",
    "binding_states",
    "scan",
]
