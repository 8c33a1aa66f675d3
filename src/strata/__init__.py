"""strata - layered dotfiles.

Templates live in a directory split into ``common``, ``envs/<name>`` and
``machine/<hostname>`` tiers; strata links them into the home directory,
most specific tier winning.
"""

from .config import Config, TrackingList
from .errors import (
    AlreadyTrackedError,
    ExternalToolError,
    MappingError,
    NoMergeToolError,
    NotInitializedError,
    StrataError,
    UnknownStrategyError,
)
from .manager import LayerManager
from .tiers import Tier
from .types import (
    ApplyReport,
    BindingState,
    ConflictRecord,
    Resolution,
    ResolveReport,
    Strategy,
)

__all__ = [
    "AlreadyTrackedError",
    "ApplyReport",
    "BindingState",
    "Config",
    "ConflictRecord",
    "ExternalToolError",
    "LayerManager",
    "MappingError",
    "NoMergeToolError",
    "NotInitializedError",
    "Resolution",
    "ResolveReport",
    "StrataError",
    "Strategy",
    "Tier",
    "TrackingList",
    "UnknownStrategyError",
]
