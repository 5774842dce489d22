"""Stage 1: decide which diff items are substantive enough for release notes."""

from patchnotes.filters.change_counter import count_meaningful_changes
from patchnotes.filters.relevance import (
    CONSERVATIVE_POLICY,
    PERMISSIVE_POLICY,
    PRESETS,
    filter_all,
    get_policy,
    is_relevant,
)
from patchnotes.filters.types import DiffItem, FilterPolicy

__all__ = [
    "CONSERVATIVE_POLICY",
    "DiffItem",
    "FilterPolicy",
    "PERMISSIVE_POLICY",
    "PRESETS",
    "count_meaningful_changes",
    "filter_all",
    "get_policy",
    "is_relevant",
]
