"""Relevance filter: decides which diff items deserve release notes.

The decision is a pure function of the item and the policy, evaluated
in a fixed order that short-circuits on the first failing rule:

1. description contains an excluded pattern
2. diff has fewer lines than ``min_diff_size``
3. fewer meaningful changed lines than ``min_code_changes``
4. description contains an excluded label
5. include labels are set and the description matches none of them
"""

import logging
from collections.abc import Iterable

from patchnotes.errors import UnknownPolicyError
from patchnotes.filters.change_counter import count_meaningful_changes
from patchnotes.filters.types import DiffItem, FilterPolicy

logger = logging.getLogger(__name__)

CONSERVATIVE_POLICY = FilterPolicy(
    name="conservative",
    min_diff_size=10,
    min_code_changes=3,
    exclude_patterns=frozenset(
        {
            "docs",
            "typos",
            "formatting",
            "chore",
            "style",
            "lint",
            "bump",
            "update",
            "deps",
            "dependency",
            "version",
        }
    ),
    exclude_labels=frozenset(
        {
            "documentation",
            "chore",
            "style",
            "dependencies",
            "maintenance",
            "housekeeping",
        }
    ),
    include_labels=frozenset(
        {
            "feature",
            "enhancement",
            "bugfix",
            "fix",
            "performance",
            "security",
            "refactor",
        }
    ),
    max_results=5,
    ignore_version_lines=True,
)

PERMISSIVE_POLICY = FilterPolicy(
    name="permissive",
    min_diff_size=5,
    min_code_changes=1,
    exclude_patterns=frozenset({"docs", "typo", "chore", "lint"}),
    max_results=None,
    ignore_version_lines=False,
)

PRESETS: dict[str, FilterPolicy] = {
    CONSERVATIVE_POLICY.name: CONSERVATIVE_POLICY,
    PERMISSIVE_POLICY.name: PERMISSIVE_POLICY,
}


def get_policy(name: str) -> FilterPolicy:
    """Return the preset called *name* (case-insensitive)."""
    try:
        return PRESETS[name.strip().lower()]
    except KeyError:
        raise UnknownPolicyError(name) from None


def _mentions_any(text: str, needles: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(needle.lower() in lowered for needle in needles)


def is_relevant(item: DiffItem, policy: FilterPolicy) -> bool:
    """Return ``True`` if *item* passes every rule of *policy*."""
    if _mentions_any(item.description, policy.exclude_patterns):
        return False

    if len(item.diff.split("\n")) < policy.min_diff_size:
        return False

    meaningful = count_meaningful_changes(
        item.diff, ignore_version_lines=policy.ignore_version_lines
    )
    if meaningful < policy.min_code_changes:
        return False

    if _mentions_any(item.description, policy.exclude_labels):
        return False

    if policy.include_labels and not _mentions_any(
        item.description, policy.include_labels
    ):
        return False

    return True


def filter_all(items: Iterable[DiffItem], policy: FilterPolicy) -> list[DiffItem]:
    """Return the relevant items in input order, capped at ``policy.max_results``."""
    items = list(items)
    relevant = [item for item in items if is_relevant(item, policy)]
    if policy.max_results is not None:
        relevant = relevant[: policy.max_results]
    logger.info(
        "Relevance filter (%s): %d of %d items accepted",
        policy.name,
        len(relevant),
        len(items),
    )
    return relevant
