"""Pydantic models for diff items and relevance-filter policies."""

from pydantic import BaseModel, ConfigDict, Field


class DiffItem(BaseModel):
    """One merged change request submitted for release notes.

    ``id`` is consumer-supplied and doubles as the pull request number
    when enrichment is requested.  Instances are frozen; nothing in the
    pipeline mutates an item after it has been received.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    diff: str
    url: str = ""


class FilterPolicy(BaseModel):
    """Thresholds and keyword lists that decide which diff items are relevant.

    Pattern and label matching is a case-insensitive substring test
    against ``DiffItem.description``.  ``max_results`` caps how many
    accepted items :func:`filter_all` returns (``None`` means uncapped)
    and ``ignore_version_lines`` enables the stricter change counter that
    disregards version bumps and dependency-manifest keys.
    """

    model_config = ConfigDict(frozen=True)

    name: str = "custom"
    min_diff_size: int = Field(default=10, ge=0)
    min_code_changes: int = Field(default=3, ge=0)
    exclude_patterns: frozenset[str] = frozenset()
    exclude_labels: frozenset[str] = frozenset()
    include_labels: frozenset[str] = frozenset()
    max_results: int | None = Field(default=None, ge=1)
    ignore_version_lines: bool = False
