"""Pydantic models for the enrichment payload attached to each diff item."""

from pydantic import BaseModel, ConfigDict, Field


class Contributor(BaseModel):
    """One repository contributor as shown next to a release note."""

    model_config = ConfigDict(frozen=True)

    name: str
    avatar: str
    contributions: int = 0


class ToolsInfo(BaseModel):
    """Related issues and top contributors for a pull request.

    Produced by the enrichment lookup and passed through the stream
    unmodified.  Both lists hold at most three entries; contributors are
    sorted by contributions, highest first.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    related_issues: list[str] = Field(default_factory=list, alias="relatedIssues")
    contributors: list[Contributor] = Field(default_factory=list)
