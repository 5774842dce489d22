"""GitHub lookup of related issues and top contributors for a pull request.

Failures never propagate: any error while talking to GitHub degrades to
an empty :class:`ToolsInfo` so that enrichment can never break a note
stream.
"""

import logging
from datetime import datetime, timedelta, timezone

import httpx

from patchnotes.config import (
    GITHUB_API_URL,
    GITHUB_TIMEOUT,
    GITHUB_TOKEN,
    RELATED_ISSUE_WINDOW_DAYS,
)
from patchnotes.enrichment.types import Contributor, ToolsInfo
from patchnotes.filters.types import DiffItem

logger = logging.getLogger(__name__)

_MAX_RELATED_ISSUES = 3
_MAX_CONTRIBUTORS = 3
_ISSUE_LABELS = "enhancement,bug,feature"


def repo_coordinates(url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a pull request URL.

    ``https://github.com/acme/widgets/pull/42`` -> ``("acme", "widgets")``
    """
    parts = url.rstrip("/").split("/")
    if len(parts) < 4:
        raise ValueError(f"Cannot derive repository from URL: {url!r}")
    owner, repo = parts[-4:-2]
    return owner, repo


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubToolsClient:
    """Fetches :class:`ToolsInfo` records from the GitHub REST API."""

    def __init__(
        self,
        base_url: str = GITHUB_API_URL,
        token: str = GITHUB_TOKEN,
        timeout: float = GITHUB_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._token = token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize the HTTP client."""
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        else:
            logger.info("No GitHub token, enrichment uses unauthenticated rate limits")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_tools(self, item: DiffItem, now: datetime | None = None) -> ToolsInfo:
        """Return related issues and top contributors for *item*, or an empty record."""
        if self._client is None:
            logger.warning("GitHub client not started, skipping enrichment for %s", item.id)
            return ToolsInfo()

        try:
            owner, repo = repo_coordinates(item.url)
            pr_number = int(item.id)
            related = await self._related_issues(owner, repo, pr_number, now)
            contributors = await self._top_contributors(owner, repo)
        except Exception:
            logger.warning("Error fetching PR tools for %s", item.id, exc_info=True)
            return ToolsInfo()

        return ToolsInfo(related_issues=related, contributors=contributors)

    async def _related_issues(
        self, owner: str, repo: str, pr_number: int, now: datetime | None
    ) -> list[str]:
        response = await self._client.get(
            f"/repos/{owner}/{repo}/issues",
            params={"state": "all", "labels": _ISSUE_LABELS},
        )
        response.raise_for_status()

        now = now or datetime.now(timezone.utc)
        window = timedelta(days=RELATED_ISSUE_WINDOW_DAYS)
        titles: list[str] = []
        for issue in response.json():
            if issue.get("number") == pr_number or not issue.get("closed_at"):
                continue
            if abs(_parse_timestamp(issue["closed_at"]) - now) >= window:
                continue
            title = issue.get("title") or ""
            if title:
                titles.append(title)
        return titles[:_MAX_RELATED_ISSUES]

    async def _top_contributors(self, owner: str, repo: str) -> list[Contributor]:
        response = await self._client.get(f"/repos/{owner}/{repo}/contributors")
        response.raise_for_status()

        contributors = [
            Contributor(
                name=entry["login"],
                avatar=entry["avatar_url"],
                contributions=entry.get("contributions", 0),
            )
            for entry in response.json()
            if entry.get("login") and entry.get("avatar_url")
        ]
        contributors.sort(key=lambda c: c.contributions, reverse=True)
        return contributors[:_MAX_CONTRIBUTORS]
