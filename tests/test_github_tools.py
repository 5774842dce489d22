"""Tests for patchnotes.enrichment.github_tools: related issues and contributors."""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from patchnotes.enrichment.github_tools import GitHubToolsClient, repo_coordinates
from patchnotes.enrichment.types import ToolsInfo
from tests.fakes import make_item

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def _ts(days_ago: float) -> str:
    return (NOW - timedelta(days=days_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


ISSUES = [
    {"number": 101, "title": "The PR itself", "closed_at": _ts(1)},
    {"number": 90, "title": "Crash on empty file", "closed_at": _ts(2)},
    {"number": 91, "title": "Still open", "closed_at": None},
    {"number": 92, "title": "Ancient bug", "closed_at": _ts(30)},
    {"number": 93, "title": "", "closed_at": _ts(1)},
    {"number": 94, "title": "Slow parse", "closed_at": _ts(3)},
    {"number": 95, "title": "Wrong line numbers", "closed_at": _ts(6)},
    {"number": 96, "title": "Fourth match", "closed_at": _ts(0.5)},
]

CONTRIBUTORS = [
    {"login": "low", "avatar_url": "https://a/low.png", "contributions": 2},
    {"login": "top", "avatar_url": "https://a/top.png", "contributions": 50},
    {"login": "ghost", "avatar_url": None, "contributions": 99},
    {"login": "mid", "avatar_url": "https://a/mid.png", "contributions": 10},
    {"login": "second", "avatar_url": "https://a/second.png", "contributions": 20},
]


def _github_handler(seen: list[httpx.Request] | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == "/repos/acme/widgets/issues":
            return httpx.Response(200, json=ISSUES)
        if request.url.path == "/repos/acme/widgets/contributors":
            return httpx.Response(200, json=CONTRIBUTORS)
        return httpx.Response(404, json={"message": "Not Found"})

    return handler


async def _started(handler, token: str = "ghp_test") -> GitHubToolsClient:
    client = GitHubToolsClient(
        base_url="https://api.github.test",
        token=token,
        transport=httpx.MockTransport(handler),
    )
    await client.start()
    return client


class TestRepoCoordinates:
    def test_pull_request_url(self):
        assert repo_coordinates("https://github.com/acme/widgets/pull/42") == ("acme", "widgets")

    def test_trailing_slash(self):
        assert repo_coordinates("https://github.com/acme/widgets/pull/42/") == ("acme", "widgets")

    def test_too_short_raises(self):
        with pytest.raises(ValueError):
            repo_coordinates("widgets")


class TestGitHubToolsClient:
    async def test_related_issues_and_top_contributors(self):
        client = await _started(_github_handler())
        try:
            tools = await client.get_tools(make_item("101"), now=NOW)
        finally:
            await client.stop()

        assert tools.related_issues == ["Crash on empty file", "Slow parse", "Wrong line numbers"]
        assert [c.name for c in tools.contributors] == ["top", "second", "mid"]
        assert [c.contributions for c in tools.contributors] == [50, 20, 10]

    async def test_sends_issue_filters_and_token(self):
        seen: list[httpx.Request] = []
        client = await _started(_github_handler(seen))
        try:
            await client.get_tools(make_item("101"), now=NOW)
        finally:
            await client.stop()

        issues_request = seen[0]
        assert issues_request.url.params["state"] == "all"
        assert issues_request.url.params["labels"] == "enhancement,bug,feature"
        assert issues_request.headers["Authorization"] == "Bearer ghp_test"

    async def test_http_error_returns_empty_tools(self):
        client = await _started(lambda request: httpx.Response(500))
        try:
            assert await client.get_tools(make_item("101"), now=NOW) == ToolsInfo()
        finally:
            await client.stop()

    async def test_non_numeric_id_returns_empty_tools(self):
        client = await _started(_github_handler())
        try:
            assert await client.get_tools(make_item("abc"), now=NOW) == ToolsInfo()
        finally:
            await client.stop()

    async def test_unknown_repository_returns_empty_tools(self):
        item = make_item("101", url="https://github.com/other/repo/pull/101")
        client = await _started(_github_handler())
        try:
            assert await client.get_tools(item, now=NOW) == ToolsInfo()
        finally:
            await client.stop()

    async def test_not_started_returns_empty_tools(self):
        client = GitHubToolsClient()
        assert await client.get_tools(make_item("101")) == ToolsInfo()

    async def test_no_token_sends_no_authorization(self):
        seen: list[httpx.Request] = []
        client = await _started(_github_handler(seen), token="")
        try:
            await client.get_tools(make_item("101"), now=NOW)
        finally:
            await client.stop()
        assert "Authorization" not in seen[0].headers
