from patchnotes.enrichment.github_tools import GitHubToolsClient
from patchnotes.enrichment.types import Contributor, ToolsInfo

__all__ = ["Contributor", "GitHubToolsClient", "ToolsInfo"]
