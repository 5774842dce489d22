"""Configuration constants and helpers for Patchnotes."""

import os

DEFAULT_PORT: int = 7870
DEFAULT_POLICY: str = "conservative"


def get_port() -> int:
    """Return the server port from PATCHNOTES_PORT env var, or DEFAULT_PORT."""
    raw = os.environ.get("PATCHNOTES_PORT")
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            return DEFAULT_PORT
    return DEFAULT_PORT


def get_policy_name() -> str:
    """Return the filter preset name from PATCHNOTES_POLICY, or DEFAULT_POLICY."""
    return os.environ.get("PATCHNOTES_POLICY", DEFAULT_POLICY).strip() or DEFAULT_POLICY


# --- Text generation (OpenAI-compatible chat completions) ---

OPENAI_BASE_URL: str = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_API_KEY: str = os.environ.get("OPENAI_API_KEY", "")
DEVELOPER_MODEL: str = os.environ.get("PATCHNOTES_DEVELOPER_MODEL", "gpt-4o-mini")
MARKETING_MODEL: str = os.environ.get("PATCHNOTES_MARKETING_MODEL", "gpt-4.1-mini")
LLM_TIMEOUT: float = float(os.environ.get("PATCHNOTES_LLM_TIMEOUT", "60.0"))


# --- GitHub enrichment ---

GITHUB_API_URL: str = os.environ.get("GITHUB_API_URL", "https://api.github.com")
GITHUB_TOKEN: str = os.environ.get("GITHUB_TOKEN", "")
GITHUB_TIMEOUT: float = float(os.environ.get("PATCHNOTES_GITHUB_TIMEOUT", "10.0"))
RELATED_ISSUE_WINDOW_DAYS: int = 7


# --- Streaming ---

SINK_QUEUE_SIZE: int = int(
    os.environ.get("PATCHNOTES_SINK_QUEUE_SIZE", "64")
)  # Frames buffered between the orchestrator and the HTTP response.
ENRICH_STREAM: bool = os.environ.get("PATCHNOTES_ENRICH_STREAM", "1") not in ("0", "false", "no")
