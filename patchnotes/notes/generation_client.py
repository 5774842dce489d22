"""Streaming client for an OpenAI-compatible chat completions endpoint.

Implements the :class:`~patchnotes.notes.types.TextGenerator` protocol:
``stream()`` posts a ``stream: true`` completion request and yields the
``delta.content`` of every upstream chunk as it arrives.  Every failure
(transport, HTTP status, unparseable chunk) is raised as
:class:`GenerationError` so the orchestrator can abort the note stream.
"""

import json
import logging
from collections.abc import AsyncIterator

import httpx

from patchnotes.config import LLM_TIMEOUT, OPENAI_API_KEY, OPENAI_BASE_URL
from patchnotes.errors import GenerationError
from patchnotes.notes.types import GenerationRequest

logger = logging.getLogger(__name__)

_DONE_SENTINEL = "[DONE]"


class ChatCompletionsClient:
    """Chat completions streaming client with a start/stop lifecycle."""

    def __init__(
        self,
        base_url: str = OPENAI_BASE_URL,
        api_key: str = OPENAI_API_KEY,
        timeout: float = LLM_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize the HTTP client."""
        headers = {"Accept": "text/event-stream"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        else:
            logger.warning("No API key configured for %s; requests may be rejected", self._base_url)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=headers,
            transport=self._transport,
        )
        logger.info("Generation client ready (%s)", self._base_url)

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_configured(self) -> bool:
        """Whether the client is started and has credentials."""
        return self._client is not None and bool(self._api_key)

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Yield text fragments for *request* in arrival order."""
        if self._client is None:
            raise GenerationError("Generation client is not started")

        body = {
            "model": request.model,
            "messages": [message.model_dump() for message in request.messages],
            "stream": True,
        }
        if request.temperature is not None:
            body["temperature"] = request.temperature

        logger.debug("Requesting %s note from %s", request.channel.value, request.model)
        try:
            async with self._client.stream("POST", "/chat/completions", json=body) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise GenerationError(
                        f"Generation request failed with status {response.status_code}: "
                        f"{response.text[:200]}"
                    )
                async for line in response.aiter_lines():
                    fragment = _parse_line(line)
                    if fragment is _END:
                        break
                    if fragment:
                        yield fragment
        except httpx.HTTPError as exc:
            raise GenerationError(f"Generation stream failed: {exc}") from exc


_END = object()


def _parse_line(line: str):
    """Return the text in one upstream SSE line, ``None`` if it has none, or ``_END``."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[len("data:"):].strip()
    if payload == _DONE_SENTINEL:
        return _END
    if not payload:
        return None
    try:
        chunk = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Unparseable completion chunk: {payload[:200]}") from exc

    if "error" in chunk:
        raise GenerationError(f"Upstream error: {chunk['error']}")

    choices = chunk.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    return delta.get("content") or None
