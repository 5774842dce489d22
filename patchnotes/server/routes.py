"""HTTP routes for the Patchnotes server.

Endpoints
---------
POST /generate-notes  Filters the submitted diff items and streams
                      developer and marketing notes for the relevant ones
                      as Server-Sent Events (``data: <json>`` records).

POST /relevant-diffs  Returns the diff items the active policy accepts,
                      without generating anything.

POST /tools           Returns related issues and top contributors for one
                      diff item.

GET  /health          Returns server status, version and active policy.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from functools import partial
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter
from sse_starlette.sse import EventSourceResponse

from patchnotes import __version__
from patchnotes.config import ENRICH_STREAM
from patchnotes.filters.relevance import filter_all
from patchnotes.filters.types import DiffItem
from patchnotes.notes.orchestrator import NoteOrchestrator
from patchnotes.notes.sink import QueueFrameSink
from patchnotes.stream.codec import LINE_TERMINATOR, encode_frame

logger = logging.getLogger(__name__)

router = APIRouter()

_DIFF_LIST = TypeAdapter(list[DiffItem])

# Strong references to running orchestrator tasks.
_background_tasks: set[asyncio.Task] = set()


class InvalidRequestBody(ValueError):
    """The request body is not ``{"diffs": [<diff item>, ...]}``."""


async def _read_diffs(request: Request) -> list[DiffItem]:
    """Parse and validate the ``diffs`` list of a request body."""
    try:
        body = await request.json()
        return _DIFF_LIST.validate_python(body["diffs"])
    except (ValueError, KeyError, TypeError) as exc:
        # json.JSONDecodeError and pydantic's ValidationError are ValueErrors.
        raise InvalidRequestBody(str(exc)) from exc


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _encoded_frames(
    sink: QueueFrameSink, run: Callable[[], Coroutine[Any, Any, bool]]
) -> AsyncIterator[bytes]:
    """Start *run* and yield encoded frames from *sink* until it closes.

    The orchestrator task is only created once the response body is
    iterated, so a client that disconnects before the first frame never
    starts generation.  If the client goes away mid-stream the sink is
    detached, which turns the orchestrator's next write into a fatal error.
    """
    task = asyncio.create_task(run())
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    try:
        async for frame in sink:
            yield encode_frame(frame)
        await task
    finally:
        sink.detach()
        if not task.done():
            logger.info("Note stream reader stopped before the orchestrator finished")


# ---------------------------------------------------------------------------
# POST /generate-notes
# ---------------------------------------------------------------------------


@router.post("/generate-notes", response_model=None)
async def generate_notes(request: Request) -> EventSourceResponse | JSONResponse:
    """Stream release notes for the relevant subset of the submitted diffs.

    Errors before streaming starts are reported with a 400/500 status and
    ``{"error": ...}`` body.  Once the stream is open, failures arrive as
    an in-band ``{"type": "error"}`` frame.
    """
    try:
        try:
            diffs = await _read_diffs(request)
        except InvalidRequestBody:
            logger.warning("Rejected generate-notes request with invalid body", exc_info=True)
            return _error("Invalid request body", 400)

        relevant = filter_all(diffs, request.app.state.policy)
        if not relevant:
            return _error("No relevant PRs found to generate notes for", 400)

        orchestrator = NoteOrchestrator(
            generator=request.app.state.generator,
            tools_provider=request.app.state.tools_client if ENRICH_STREAM else None,
        )
        sink = QueueFrameSink()

        logger.info("Streaming notes for %d of %d submitted PRs", len(relevant), len(diffs))
        return EventSourceResponse(
            _encoded_frames(sink, partial(orchestrator.run, relevant, sink)),
            sep=LINE_TERMINATOR,
            headers={"Cache-Control": "no-cache"},
        )
    except Exception:
        logger.exception("Error in generate-notes")
        return _error("Failed to generate release notes", 500)


# ---------------------------------------------------------------------------
# POST /relevant-diffs
# ---------------------------------------------------------------------------


@router.post("/relevant-diffs", response_model=None)
async def relevant_diffs(request: Request) -> dict | JSONResponse:
    """Return the diff items the active policy accepts."""
    try:
        diffs = await _read_diffs(request)
    except InvalidRequestBody:
        return _error("Invalid request body", 400)

    policy = request.app.state.policy
    relevant = filter_all(diffs, policy)
    return {
        "policy": policy.name,
        "total": len(diffs),
        "diffs": [item.model_dump() for item in relevant],
    }


# ---------------------------------------------------------------------------
# POST /tools
# ---------------------------------------------------------------------------


@router.post("/tools")
async def pr_tools(item: DiffItem, request: Request) -> dict:
    """Return related issues and top contributors for *item*."""
    tools = await request.app.state.tools_client.get_tools(item)
    return tools.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


@router.get("/health")
async def health(request: Request) -> dict:
    """Return server health information."""
    generator = request.app.state.generator
    return {
        "status": "ok",
        "version": __version__,
        "policy": request.app.state.policy.name,
        "generator_configured": getattr(generator, "is_configured", False),
        "active_streams": len(_background_tasks),
    }
