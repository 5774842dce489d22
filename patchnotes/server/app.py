"""FastAPI application factory for Patchnotes.

``create_app()`` is the single entry point used by the CLI and
``uvicorn`` alike.  The generation and enrichment HTTP clients are
started and stopped by the lifespan handler.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from patchnotes import __version__
from patchnotes.config import get_policy_name
from patchnotes.enrichment.github_tools import GitHubToolsClient
from patchnotes.filters.relevance import get_policy
from patchnotes.filters.types import FilterPolicy
from patchnotes.notes.generation_client import ChatCompletionsClient
from patchnotes.server.routes import router

logger = logging.getLogger(__name__)


def create_app(
    policy: FilterPolicy | None = None,
    generator: ChatCompletionsClient | None = None,
    tools_client: GitHubToolsClient | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    The returned app has:
    * ``app.state.policy``: the active :class:`FilterPolicy`
    * ``app.state.generator``: the text-generation client
    * ``app.state.tools_client``: the GitHub enrichment client
    * The ``/generate-notes``, ``/relevant-diffs``, ``/tools`` and
      ``/health`` routes
    """
    policy = policy or get_policy(get_policy_name())
    generator = generator or ChatCompletionsClient()
    tools_client = tools_client or GitHubToolsClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Patchnotes server starting up (policy=%s)", policy.name)
        await generator.start()
        await tools_client.start()
        try:
            yield
        finally:
            logger.info("Patchnotes server shutting down")
            await tools_client.stop()
            await generator.stop()

    app = FastAPI(
        title="Patchnotes",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.policy = policy
    app.state.generator = generator
    app.state.tools_client = tools_client

    app.include_router(router)

    logger.info("FastAPI app created")
    return app
