"""Shared fixtures for Patchnotes tests."""

import httpx
import pytest

from patchnotes.filters.relevance import CONSERVATIVE_POLICY
from tests.fakes import FakeGenerator, FakeToolsProvider


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def fake_tools() -> FakeToolsProvider:
    return FakeToolsProvider()


@pytest.fixture
def app(fake_generator: FakeGenerator, fake_tools: FakeToolsProvider):
    """Return a FastAPI test app with fake generation and enrichment collaborators."""
    from fastapi import FastAPI

    from patchnotes.server.routes import router

    test_app = FastAPI()
    test_app.state.policy = CONSERVATIVE_POLICY
    test_app.state.generator = fake_generator
    test_app.state.tools_client = fake_tools
    test_app.include_router(router)
    return test_app


@pytest.fixture
async def async_client(app):
    """Return an httpx AsyncClient configured with the test FastAPI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as client:
        yield client
