"""Shared pytest fixtures for the homocrypt test suite."""

import pytest
from httpx import ASGITransport, AsyncClient

from homocrypt.crypto.paillier import generate_keypair
from homocrypt.main import app


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def keypair():
    """One 2048-bit keypair, generated once and shared by every test."""
    return generate_keypair(2048)


@pytest.fixture(scope="session")
def small_keypair():
    """A 512-bit keypair for tests that only exercise the algebra."""
    return generate_keypair(512)


@pytest.fixture()
async def client():
    """Provide an async HTTP test client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
