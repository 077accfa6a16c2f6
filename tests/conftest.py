"""
pytest configuration for FairOS client tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from fairos import FairOSClient  # noqa: E402
from fairos_core.logging.context import clear_log_context  # noqa: E402

from fakes import FakeFairOSService, FakeTransport  # noqa: E402


@pytest.fixture(autouse=True)
def reset_log_context():
    """Log context variables must not leak between tests."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def fake_service() -> FakeFairOSService:
    return FakeFairOSService()


@pytest.fixture
def fake_transport(fake_service) -> FakeTransport:
    return FakeTransport(fake_service)


@pytest.fixture
def client(fake_transport) -> FairOSClient:
    return FairOSClient(transport=fake_transport)


@pytest_asyncio.fixture
async def alice(client):
    """Client with user 'alice' signed up and pod 'pod' created."""
    await client.signup("alice", "pw")
    await client.create_pod("alice", "pod", "pw")
    return client
