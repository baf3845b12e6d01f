"""
Shared pytest fixtures and configuration.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from lockin.api.app import create_app
from lockin.browser.alarms import AlarmScheduler
from lockin.browser.host import BrowserHost, Tab
from lockin.config import Config
from lockin.registry import DistractionRegistry
from lockin.storage.store import BrowserStorage


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def cfg(tmp_path):
    return Config(data_dir=tmp_path / "data")


@pytest.fixture
def storage(tmp_path):
    return BrowserStorage(tmp_path / "storage.db")


@pytest.fixture
def host():
    return BrowserHost("chrome-extension://lockin")


@pytest.fixture
def registry(storage):
    return DistractionRegistry(storage.sync)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def alarms(clock):
    return AlarmScheduler(clock=clock)


@pytest.fixture
def reddit_tab(host):
    return host.upsert_tab(Tab(id=7, window_id=1, url="https://www.reddit.com/r/python", title="r/python"))


@pytest.fixture
def app(cfg):
    """Create a fresh app instance per test, backed by a temp data dir."""
    return create_app(cfg)


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
