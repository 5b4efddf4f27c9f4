"""Shared pytest fixtures for the storycrafter test suite."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
import pytest_asyncio


# ---------------------------------------------------------------------------
# Datastore fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite database path."""
    return tmp_path / "test_stories.db"


@pytest.fixture
def memory_store():
    from models.datastore import MemoryDatastore
    return MemoryDatastore()


@pytest.fixture
def sqlite_store(tmp_db_path):
    from models.database import SQLiteDatastore
    return SQLiteDatastore(tmp_db_path)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_db_path):
    """Each datastore adapter in turn."""
    if request.param == "memory":
        from models.datastore import MemoryDatastore
        return MemoryDatastore()
    from models.database import SQLiteDatastore
    return SQLiteDatastore(tmp_db_path)


@pytest.fixture
def repos(store):
    from models.repositories import Repositories
    return Repositories(store)


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        _env_file=None,
        sqlite_db_path=tmp_path / "stories.db",
        log_dir=tmp_path / "logs",
    )


# ---------------------------------------------------------------------------
# Clock / id fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def clock():
    """A clock that advances one second per call."""
    start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    ticks = count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def id_factory():
    """Sequential, readable ids."""
    ids = count(1)
    return lambda: f"id-{next(ids)}"


# ---------------------------------------------------------------------------
# Dispatcher and identity fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def dispatcher(store, clock, id_factory):
    from services.dispatcher import build_dispatcher
    return build_dispatcher(store, clock=clock, id_factory=id_factory)


@pytest.fixture
def alice():
    from services.identity import RequestContext
    return RequestContext.for_user("user-alice")


@pytest.fixture
def bob():
    from services.identity import RequestContext
    return RequestContext.for_user("user-bob")


@pytest.fixture
def anonymous():
    from services.identity import RequestContext
    return RequestContext()


@pytest.fixture
def call(dispatcher, alice):
    """Run an operation and return its data, failing the test on an error envelope."""

    async def _call(name, payload=None, context=None):
        envelope = await dispatcher.dispatch(name, payload, context or alice)
        assert envelope["success"], envelope
        return envelope.get("data")

    return _call


@pytest_asyncio.fixture
async def sample_story(call):
    """A story owned by alice, in wire form."""
    return (await call("createStory", {"title": "Novel A", "genre": "Mystery"}))["story"]
