from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from credential_service.config import Settings
from credential_service.db import create_engine_from_settings
from credential_service.main import create_app
from credential_service.store import CredentialStore


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "credentials.db"


@pytest.fixture
def settings(db_path):
    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{db_path}", LOG_LEVEL="INFO")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def sync_engine(db_path):
    """Plain synchronous engine on the same file, for inspecting rows."""
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture
def count_accounts(sync_engine):
    def _count(username=None):
        with sync_engine.connect() as conn:
            if username is None:
                return conn.execute(text("SELECT COUNT(*) FROM users")).scalar()
            return conn.execute(
                text("SELECT COUNT(*) FROM users WHERE username = :u"), {"u": username}
            ).scalar()
    return _count


@pytest.fixture
def open_store(settings):
    """Factory for a schema-initialized store bound to the running event loop."""
    @asynccontextmanager
    async def _open(database_url=None, query_timeout=5.0, **overrides):
        if database_url:
            overrides["DATABASE_URL"] = database_url
        store_settings = settings.model_copy(update=overrides)
        store = CredentialStore(
            create_engine_from_settings(store_settings), acquire_timeout=2.0, query_timeout=query_timeout
        )
        await store.ensure_schema()
        try:
            yield store
        finally:
            await store.dispose()
    return _open
