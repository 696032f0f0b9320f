"""Tests for the credential store."""
import pytest

from credential_service.result import ErrorKind


@pytest.mark.asyncio
async def test_insert_and_find(open_store):
    async with open_store() as store:
        inserted = await store.insert("sam", "hash-value", email="sam@example.com")
        assert inserted.ok
        assert isinstance(inserted.value, int)

        found = await store.find_by_username("sam")
        assert found.ok
        account = found.value
        assert account.id == inserted.value
        assert account.username == "sam"
        assert account.password_hash == "hash-value"
        assert account.email == "sam@example.com"
        assert account.phone is None
        assert account.created_at is not None
        assert "hash-value" not in repr(account)


@pytest.mark.asyncio
async def test_find_missing_returns_none(open_store):
    async with open_store() as store:
        found = await store.find_by_username("nobody")
        assert found.ok
        assert found.value is None


@pytest.mark.asyncio
async def test_lookup_is_exact_match(open_store):
    async with open_store() as store:
        await store.insert("Tess", "h")
        assert (await store.find_by_username("tess")).value is None
        assert (await store.find_by_username("Tess ")).value is None


@pytest.mark.asyncio
async def test_duplicate_insert(open_store):
    async with open_store() as store:
        assert (await store.insert("uma", "h1")).ok
        duplicate = await store.insert("uma", "h2")
        assert not duplicate.ok
        assert duplicate.error == ErrorKind.DUPLICATE_USERNAME
        assert (await store.find_by_username("uma")).value.password_hash == "h1"


@pytest.mark.asyncio
async def test_ids_are_increasing(open_store):
    async with open_store() as store:
        first = await store.insert("vic", "h")
        second = await store.insert("wes", "h")
        assert second.value > first.value


@pytest.mark.asyncio
async def test_connection_release_is_idempotent(open_store):
    async with open_store() as store:
        acquired = await store.acquire()
        assert acquired.ok
        connection = acquired.value
        assert store.engine.pool.checkedout() == 1

        await connection.release()
        await connection.release()
        assert connection.released
        assert store.engine.pool.checkedout() == 0


@pytest.mark.asyncio
async def test_one_connection_serves_lookup_and_insert(open_store):
    async with open_store() as store:
        connection = (await store.acquire()).value
        try:
            assert (await connection.find_by_username("xena")).value is None
            assert (await connection.insert("xena", "h")).ok
            assert (await connection.find_by_username("xena")).value.username == "xena"
        finally:
            await connection.release()
