"""
Unit Tests for the In-Memory Entry Store

Entries are immutable except for a single video_ref patch, and
every write notifies listeners before returning.
"""

from uuid import uuid4

import pytest

from aura.domain.enums.check_in import MoodTag
from aura.domain.exceptions import PersistenceError
from aura.infrastructure.database.repositories.entry_store import InMemoryEntryStore

from conftest import make_entry


class TestInMemoryEntryStore:
    """Test suite for InMemoryEntryStore."""

    @pytest.fixture
    def store(self) -> InMemoryEntryStore:
        return InMemoryEntryStore()

    async def test_query_is_newest_first(self, store, user_id, days_ago) -> None:
        old = make_entry(user_id, days_ago(2))
        new = make_entry(user_id, days_ago(0))
        await store.create(old)
        await store.create(new)

        assert [e.id for e in await store.query(user_id)] == [new.id, old.id]

    async def test_query_filters(self, store, user_id, days_ago) -> None:
        for d in range(5):
            await store.create(make_entry(user_id, days_ago(d)))
        await store.create(make_entry(uuid4(), days_ago(0)))

        assert len(await store.query(user_id)) == 5
        assert len(await store.query(user_id, limit=2)) == 2
        assert len(await store.query(user_id, since=days_ago(1))) == 2

    async def test_duplicate_insert_rejected(self, store, user_id, days_ago) -> None:
        entry = make_entry(user_id, days_ago(0))
        await store.create(entry)

        with pytest.raises(PersistenceError):
            await store.create(entry)

    async def test_video_ref_patched_once(self, store, user_id, days_ago) -> None:
        entry = make_entry(user_id, days_ago(0), MoodTag.HAPPY)
        await store.create(entry)

        patched = await store.update(entry.id, video_ref="https://videos.example/a.mp4")

        assert patched.video_ref == "https://videos.example/a.mp4"
        assert patched.transcript == entry.transcript
        with pytest.raises(PersistenceError, match="already has a video"):
            await store.update(entry.id, video_ref="https://videos.example/b.mp4")
        assert (await store.get(entry.id)).video_ref == "https://videos.example/a.mp4"

    async def test_update_missing_entry(self, store) -> None:
        with pytest.raises(PersistenceError, match="not found"):
            await store.update(uuid4(), video_ref="https://videos.example/a.mp4")

    async def test_delete_requires_owner(self, store, user_id, days_ago) -> None:
        entry = make_entry(user_id, days_ago(0))
        await store.create(entry)

        assert not await store.delete(entry.id, uuid4())
        assert await store.delete(entry.id, user_id)
        assert await store.get(entry.id) is None

    async def test_writes_notify_listeners(self, store, user_id, days_ago) -> None:
        notified: list = []
        store.add_write_listener(notified.append)
        entry = make_entry(user_id, days_ago(0))

        await store.create(entry)
        await store.update(entry.id, video_ref="https://videos.example/a.mp4")
        await store.delete(entry.id, user_id)
        await store.delete(entry.id, user_id)

        assert notified == [user_id, user_id, user_id]
