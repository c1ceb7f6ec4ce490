"""Tests for locally persisted drafts."""

import asyncio
import json
from datetime import datetime, timezone

import pytest

from waterrefill.services.draft_store import DRAFTS_KEY, DraftStore
from waterrefill.services.local_store import LocalKeyValueStore, LocalStorageError
from waterrefill.tests.conftest import make_station


@pytest.mark.asyncio
async def test_save_marks_station_as_draft(local_store):
    drafts = DraftStore(local_store)

    saved = await drafts.save(make_station(is_draft=False))

    assert saved.is_draft is True
    assert (await drafts.get(saved.id)).is_draft is True


@pytest.mark.asyncio
async def test_save_replaces_same_id(local_store):
    drafts = DraftStore(local_store)
    station = make_station(coordinate=None)

    await drafts.save(station)
    station.name = "Renamed"
    await drafts.save(station)

    loaded = await drafts.load_all()
    assert len(loaded) == 1
    assert loaded[0].name == "Renamed"


@pytest.mark.asyncio
async def test_load_sorted_newest_first(local_store):
    drafts = DraftStore(local_store)
    older = make_station(name="Older", date_added=datetime(2024, 1, 1, tzinfo=timezone.utc))
    newer = make_station(name="Newer", date_added=datetime(2024, 6, 1, tzinfo=timezone.utc))
    await drafts.save(older)
    await drafts.save(newer)

    assert [draft.name for draft in await drafts.load_sorted()] == ["Newer", "Older"]


@pytest.mark.asyncio
async def test_delete_unknown_draft_is_noop(local_store):
    drafts = DraftStore(local_store)
    station = await drafts.save(make_station())

    await drafts.delete("unknown")
    await drafts.delete(station.id)

    assert await drafts.load_all() == []


@pytest.mark.asyncio
async def test_unreadable_draft_is_skipped(local_store):
    drafts = DraftStore(local_store)
    kept = await drafts.save(make_station())
    entries = await local_store.get(DRAFTS_KEY)
    entries["broken"] = {"name": "no id or date"}
    await local_store.set(DRAFTS_KEY, entries)

    assert [draft.id for draft in await drafts.load_all()] == [kept.id]
    assert await drafts.get("broken") is None


@pytest.mark.asyncio
async def test_draft_with_non_numeric_latitude_is_skipped(local_store):
    drafts = DraftStore(local_store)
    kept = await drafts.save(make_station())
    entries = await local_store.get(DRAFTS_KEY)
    bad = dict(entries[kept.id], id="bad-coordinate", latitude="north")
    entries["bad-coordinate"] = bad
    await local_store.set(DRAFTS_KEY, entries)

    assert [draft.id for draft in await drafts.load_all()] == [kept.id]
    assert await drafts.get("bad-coordinate") is None


@pytest.mark.asyncio
async def test_concurrent_saves_keep_both(local_store):
    drafts = DraftStore(local_store)
    first, second = make_station(name="First"), make_station(name="Second")

    await asyncio.gather(drafts.save(first), drafts.save(second))

    assert {draft.id for draft in await drafts.load_all()} == {first.id, second.id}


@pytest.mark.asyncio
async def test_concurrent_save_and_delete_do_not_lose_writes(local_store):
    drafts = DraftStore(local_store)
    existing = await drafts.save(make_station(name="Existing"))
    added = make_station(name="Added")

    await asyncio.gather(drafts.delete(existing.id), drafts.save(added))

    assert [draft.id for draft in await drafts.load_all()] == [added.id]


@pytest.mark.asyncio
async def test_corrupt_file_raises_local_storage_error(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(LocalStorageError):
        await DraftStore(LocalKeyValueStore(str(path))).load_all()


@pytest.mark.asyncio
async def test_drafts_survive_a_new_store_instance(tmp_path):
    path = str(tmp_path / "state.json")
    saved = await DraftStore(LocalKeyValueStore(path)).save(make_station())

    reloaded = await DraftStore(LocalKeyValueStore(path)).get(saved.id)

    assert reloaded.name == saved.name
    assert reloaded.coordinate == saved.coordinate
    assert saved.id in json.loads((tmp_path / "state.json").read_text())[DRAFTS_KEY]
