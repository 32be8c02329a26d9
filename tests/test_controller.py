"""Unit tests for quicknotes.controller — list reconciliation and status."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from quicknotes.controller import VALIDATION_MESSAGE, NoteController
from quicknotes.errors import NoteNotFound, StoreUnavailable
from quicknotes.models import Note, NoteDraft
from quicknotes.storage import LocalNoteStore
from quicknotes.store import NoteStore

TS = "2026-01-01T00:00:00+00:00"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _note(note_id: int, title: str = "T", content: str = "C", updated_at: str = TS) -> Note:
    return Note(id=note_id, title=title, content=content, created_at=TS, updated_at=updated_at)


def _mock_store() -> AsyncMock:
    """Create a NoteStore double whose calls succeed with empty results."""
    store = AsyncMock(spec=NoteStore)
    store.backend = "mock"
    store.list = AsyncMock(return_value=[])
    return store


async def _loaded(store: AsyncMock, notes: list[Note]) -> NoteController:
    store.list = AsyncMock(return_value=notes)
    controller = NoteController(store)
    assert await controller.load()
    return controller


def _dump(controller: NoteController) -> list[str]:
    return [n.model_dump_json() for n in controller.notes]


@pytest.fixture()
def local_controller(tmp_path: Path) -> NoteController:
    return NoteController(LocalNoteStore(tmp_path / "notes.json"))


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------


class TestLoad:
    @pytest.mark.asyncio
    async def test_replaces_list(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1), _note(2)])
        assert [n.id for n in controller.notes] == [1, 2]
        assert controller.error is None
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_list(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        store.list = AsyncMock(side_effect=StoreUnavailable("offline"))

        assert await controller.load() is False
        assert [n.id for n in controller.notes] == [1]
        assert controller.error == "Failed to load notes: offline"

    @pytest.mark.asyncio
    async def test_first_load_failure_leaves_empty(self):
        store = _mock_store()
        store.list = AsyncMock(side_effect=StoreUnavailable("offline"))
        controller = NoteController(store)
        assert await controller.load() is False
        assert controller.notes == ()
        assert controller.error is not None

    @pytest.mark.asyncio
    async def test_loading_flag_while_in_flight(self):
        gate = asyncio.Event()
        store = _mock_store()

        async def _slow_list():
            await gate.wait()
            return [_note(1)]

        store.list = _slow_list
        controller = NoteController(store)
        task = asyncio.create_task(controller.load())
        await asyncio.sleep(0)
        assert controller.loading is True
        assert controller.state.loading is True

        gate.set()
        await task
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_load_clears_error_up_front(self):
        gate = asyncio.Event()
        store = _mock_store()
        store.create = AsyncMock(side_effect=StoreUnavailable("down"))
        controller = NoteController(store)
        await controller.add("T", "C")
        assert controller.error

        async def _slow_list():
            await gate.wait()
            return []

        store.list = _slow_list
        task = asyncio.create_task(controller.load())
        await asyncio.sleep(0)
        assert controller.error is None
        gate.set()
        await task


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    @pytest.mark.asyncio
    async def test_prepends_canonical_note(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        store.create = AsyncMock(return_value=_note(2, "New", "Body"))

        note = await controller.add("New", "Body")

        assert note == _note(2, "New", "Body")
        assert [n.id for n in controller.notes] == [2, 1]
        store.create.assert_awaited_once_with(NoteDraft(title="New", content="Body"))

    @pytest.mark.parametrize(
        "title, content",
        [("", "non-empty"), ("title", ""), ("   ", "body"), ("title", "\n\t ")],
    )
    @pytest.mark.asyncio
    async def test_blank_fields_never_reach_store(self, title, content):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])

        assert await controller.add(title, content) is None

        store.create.assert_not_called()
        assert len(controller.notes) == 1
        assert controller.error == VALIDATION_MESSAGE

    @pytest.mark.asyncio
    async def test_failure_leaves_list_and_sets_error(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        store.create = AsyncMock(side_effect=StoreUnavailable("offline"))
        before = _dump(controller)

        assert await controller.add("T", "C") is None
        assert _dump(controller) == before
        assert controller.error == "Failed to add note: offline"
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self):
        store = _mock_store()
        controller = NoteController(store)
        await controller.add("", "")
        assert controller.error
        store.create = AsyncMock(return_value=_note(1))
        await controller.add("T", "C")
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_sequential_adds_newest_first(self, local_controller: NoteController):
        for title in ("A", "B", "C"):
            assert await local_controller.add(title, f"{title} body")
        assert [n.title for n in local_controller.notes] == ["C", "B", "A"]

        b = local_controller.notes[1]
        assert await local_controller.remove(b.id)
        assert [n.title for n in local_controller.notes] == ["C", "A"]


# ---------------------------------------------------------------------------
# edit
# ---------------------------------------------------------------------------


class TestEdit:
    @pytest.mark.asyncio
    async def test_replaces_in_place(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1), _note(2), _note(3)])
        store.update = AsyncMock(return_value=_note(2, "Edited", "Body", updated_at="later"))

        note = await controller.edit(2, "Edited", "Body")

        assert note is not None and note.title == "Edited"
        assert [n.id for n in controller.notes] == [1, 2, 3]
        assert controller.notes[1].title == "Edited"

    @pytest.mark.asyncio
    async def test_store_failure_leaves_list_identical(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1), _note(2), _note(3)])
        store.update = AsyncMock(side_effect=StoreUnavailable("offline"))
        before = _dump(controller)

        assert await controller.edit(2, "Edited", "Body") is None

        assert _dump(controller) == before
        assert controller.error == "Failed to update note: offline"

    @pytest.mark.asyncio
    async def test_blank_edit_rejected(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        assert await controller.edit(1, "Title", "  ") is None
        store.update.assert_not_called()
        assert controller.error == VALIDATION_MESSAGE

    @pytest.mark.asyncio
    async def test_error_kept_until_resolved(self):
        gate = asyncio.Event()
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        await controller.add("", "")

        async def _slow_update(note_id, draft):
            await gate.wait()
            return _note(1, draft.title, draft.content)

        store.update = _slow_update
        task = asyncio.create_task(controller.edit(1, "T", "C"))
        await asyncio.sleep(0)
        assert controller.error == VALIDATION_MESSAGE
        assert controller.loading is True

        gate.set()
        await task
        assert controller.error is None

    @pytest.mark.asyncio
    async def test_overlapping_edits_apply_in_completion_order(self):
        first_gate, second_gate = asyncio.Event(), asyncio.Event()
        gates = {"first": first_gate, "second": second_gate}
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])

        async def _update(note_id, draft):
            await gates[draft.title].wait()
            return _note(note_id, draft.title, draft.content)

        store.update = _update
        first = asyncio.create_task(controller.edit(1, "first", "body"))
        second = asyncio.create_task(controller.edit(1, "second", "body"))
        await asyncio.sleep(0)

        second_gate.set()
        await second
        assert controller.notes[0].title == "second"
        assert controller.loading is True

        first_gate.set()
        await first
        assert controller.notes[0].title == "first"
        assert controller.loading is False

    @pytest.mark.asyncio
    async def test_same_fields_refresh_updated_at(self, local_controller: NoteController):
        note = await local_controller.add("Same", "Body")
        edited = await local_controller.edit(note.id, "Same", "Body")
        assert edited is not None
        assert (edited.id, edited.title, edited.content, edited.created_at) == (
            note.id,
            note.title,
            note.content,
            note.created_at,
        )
        assert edited.updated_at >= note.updated_at


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------


class TestRemove:
    @pytest.mark.asyncio
    async def test_removes_matching_entry(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1), _note(2)])
        store.delete = AsyncMock(return_value=None)

        assert await controller.remove(1) is True
        assert [n.id for n in controller.notes] == [2]

    @pytest.mark.asyncio
    async def test_not_found_reported(self):
        store = _mock_store()
        controller = await _loaded(store, [_note(1)])
        store.delete = AsyncMock(side_effect=NoteNotFound(9))

        assert await controller.remove(9) is False
        assert [n.id for n in controller.notes] == [1]
        assert controller.error.startswith("Failed to delete note:")

    @pytest.mark.asyncio
    async def test_stale_id_after_delete(self, local_controller: NoteController):
        note = await local_controller.add("T", "C")
        assert await local_controller.remove(note.id)
        assert await local_controller.remove(note.id) is False
        assert await local_controller.edit(note.id, "T", "C") is None
        assert "not found" in local_controller.error


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


class TestState:
    @pytest.mark.asyncio
    async def test_state_snapshot_is_detached(self, local_controller: NoteController):
        await local_controller.add("A", "a")
        snapshot = local_controller.state
        await local_controller.add("B", "b")
        assert len(snapshot.notes) == 1
        assert len(local_controller.state.notes) == 2

    @pytest.mark.asyncio
    async def test_dismiss_error(self, local_controller: NoteController):
        await local_controller.add("", "")
        assert local_controller.state.error == VALIDATION_MESSAGE
        local_controller.dismiss_error()
        assert local_controller.error is None

    @pytest.mark.asyncio
    async def test_round_trip_through_reload(self, tmp_path: Path):
        path = tmp_path / "notes.json"
        writer = NoteController(LocalNoteStore(path))
        created = await writer.add("Title", "Content")

        reader = NoteController(LocalNoteStore(path))
        assert await reader.load()
        assert reader.notes == (created,)
        assert created.created_at == created.updated_at
