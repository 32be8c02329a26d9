"""Session-scoped owner of the in-memory note list.

The controller mediates every mutation through a NoteStore and only
touches its list once the store call has resolved, so a failed call
leaves the list exactly as it was. Overlapping calls are applied in the
order they complete.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from quicknotes.errors import NoteError, NoteValidationError
from quicknotes.metrics import STORE_DURATION, STORE_OPERATIONS
from quicknotes.models import ControllerState, Note, NoteDraft
from quicknotes.store import NoteStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

VALIDATION_MESSAGE = "Both title and content are required!"


def _validate(title: str, content: str) -> NoteDraft:
    draft = NoteDraft(title=title, content=content)
    if draft.is_blank:
        raise NoteValidationError(VALIDATION_MESSAGE)
    return draft


class NoteController:
    """Keeps the session's note list consistent with its store."""

    def __init__(self, store: NoteStore) -> None:
        self._store = store
        self._notes: list[Note] = []
        self._in_flight = 0
        self._error: str | None = None

    @property
    def notes(self) -> tuple[Note, ...]:
        """Snapshot of the current list, newest first."""
        return tuple(self._notes)

    @property
    def loading(self) -> bool:
        """Whether any store call is outstanding."""
        return self._in_flight > 0

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def state(self) -> ControllerState:
        return ControllerState(notes=self.notes, loading=self.loading, error=self._error)

    def dismiss_error(self) -> None:
        self._error = None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace the list with the store's contents."""
        self._error = None
        ok, notes = await self._call("list", "load notes", self._store.list())
        if ok:
            self._notes = list(notes)
            logger.info("Loaded %d notes", len(self._notes))
        return ok

    async def add(self, title: str, content: str) -> Note | None:
        """Create a note and put it at the head of the list."""
        try:
            draft = _validate(title, content)
        except NoteValidationError as exc:
            self._error = str(exc)
            return None

        ok, note = await self._call("create", "add note", self._store.create(draft))
        if ok:
            self._notes.insert(0, note)
        return note

    async def edit(self, note_id: int | str, title: str, content: str) -> Note | None:
        """Update a note, keeping its position in the list."""
        try:
            draft = _validate(title, content)
        except NoteValidationError as exc:
            self._error = str(exc)
            return None

        ok, note = await self._call(
            "update", "update note", self._store.update(note_id, draft)
        )
        if ok:
            self._notes = [note if _same_id(n, note_id) else n for n in self._notes]
        return note

    async def remove(self, note_id: int | str) -> bool:
        """Delete a note and drop it from the list."""
        ok, _ = await self._call("delete", "delete note", self._store.delete(note_id))
        if ok:
            self._notes = [n for n in self._notes if not _same_id(n, note_id)]
        return ok

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call(
        self, operation: str, description: str, call: Awaitable[T]
    ) -> tuple[bool, T | None]:
        """Await one store call, recording status, metrics and errors."""
        backend = self._store.backend
        self._in_flight += 1
        start = time.perf_counter()
        try:
            result = await call
        except NoteError as exc:
            STORE_OPERATIONS.labels(backend=backend, operation=operation, status="error").inc()
            self._error = f"Failed to {description}: {exc}"
            logger.warning("Store %s failed: %s", operation, exc)
            return False, None
        finally:
            self._in_flight -= 1
            STORE_DURATION.labels(backend=backend, operation=operation).observe(
                time.perf_counter() - start
            )

        STORE_OPERATIONS.labels(backend=backend, operation=operation, status="success").inc()
        self._error = None
        return True, result


def _same_id(note: Note, note_id: int | str) -> bool:
    return str(note.id) == str(note_id)
