"""The note store contract and backend selection.

A store offers async CRUD over notes against exactly one backend. The
controller only ever talks to this interface; which backend sits behind it
is decided once, when the store is built from settings.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from quicknotes.config import Settings
from quicknotes.errors import InvalidRecord
from quicknotes.models import Note, NoteChanges, NoteDraft

logger = logging.getLogger(__name__)


class NoteStore(abc.ABC):
    """Uniform CRUD contract over notes."""

    #: Short backend label used in logs and metrics.
    backend: str = "abstract"

    @abc.abstractmethod
    async def list(self) -> list[Note]:
        """Return every persisted note in backend order."""

    @abc.abstractmethod
    async def create(self, draft: NoteDraft | Mapping[str, Any]) -> Note:
        """Persist a new note and return the canonical record."""

    @abc.abstractmethod
    async def update(
        self, note_id: int | str, changes: NoteChanges | NoteDraft | Mapping[str, Any]
    ) -> Note:
        """Merge changes into an existing note and return the updated record."""

    @abc.abstractmethod
    async def delete(self, note_id: int | str) -> Note | None:
        """Remove a note. Returns the removed record when the backend reports it."""

    async def aclose(self) -> None:
        """Release backend resources."""

    async def __aenter__(self) -> NoteStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Payload coercion
# ---------------------------------------------------------------------------


def coerce_draft(draft: NoteDraft | Mapping[str, Any]) -> NoteDraft:
    """Validate a create payload, raising InvalidRecord if it cannot be stored."""
    if isinstance(draft, NoteDraft):
        return draft
    try:
        return NoteDraft.model_validate(dict(draft))
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidRecord(f"Cannot store note: {exc}") from exc


def coerce_changes(changes: NoteChanges | NoteDraft | Mapping[str, Any]) -> NoteChanges:
    """Validate an update payload, raising InvalidRecord if it cannot be stored."""
    if isinstance(changes, NoteChanges):
        return changes
    if isinstance(changes, NoteDraft):
        return NoteChanges(title=changes.title, content=changes.content)
    try:
        return NoteChanges.model_validate(dict(changes))
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidRecord(f"Cannot store note: {exc}") from exc


# ---------------------------------------------------------------------------
# Backend selection
# ---------------------------------------------------------------------------


def create_store(settings: Settings) -> NoteStore:
    """Build the one backend the settings select."""
    if settings.use_remote_store:
        from quicknotes.remote import RemoteNoteStore

        logger.info("Using remote note store at %s", settings.remote_base_address)
        return RemoteNoteStore(
            settings.remote_base_address, timeout=settings.request_timeout
        )

    from quicknotes.storage import LocalNoteStore

    logger.info(
        "Using local note store at %s (slot '%s')",
        settings.storage_path,
        settings.storage_slot,
    )
    return LocalNoteStore(settings.storage_path, slot=settings.storage_slot)
