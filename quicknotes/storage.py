"""JSON file-backed local variant of the note store.

The file is a small key-value document; the notes live as one serialized
array under a single named slot. Every operation reads the whole slot and
every mutation writes it back in full.
"""

from __future__ import annotations

import json
import logging
import os
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from quicknotes.errors import InvalidRecord, NoteNotFound, StoreUnavailable
from quicknotes.models import Note, NoteChanges, NoteDraft
from quicknotes.store import NoteStore, coerce_changes, coerce_draft

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "notes"

_NOTES = TypeAdapter(list[Note])


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _next_id(notes: list[Note]) -> int:
    """Epoch milliseconds, bumped past the highest id already stored."""
    candidate = int(time.time() * 1000)
    used = [n.id for n in notes if isinstance(n.id, int)]
    if used and candidate <= max(used):
        candidate = max(used) + 1
    return candidate


def _same_id(note: Note, note_id: int | str) -> bool:
    return str(note.id) == str(note_id)


class LocalNoteStore(NoteStore):
    """Manages note persistence in a local JSON file."""

    backend = "local"

    def __init__(self, storage_path: Path, slot: str = DEFAULT_SLOT) -> None:
        self._path = Path(storage_path)
        self._slot = slot

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Store contract
    # ------------------------------------------------------------------

    async def list(self) -> list[Note]:
        return self._read()

    async def create(self, draft: NoteDraft | Mapping[str, Any]) -> Note:
        draft = coerce_draft(draft)
        notes = self._read()
        timestamp = _now()
        note = Note(
            id=_next_id(notes),
            title=draft.title,
            content=draft.content,
            created_at=timestamp,
            updated_at=timestamp,
        )
        notes.append(note)
        self._write(notes)
        logger.info("Created note %s — '%s'", note.id, note.title)
        return note

    async def update(
        self, note_id: int | str, changes: NoteChanges | NoteDraft | Mapping[str, Any]
    ) -> Note:
        changes = coerce_changes(changes)
        notes = self._read()
        for index, existing in enumerate(notes):
            if _same_id(existing, note_id):
                break
        else:
            raise NoteNotFound(note_id)

        fields = changes.model_dump(exclude_none=True)
        fields["updated_at"] = _now()
        updated = existing.model_copy(update=fields)
        notes[index] = updated
        self._write(notes)
        logger.info("Updated note %s", updated.id)
        return updated

    async def delete(self, note_id: int | str) -> Note:
        notes = self._read()
        remaining = [n for n in notes if not _same_id(n, note_id)]
        if len(remaining) == len(notes):
            raise NoteNotFound(note_id)
        removed = next(n for n in notes if _same_id(n, note_id))
        self._write(remaining)
        logger.info("Deleted note %s", removed.id)
        return removed

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_document(self) -> dict[str, Any]:
        """Read the whole key-value document. A missing file is empty."""
        if not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("Failed to read %s: %s", self._path, exc)
            raise StoreUnavailable(f"Cannot read {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise StoreUnavailable(f"Unexpected payload in {self._path}")
        return document

    def _read(self) -> list[Note]:
        raw = self._load_document().get(self._slot)
        if raw is None:
            return []
        try:
            return _NOTES.validate_python(raw)
        except ValidationError as exc:
            logger.error("Corrupted '%s' slot in %s: %s", self._slot, self._path, exc)
            raise StoreUnavailable(f"Corrupted notes in {self._path}") from exc

    def _write(self, notes: list[Note]) -> None:
        """Replace the slot with the given notes in one atomic file swap."""
        document = self._load_document()
        try:
            document[self._slot] = _NOTES.dump_python(notes, mode="json")
            payload = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, UnicodeEncodeError) as exc:
            raise InvalidRecord(f"Cannot serialize notes: {exc}") from exc

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.error("Failed to write %s: %s", self._path, exc)
            raise StoreUnavailable(f"Cannot write {self._path}: {exc}") from exc
