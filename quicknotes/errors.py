"""Error taxonomy shared by the stores and the controller."""

from __future__ import annotations


class NoteError(Exception):
    """Base class for every failure a note operation can report."""


class NoteValidationError(NoteError):
    """A required field was blank; raised before any store call."""


class NoteNotFound(NoteError):
    """A mutation targeted an id the store does not hold."""

    def __init__(self, note_id: int | str) -> None:
        super().__init__(f"Note {note_id!r} not found")
        self.note_id = note_id


class InvalidRecord(NoteError):
    """The store could not persist or transmit the given payload."""


class StoreUnavailable(NoteError):
    """The backend could not be reached or answered unexpectedly."""
