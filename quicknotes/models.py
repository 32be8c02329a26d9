"""Pydantic models for notes and the controller snapshot."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    """A persisted note as returned by a store.

    Instances are frozen: the controller replaces its copy with whatever
    record the store hands back instead of mutating it.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str = Field(..., description="Store-assigned identifier")
    title: str = Field(..., description="Note title")
    content: str = Field(..., description="Note content")
    created_at: str = Field(..., description="ISO-8601 creation timestamp")
    updated_at: str = Field(..., description="ISO-8601 last update timestamp")


class NoteDraft(BaseModel):
    """Title and content submitted when creating a note."""

    model_config = ConfigDict(strict=True)

    title: str
    content: str

    @property
    def is_blank(self) -> bool:
        """True when either field is empty or whitespace-only."""
        return not self.title.strip() or not self.content.strip()


class NoteChanges(BaseModel):
    """Fields to merge into an existing note. Unset fields are kept."""

    model_config = ConfigDict(strict=True)

    title: str | None = None
    content: str | None = None


class ControllerState(BaseModel):
    """Read-only view of the controller for the presentation layer."""

    model_config = ConfigDict(frozen=True)

    notes: tuple[Note, ...] = ()
    loading: bool = False
    error: str | None = None
