"""HTTP-backed remote variant of the note store.

Each operation is one request against the configured base address:

  GET    /notes       — list
  POST   /notes       — create
  PUT    /notes/{id}  — update
  DELETE /notes/{id}  — delete

No retries happen here; timeouts are left to the httpx transport.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from quicknotes.errors import InvalidRecord, NoteNotFound, StoreUnavailable
from quicknotes.models import Note, NoteChanges, NoteDraft
from quicknotes.store import NoteStore, coerce_changes, coerce_draft

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds

_NOTES = TypeAdapter(list[Note])


def _error_detail(resp: httpx.Response) -> str:
    """Best-effort human-readable reason from an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return resp.text[:200] or resp.reason_phrase


class RemoteNoteStore(NoteStore):
    """Async HTTP client for a notes backend."""

    backend = "remote"

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Store contract
    # ------------------------------------------------------------------

    async def list(self) -> list[Note]:
        resp = await self._send("list", "GET", "/notes")
        if not resp.is_success:
            raise StoreUnavailable(f"Failed to fetch notes: {_error_detail(resp)}")
        try:
            return _NOTES.validate_python(resp.json())
        except (ValueError, ValidationError) as exc:
            raise StoreUnavailable(f"Malformed note list from {self._base_url}") from exc

    async def create(self, draft: NoteDraft | Mapping[str, Any]) -> Note:
        draft = coerce_draft(draft)
        resp = await self._send("create", "POST", "/notes", json=draft.model_dump())
        if resp.is_client_error:
            raise InvalidRecord(f"Note rejected: {_error_detail(resp)}")
        if not resp.is_success:
            raise StoreUnavailable(f"Failed to create note: {_error_detail(resp)}")
        note = self._parse_note(resp)
        logger.info("Created note %s", note.id)
        return note

    async def update(
        self, note_id: int | str, changes: NoteChanges | NoteDraft | Mapping[str, Any]
    ) -> Note:
        changes = coerce_changes(changes)
        resp = await self._send(
            "update",
            "PUT",
            f"/notes/{note_id}",
            json=changes.model_dump(exclude_none=True),
        )
        if resp.status_code == 404:
            raise NoteNotFound(note_id)
        if resp.is_client_error:
            raise InvalidRecord(f"Note rejected: {_error_detail(resp)}")
        if not resp.is_success:
            raise StoreUnavailable(f"Failed to update note: {_error_detail(resp)}")
        note = self._parse_note(resp)
        logger.info("Updated note %s", note.id)
        return note

    async def delete(self, note_id: int | str) -> Note | None:
        resp = await self._send("delete", "DELETE", f"/notes/{note_id}")
        if resp.status_code == 404:
            raise NoteNotFound(note_id)
        if not resp.is_success:
            raise StoreUnavailable(f"Failed to delete note: {_error_detail(resp)}")
        logger.info("Deleted note %s", note_id)
        if not resp.content:
            return None
        # The body is optional; backends may answer with a bare acknowledgement.
        try:
            return Note.model_validate(resp.json())
        except (ValueError, ValidationError):
            logger.debug("Delete of %s returned no note record", note_id)
            return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _send(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Issue one request, translating transport failures."""
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Error during %s (%s %s): %s", operation, method, path, exc)
            raise StoreUnavailable(f"Cannot reach {self._base_url}: {exc}") from exc

    def _parse_note(self, resp: httpx.Response) -> Note:
        try:
            return Note.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise StoreUnavailable(f"Malformed note from {self._base_url}") from exc
