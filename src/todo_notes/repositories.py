from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from functools import lru_cache
from threading import RLock
from typing import Iterator, List, Mapping, Optional, Tuple, Union

from .errors import EditNotConfirmedError, InvalidArgumentError, NotFoundError
from .models import EditConfirmer, Note, NoteUpdate, NoteVariant

logger = logging.getLogger("todo_notes.repository")

SORT_FIELDS = {"insertion", "status", "created_at", "updated_at"}

UpdatePayload = Union[NoteUpdate, Mapping[str, Optional[str]]]


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing notes.
    """
    limit: Optional[int] = None
    offset: int = 0
    completed: Optional[bool] = None
    search: Optional[str] = None
    sort: str = "insertion"  # allowed: insertion, status, created_at, -created_at, updated_at, -updated_at


def _coerce_update(payload: UpdatePayload) -> NoteUpdate:
    if isinstance(payload, NoteUpdate):
        return payload
    if isinstance(payload, Mapping):
        unknown = set(payload) - {"title", "content"}
        if unknown:
            raise InvalidArgumentError(f"unsupported update fields: {sorted(unknown)}")
        return NoteUpdate(title=payload.get("title"), content=payload.get("content"))
    raise InvalidArgumentError("payload must be a NoteUpdate or a mapping")


# PUBLIC_INTERFACE
class TodoList:
    """
    Thread-safe in-memory list of notes.

    Insertion order is the canonical order. The number of uncompleted notes
    is kept as a running counter and adjusted inside the same locked section
    as every completion change. Notes handed to callers are copies; the
    list's own notes change only through its methods.
    """

    def __init__(self, confirmer: Optional[EditConfirmer] = None) -> None:
        self._lock = RLock()
        self._notes: List[Note] = []
        self._uncompleted_count = 0
        self._next_id = 1
        self._confirmer = confirmer

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def _locate(self, note_id: int) -> Note:
        index = self.find_index(note_id)
        if index == -1:
            logger.info("note_not_found", extra={"id": note_id})
            raise NotFoundError(note_id)
        return self._notes[index]

    def _apply_completion(self, note: Note, completed: bool) -> None:
        if note.set_completed(completed):
            self._uncompleted_count += -1 if note.is_completed else 1
            logger.debug("note_complete", extra={"id": note.id, "completed": note.is_completed})

    def add_note(self, title: str, content: str, variant: NoteVariant = NoteVariant.DEFAULT) -> Note:
        """Create a note at the end of the list and return a copy of it."""
        try:
            variant = NoteVariant(variant)
        except ValueError as e:
            raise InvalidArgumentError(f"unknown note variant: {variant!r}", field="variant") from e
        with self._lock:
            note = Note(id=self._next_id, title=title, content=content, variant=variant)
            # Only consume the id once construction succeeded.
            self._allocate_id()
            self._notes.append(note)
            self._uncompleted_count += 1
            logger.debug("note_create", extra={"id": note.id})
            return replace(note)

    def delete_note(self, note_id: int) -> None:
        with self._lock:
            note = self._locate(note_id)
            del self._notes[self.find_index(note_id)]
            if not note.is_completed:
                self._uncompleted_count -= 1
            logger.debug("note_delete", extra={"id": note_id})

    def update_note(
        self,
        note_id: int,
        payload: UpdatePayload,
        confirmer: Optional[EditConfirmer] = None,
    ) -> Note:
        """
        Edit title and/or content of a note and return the updated copy.

        The payload is validated and, for confirm-before-edit notes, the
        confirmer (per-call, else the list default) is consulted before any
        field changes. Completion is never altered by an edit.
        """
        with self._lock:
            note = self._locate(note_id)
            update = _coerce_update(payload)
            update.validate()
            if note.requires_confirmation:
                strategy = confirmer or self._confirmer
                if strategy is None or not strategy(replace(note), update):
                    logger.info("note_edit_declined", extra={"id": note_id})
                    raise EditNotConfirmedError(note_id)
            note.edit(title=update.title, content=update.content)
            logger.debug("note_update", extra={"id": note_id})
            return replace(note)

    def set_completed(self, note_id: int, completed: bool) -> Note:
        with self._lock:
            note = self._locate(note_id)
            self._apply_completion(note, completed)
            return replace(note)

    def toggle_complete(self, note_id: int) -> Note:
        with self._lock:
            note = self._locate(note_id)
            self._apply_completion(note, not note.is_completed)
            return replace(note)

    def get_note_by_id(self, note_id: int) -> Optional[Note]:
        """Return a copy of the note, or None if no note has that id."""
        with self._lock:
            index = self.find_index(note_id)
            return None if index == -1 else replace(self._notes[index])

    def find_index(self, note_id: int) -> int:
        """Return the position of the note in insertion order, or -1."""
        with self._lock:
            for index, note in enumerate(self._notes):
                if note.id == note_id:
                    return index
            return -1

    def get_notes(self) -> Tuple[Note, ...]:
        with self._lock:
            return tuple(replace(n) for n in self._notes)

    def get_uncompleted_notes(self) -> List[Note]:
        with self._lock:
            return [replace(n) for n in self._notes if not n.is_completed]

    def search_notes(self, query: str) -> List[Note]:
        """Notes whose title or content contains query (case-sensitive); "" matches all."""
        with self._lock:
            return [replace(n) for n in self._notes if query in n.title or query in n.content]

    def sort_notes_by_status(self) -> List[Note]:
        """Uncompleted notes first; sorted() is stable so ties keep list order."""
        with self._lock:
            return sorted((replace(n) for n in self._notes), key=lambda n: n.is_completed)

    def sort_notes_by_creation_time(self) -> List[Note]:
        with self._lock:
            return sorted((replace(n) for n in self._notes), key=lambda n: n.created_at)

    def get_total_notes(self) -> int:
        with self._lock:
            return len(self._notes)

    def get_remaining_uncompleted_notes(self) -> int:
        with self._lock:
            return self._uncompleted_count

    def list_notes(self, query: Optional[ListQuery] = None) -> Tuple[List[Note], int]:
        """
        Return a slice of notes and the total count matching filters.
        - Filter by completed
        - Substring search across title and content (case-sensitive)
        - Sorting by insertion, status, created_at or updated_at (asc/desc)
        - Supports limit/offset
        """
        q = query or ListQuery()
        sort_key = (q.sort or "insertion").strip().lower()
        reverse = sort_key.startswith("-")
        field = sort_key[1:] if reverse else sort_key
        if field not in SORT_FIELDS:
            raise InvalidArgumentError(f"unsupported sort: {q.sort}", field="sort")

        with self._lock:
            items = list(self._notes)
            if q.completed is not None:
                items = [n for n in items if n.is_completed == q.completed]
            if q.search:
                items = [n for n in items if q.search in n.title or q.search in n.content]
            total = len(items)

            if field == "status":
                items = sorted(items, key=lambda n: n.is_completed, reverse=reverse)
            elif field in {"created_at", "updated_at"}:
                items = sorted(items, key=lambda n: getattr(n, field), reverse=reverse)
            elif reverse:
                items = items[::-1]

            start = max(q.offset, 0)
            end = None if q.limit is None else start + max(q.limit, 0)
            return [replace(n) for n in items[start:end]], total

    def clear(self) -> None:
        """Remove every note. Ids already handed out are not reused."""
        with self._lock:
            self._notes.clear()
            self._uncompleted_count = 0

    def __len__(self) -> int:
        return self.get_total_notes()

    def __iter__(self) -> Iterator[Note]:
        return iter(self.get_notes())

    def __contains__(self, note_id: object) -> bool:
        return isinstance(note_id, int) and not isinstance(note_id, bool) and self.find_index(note_id) != -1


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_todo_list() -> TodoList:
    """
    Return the process-wide TodoList used by the HTTP layer.
    Tests replace it through FastAPI dependency overrides.
    """
    return TodoList()
