from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..models import Note, NoteUpdate
from ..repositories import ListQuery, SORT_FIELDS, TodoList, get_todo_list
from ..schemas import CompletionIn, NoteCreate, NoteOut, NotePatch, NoteStats, PaginationEnvelope
from ..settings import get_settings
from ..utils import pagination_envelope

router = APIRouter(
    prefix="/api/v1/notes",
    tags=["notes"],
)


def _get_list(notes: TodoList = Depends(get_todo_list)) -> TodoList:
    """
    Dependency wrapper for the note list to keep signatures clean.
    """
    return notes


def _out(note: Note) -> NoteOut:
    return NoteOut.model_validate(note)


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=NoteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Note",
    description="Append a new note to the end of the list and return it.",
    responses={
        201: {"description": "Note created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_note(payload: NoteCreate, notes: TodoList = Depends(_get_list)) -> NoteOut:
    """
    Create a new note.
    """
    return _out(notes.add_note(payload.title, payload.content, payload.variant))


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=PaginationEnvelope,
    summary="List Notes",
    description=(
        "List notes with optional filters and pagination.\n\n"
        "Query parameters:\n"
        "- limit: max number of items to return (0..1000)\n"
        "- offset: number of items to skip (>=0)\n"
        "- completed: filter by completion status\n"
        "- q: case-sensitive search text for title/content\n"
        "- sort: insertion (default), status, created_at or updated_at; prefix '-' for descending\n\n"
        "Returns a pagination envelope with items and total count."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "Invalid query parameters"},
    },
)
def list_notes(
    limit: Optional[int] = Query(None, ge=0, le=1000, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip"),
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    q: Optional[str] = Query(None, description="Search text for title/content"),
    sort: str = Query("insertion", description="Sort order, e.g. status or -created_at"),
    notes: TodoList = Depends(_get_list),
) -> PaginationEnvelope:
    """
    List notes with pagination and filters.
    """
    normalized_sort = sort.strip().lower()
    if normalized_sort.lstrip("-") not in SORT_FIELDS:
        raise HTTPException(
            status_code=400,
            detail=f"sort must be one of {', '.join(sorted(SORT_FIELDS))} (optionally prefixed with '-')",
        )
    page_limit = get_settings().default_page_limit if limit is None else limit

    query = ListQuery(
        limit=page_limit,
        offset=offset,
        completed=completed,
        search=q,
        sort=normalized_sort,
    )
    items, total = notes.list_notes(query)
    envelope = pagination_envelope(
        items=[_out(n) for n in items],
        total=total,
        limit=page_limit,
        offset=offset,
    )
    return PaginationEnvelope(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=NoteStats,
    summary="Note Counts",
    description="Total number of notes and how many remain uncompleted.",
)
def note_stats(notes: TodoList = Depends(_get_list)) -> NoteStats:
    return NoteStats(total=notes.get_total_notes(), uncompleted=notes.get_remaining_uncompleted_notes())


# PUBLIC_INTERFACE
@router.get(
    "/{note_id}",
    response_model=NoteOut,
    summary="Get Note",
    description="Get a single note by ID.",
    responses={
        200: {"description": "Note found"},
        404: {"description": "Note not found"},
    },
)
def get_note(note_id: int, notes: TodoList = Depends(_get_list)) -> NoteOut:
    """
    Retrieve a single note by its ID.
    """
    note = notes.get_note_by_id(note_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return _out(note)


# PUBLIC_INTERFACE
@router.patch(
    "/{note_id}",
    response_model=NoteOut,
    summary="Edit Note",
    description=(
        "Edit the title and/or content of a note. Notes of the 'confirm_before_edit' "
        "variant are only changed when confirm=true (or AUTO_CONFIRM_EDITS is enabled)."
    ),
    responses={
        200: {"description": "Note updated"},
        404: {"description": "Note not found"},
        409: {"description": "Edit requires confirmation"},
    },
)
def patch_note(
    note_id: int,
    payload: NotePatch,
    confirm: bool = Query(False, description="Confirm the edit of a confirm-before-edit note"),
    notes: TodoList = Depends(_get_list),
) -> NoteOut:
    """
    Partial update of a note.
    """
    confirmed = confirm or get_settings().auto_confirm_edits

    def _confirmer(note: Note, update: NoteUpdate) -> bool:
        return confirmed

    return _out(notes.update_note(note_id, payload.to_update(), confirmer=_confirmer))


# PUBLIC_INTERFACE
@router.post(
    "/{note_id}/toggle",
    response_model=NoteOut,
    summary="Toggle Completion",
    description="Flip the completion status of a note.",
    responses={
        200: {"description": "Completion toggled"},
        404: {"description": "Note not found"},
    },
)
def toggle_note(note_id: int, notes: TodoList = Depends(_get_list)) -> NoteOut:
    return _out(notes.toggle_complete(note_id))


# PUBLIC_INTERFACE
@router.put(
    "/{note_id}/completion",
    response_model=NoteOut,
    summary="Set Completion",
    description="Set the completion status of a note explicitly.",
    responses={
        200: {"description": "Completion set"},
        404: {"description": "Note not found"},
    },
)
def set_note_completion(note_id: int, payload: CompletionIn, notes: TodoList = Depends(_get_list)) -> NoteOut:
    return _out(notes.set_completed(note_id, payload.completed))


# PUBLIC_INTERFACE
@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Note",
    description="Delete a note by ID.",
    responses={
        204: {"description": "Note deleted"},
        404: {"description": "Note not found"},
    },
)
def delete_note(note_id: int, notes: TodoList = Depends(_get_list)) -> None:
    """
    Delete a note. Returns 204 on success, 404 if not found.
    """
    notes.delete_note(note_id)
    return None
