"""
In-memory note list with completion tracking.

The library core is importable without the HTTP layer; the FastAPI app
lives in todo_notes.main.
"""

from .errors import EditNotConfirmedError, InvalidArgumentError, NotFoundError, TodoListError
from .models import EditConfirmer, Note, NoteUpdate, NoteVariant
from .repositories import ListQuery, TodoList

__all__ = [
    "EditConfirmer",
    "EditNotConfirmedError",
    "InvalidArgumentError",
    "ListQuery",
    "Note",
    "NoteUpdate",
    "NoteVariant",
    "NotFoundError",
    "TodoList",
    "TodoListError",
]
