from __future__ import annotations

from typing import Optional


# PUBLIC_INTERFACE
class TodoListError(Exception):
    """Base class for all errors raised by the note list."""


# PUBLIC_INTERFACE
class InvalidArgumentError(TodoListError, ValueError):
    """
    Raised when a note title or content is empty on create, or when an
    explicitly supplied edit field is empty.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


# PUBLIC_INTERFACE
class NotFoundError(TodoListError, LookupError):
    """Raised when a command references a note id not present in the list."""

    def __init__(self, note_id: int) -> None:
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


# PUBLIC_INTERFACE
class EditNotConfirmedError(TodoListError):
    """
    Raised when a confirm-before-edit note is edited and the confirmation
    strategy declines (or no strategy is available).
    """

    def __init__(self, note_id: int) -> None:
        super().__init__(f"Edit of note {note_id} was not confirmed")
        self.note_id = note_id
