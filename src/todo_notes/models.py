from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Protocol

from .errors import InvalidArgumentError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(name: str, value: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{name} must be a string", field=name)
    if not value.strip():
        raise InvalidArgumentError(f"{name} must not be empty", field=name)


# PUBLIC_INTERFACE
class NoteVariant(str, Enum):
    """Kind of note. Confirm-before-edit notes are only edited after an EditConfirmer agrees."""

    DEFAULT = "default"
    CONFIRM_BEFORE_EDIT = "confirm_before_edit"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class NoteUpdate:
    """
    Partial edit payload for a note.

    A field left as None is absent and keeps its current value. A supplied
    string is an explicit value and must not be empty.
    """

    title: Optional[str] = None
    content: Optional[str] = None

    def validate(self) -> None:
        if self.title is not None:
            _require_text("title", self.title)
        if self.content is not None:
            _require_text("content", self.content)

    def is_empty(self) -> bool:
        return self.title is None and self.content is None


# PUBLIC_INTERFACE
@dataclass
class Note:
    """
    A single title/content record with timestamps and a completion flag.

    Fields:
    - id: Unique integer identifier assigned by the owning TodoList
    - title: Non-empty short title
    - content: Non-empty body text
    - is_completed: Completion flag (False on creation unless given)
    - variant: DEFAULT or CONFIRM_BEFORE_EDIT
    - created_at: UTC creation instant, never changes
    - updated_at: UTC instant of the last successful edit
    """

    id: int
    title: str
    content: str
    is_completed: bool = False
    variant: NoteVariant = NoteVariant.DEFAULT
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        _require_text("title", self.title)
        _require_text("content", self.content)
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def requires_confirmation(self) -> bool:
        return self.variant is NoteVariant.CONFIRM_BEFORE_EDIT

    def edit(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        """
        Apply the supplied fields and refresh updated_at.

        Both fields are validated before either is assigned, so a rejected
        edit leaves the note untouched. Completion is never changed here.
        """
        NoteUpdate(title=title, content=content).validate()
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        self.updated_at = utc_now()

    def set_completed(self, completed: bool) -> bool:
        """Set the completion flag. Returns True when the flag actually changed."""
        completed = bool(completed)
        if self.is_completed == completed:
            return False
        self.is_completed = completed
        return True


# PUBLIC_INTERFACE
class EditConfirmer(Protocol):
    """Strategy consulted before a confirm-before-edit note is changed."""

    def __call__(self, note: Note, update: NoteUpdate) -> bool:
        ...
