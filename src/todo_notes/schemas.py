from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .models import NoteUpdate, NoteVariant


def _non_blank(name: str, value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"{name} must not be empty")
    return value


# PUBLIC_INTERFACE
class NoteCreate(BaseModel):
    """
    Schema for creating a new note.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Groceries",
                "content": "Milk, eggs, bread",
                "variant": "default",
            }
        }
    )

    title: str = Field(..., description="Short title of the note", min_length=1)
    content: str = Field(..., description="Body text of the note", min_length=1)
    variant: NoteVariant = Field(
        default=NoteVariant.DEFAULT,
        description="'default' or 'confirm_before_edit'",
    )

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str, info: ValidationInfo) -> str:
        """
        Reject blank values; the stored text is kept as sent.
        """
        return _non_blank(info.field_name, v)  # type: ignore[return-value]


# PUBLIC_INTERFACE
class NotePatch(BaseModel):
    """
    Schema for editing an existing note.
    Both fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Groceries and supplies",
                "content": "Milk, eggs, bread, and paper towels",
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title of the note", min_length=1)
    content: Optional[str] = Field(default=None, description="Body text of the note", min_length=1)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return _non_blank(info.field_name, v)

    def to_update(self) -> NoteUpdate:
        return NoteUpdate(title=self.title, content=self.content)


# PUBLIC_INTERFACE
class CompletionIn(BaseModel):
    """Schema for setting the completion flag explicitly."""

    completed: bool = Field(..., description="New completion status")


# PUBLIC_INTERFACE
class NoteOut(BaseModel):
    """
    Schema returned by the API for a note. Also the serialized shape of a
    note: timestamps are absolute instants and the id is opaque.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 3,
                "title": "Groceries",
                "content": "Milk, eggs, bread",
                "is_completed": False,
                "variant": "default",
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the note")
    title: str = Field(..., description="Short title of the note")
    content: str = Field(..., description="Body text of the note")
    is_completed: bool = Field(..., description="Completion status flag")
    variant: NoteVariant = Field(..., description="Note variant")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last edit timestamp (UTC)")


# PUBLIC_INTERFACE
class NoteStats(BaseModel):
    """Aggregate counts for the note list."""

    total: int = Field(..., description="Number of notes in the list")
    uncompleted: int = Field(..., description="Number of notes not yet completed")


class PaginationEnvelope(BaseModel):
    """
    Envelope for paginated list responses.
    """
    items: List[NoteOut] = Field(..., description="Notes on this page")
    total: int = Field(..., description="Total number of notes matching the query")
    limit: int = Field(..., description="Limit applied to the query")
    offset: int = Field(..., description="Offset applied to the query")
