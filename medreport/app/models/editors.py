"""Form editor descriptors and the change events they emit."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Union

from pydantic import BaseModel, Field


class EditorKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX_GROUP = "checkbox_group"


class FieldEditor(BaseModel):
    """Presentation control bound to exactly one report field."""

    field: str
    label: str
    kind: EditorKind = EditorKind.TEXT
    options: List[str] = Field(default_factory=list)
    rows: int = 3


class FieldChange(BaseModel):
    """Replace the whole value of a field."""

    kind: Literal["set"] = "set"
    field: str
    value: Union[str, List[str]]


class MemberToggle(BaseModel):
    """Add or remove one member of a multi-value field."""

    kind: Literal["toggle"] = "toggle"
    field: str
    member: str
    present: bool


# The literal "kind" tags keep the two events apart during validation.
ChangeEvent = Union[FieldChange, MemberToggle]
