"""Pure update operations on :class:`ReportFields`.

Every function returns a new model and leaves its input untouched. Content is
never validated here; any string, including the empty string, is accepted.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from ..config.report_defaults import get_report_defaults
from ..exceptions import UnknownField
from ..models.editors import FieldChange, MemberToggle
from ..models.report import FIELD_NAMES, MULTI_VALUE_FIELDS, FieldValue, ReportFields


def _require_known(field: str) -> None:
    if field not in FIELD_NAMES:
        raise UnknownField(field)


def _require_multi_value(field: str) -> None:
    _require_known(field)
    if field not in MULTI_VALUE_FIELDS:
        raise TypeError(f"Field '{field}' does not hold multiple values")


def get_field(fields: ReportFields, field: str) -> FieldValue:
    """Return the current value of ``field``."""

    _require_known(field)
    return getattr(fields, field)


def set_field(fields: ReportFields, field: str, value: FieldValue) -> ReportFields:
    """Return a copy of ``fields`` with ``field`` replaced by ``value``."""

    _require_known(field)
    if field in MULTI_VALUE_FIELDS:
        if isinstance(value, str):
            raise TypeError(f"Field '{field}' expects a list of strings")
        # Tag sets keep the first occurrence of each member.
        value = list(dict.fromkeys(value))
    elif not isinstance(value, str):
        raise TypeError(f"Field '{field}' expects a string")
    return fields.model_copy(update={field: value})


def toggle_set_member(
    fields: ReportFields, field: str, member: str, present: bool
) -> ReportFields:
    """Add ``member`` to a multi-value field when ``present``, else remove it.

    Applying the same toggle twice has the same effect as applying it once.
    """

    _require_multi_value(field)
    current: List[str] = getattr(fields, field)
    if present:
        if member in current:
            return fields
        updated = [*current, member]
    else:
        if member not in current:
            return fields
        updated = [item for item in current if item != member]
    return fields.model_copy(update={field: updated})


def apply_change(fields: ReportFields, change: FieldChange | MemberToggle) -> ReportFields:
    """Apply one change event emitted by a form editor."""

    if isinstance(change, MemberToggle):
        return toggle_set_member(fields, change.field, change.member, change.present)
    return set_field(fields, change.field, change.value)


def sample_fields(today: Optional[date] = None) -> ReportFields:
    """Sample values a new session starts with."""

    defaults = get_report_defaults()
    if defaults.report_date:
        return defaults
    today = today or date.today()
    return defaults.model_copy(update={"report_date": today.isoformat()})
