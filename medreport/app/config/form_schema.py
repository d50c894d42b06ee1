"""Ordered editor layout of the report form."""

from __future__ import annotations

from typing import List

from ..models.editors import EditorKind, FieldEditor
from ..models.report import CHRONIC_ILLNESS_OPTIONS, Sex

FORM_EDITORS: List[FieldEditor] = [
    FieldEditor(field="hospital", label="Hospital / Clinic"),
    FieldEditor(field="address", label="Address"),
    FieldEditor(field="phone", label="Phone"),
    FieldEditor(field="patient_name", label="Patient name"),
    FieldEditor(field="patient_id", label="Patient ID"),
    FieldEditor(field="dob", label="Date of birth", kind=EditorKind.DATE),
    FieldEditor(
        field="sex",
        label="Sex",
        kind=EditorKind.SELECT,
        options=[option.value for option in Sex],
    ),
    FieldEditor(field="report_date", label="Report date", kind=EditorKind.DATE),
    FieldEditor(field="referring", label="Referring physician"),
    FieldEditor(field="chief", label="Chief complaint", kind=EditorKind.TEXTAREA),
    FieldEditor(
        field="history", label="History of present illness", kind=EditorKind.TEXTAREA
    ),
    FieldEditor(field="pmh", label="Past medical history", kind=EditorKind.TEXTAREA),
    FieldEditor(
        field="chronic_illnesses",
        label="Chronic illnesses",
        kind=EditorKind.CHECKBOX_GROUP,
        options=list(CHRONIC_ILLNESS_OPTIONS),
    ),
    FieldEditor(field="meds", label="Medications", kind=EditorKind.TEXTAREA),
    FieldEditor(field="allergies", label="Allergies", kind=EditorKind.TEXTAREA, rows=2),
    FieldEditor(field="exam", label="Examination", kind=EditorKind.TEXTAREA),
    FieldEditor(field="investigations", label="Investigations", kind=EditorKind.TEXTAREA),
    FieldEditor(
        field="impression", label="Assessment / Impression", kind=EditorKind.TEXTAREA
    ),
    FieldEditor(field="plan", label="Plan / Treatment", kind=EditorKind.TEXTAREA),
    FieldEditor(field="disclaimer", label="Disclaimer", kind=EditorKind.TEXTAREA, rows=2),
]
