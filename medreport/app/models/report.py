"""Pydantic models for the medical report field set."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Bumped whenever fields are added, renamed or removed.
SCHEMA_VERSION = 3

FieldValue = Union[str, List[str]]


class FieldGroup(str, Enum):
    """Field groups used by the preview's default-text policy."""

    IDENTITY = "identity"
    NARRATIVE = "narrative"
    LIST = "list"


class Sex(str, Enum):
    """Options offered by the sex selector."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


CHRONIC_ILLNESS_OPTIONS: List[str] = [
    "Hypertension",
    "Diabetes",
    "Asthma",
    "COPD",
    "Heart disease",
    "Chronic kidney disease",
    "Thyroid disorder",
]


class ReportFields(BaseModel):
    """All user-entered values of one report.

    Instances are immutable; every edit produces a new instance through
    :mod:`medreport.app.services.field_model`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Hospital identity
    hospital: str = ""
    address: str = ""
    phone: str = ""

    # Patient identity
    patient_name: str = ""
    patient_id: str = ""
    dob: str = ""
    sex: str = ""
    report_date: str = ""
    referring: str = ""

    # Clinical sections
    chief: str = ""
    history: str = ""
    pmh: str = ""
    chronic_illnesses: List[str] = Field(default_factory=list)
    meds: str = ""
    allergies: str = ""
    exam: str = ""
    investigations: str = ""
    impression: str = ""
    plan: str = ""

    disclaimer: str = ""

    @field_validator("chronic_illnesses", mode="before")
    @classmethod
    def ensure_list(cls, value: FieldValue | None) -> List[str]:
        """Convert comma separated strings to a list of tags."""

        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return list(value)


FIELD_GROUPS: Dict[str, FieldGroup] = {
    "hospital": FieldGroup.IDENTITY,
    "address": FieldGroup.IDENTITY,
    "phone": FieldGroup.IDENTITY,
    "patient_name": FieldGroup.IDENTITY,
    "patient_id": FieldGroup.IDENTITY,
    "dob": FieldGroup.IDENTITY,
    "sex": FieldGroup.IDENTITY,
    "report_date": FieldGroup.IDENTITY,
    "referring": FieldGroup.IDENTITY,
    "chief": FieldGroup.NARRATIVE,
    "history": FieldGroup.NARRATIVE,
    "pmh": FieldGroup.LIST,
    "chronic_illnesses": FieldGroup.LIST,
    "meds": FieldGroup.LIST,
    "allergies": FieldGroup.LIST,
    "exam": FieldGroup.NARRATIVE,
    "investigations": FieldGroup.NARRATIVE,
    "impression": FieldGroup.NARRATIVE,
    "plan": FieldGroup.NARRATIVE,
    # Provenance line in the footer; left blank when unset.
    "disclaimer": FieldGroup.IDENTITY,
}

FIELD_NAMES = tuple(ReportFields.model_fields)
MULTI_VALUE_FIELDS = frozenset({"chronic_illnesses"})
REQUIRED_FIELDS = ("patient_name", "patient_id")


class ReportSessionSnapshot(BaseModel):
    """Response body describing one editing session."""

    session_id: str
    schema_version: int = SCHEMA_VERSION
    fields: ReportFields
    export_state: str
