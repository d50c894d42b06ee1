"""Configuration defaults for the sample report shown at session start."""

from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings

from ..models.report import ReportFields


class ReportDefaultsSettings(BaseSettings):
    """Environment-backed sample values (``REPORT_<FIELD>``)."""

    hospital: str = "Greenfield General Hospital (SAMPLE)"
    address: str = "123 Clinic Road, Dhaka (SAMPLE)"
    phone: str = "+880-1XX-XXXXXXX (SAMPLE)"
    patient_name: str = "Mohammad Rahim (SAMPLE)"
    patient_id: str = "SAMP-000123"
    dob: str = "1990-05-12"
    sex: str = "Male"
    # Empty means "the day the session starts".
    report_date: str = ""
    referring: str = "Dr. Ayesha Khan (SAMPLE)"
    chief: str = "Fever and sore throat for 3 days. Mild productive cough."
    history: str = (
        "Patient reports onset of fever (max 38.7°C) three days prior, with sore "
        "throat, nasal congestion, and intermittent dry cough."
    )
    pmh: str = "Hypertension — diagnosed 2018 (on medication)."
    chronic_illnesses: List[str] = Field(default_factory=lambda: ["Hypertension"])
    meds: str = "Amlodipine 5 mg once daily (SAMPLE)."
    allergies: str = "No known drug allergies (SAMPLE)."
    exam: str = "Temp 38.2°C; Pulse 88 bpm; Respiratory 18/min; BP 128/78 mmHg."
    investigations: str = (
        "CBC: WBC 9.8 x10⁹/L; CRP 12 mg/L; Chest X-ray: No focal consolidation (SAMPLE)."
    )
    impression: str = "Acute pharyngitis, likely viral."
    plan: str = "Symptomatic care, paracetamol 500 mg prn; follow up in 3–5 days."
    disclaimer: str = (
        "SAMPLE — NOT A REAL MEDICAL REPORT — FOR TRAINING / DEMO PURPOSES ONLY"
    )

    class Config:
        env_prefix = "REPORT_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


@lru_cache(maxsize=1)
def get_report_defaults() -> ReportFields:
    """Return cached sample values as an immutable field model."""

    settings = ReportDefaultsSettings()
    return ReportFields(**settings.model_dump())

