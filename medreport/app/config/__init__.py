"""Configuration modules for medreport."""

from medreport.app.config.form_schema import FORM_EDITORS
from medreport.app.config.report_defaults import (
    ReportDefaultsSettings,
    get_report_defaults,
)

__all__ = [
    "FORM_EDITORS",
    "ReportDefaultsSettings",
    "get_report_defaults",
]
