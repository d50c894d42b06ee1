"""Domain exceptions raised by the report services."""

from __future__ import annotations

from typing import Sequence


class ReportError(RuntimeError):
    """Base class for report generator errors."""


class UnknownField(ReportError, KeyError):
    """Raised when a field name is not part of the report schema."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unknown report field '{field}'")

    def __str__(self) -> str:
        return self.args[0]


class MissingRequiredField(ReportError):
    """Raised by the export guard when mandatory fields are empty."""

    def __init__(self, fields: Sequence[str]):
        self.fields = tuple(fields)
        super().__init__(f"Missing required field(s): {', '.join(self.fields)}")


class MissingRenderTarget(ReportError):
    """Raised when an export is requested before the report was rendered."""


class CaptureOrEncodeFailure(ReportError):
    """Raised when rasterizing or PDF encoding fails or times out."""


class SessionNotFound(ReportError, KeyError):
    """Raised when a session id is unknown to the session store."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Report session '{session_id}' not found")

    def __str__(self) -> str:
        return self.args[0]
