"""Write exported reports to disk without leaving partial files behind."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

from ...utils.logging import get_logger

logger = get_logger(__name__)


class FileSaver(Protocol):
    def save(self, filename: str, payload: bytes) -> Path:
        ...


class LocalFileSaver:
    """Store files under ``export_dir``; a file appears only once complete."""

    def __init__(self, export_dir: str | Path):
        self.export_dir = Path(export_dir)

    def save(self, filename: str, payload: bytes) -> Path:
        if Path(filename).name != filename:
            raise ValueError(f"Refusing to save outside the export directory: {filename!r}")

        self.export_dir.mkdir(parents=True, exist_ok=True)
        target = self.export_dir / filename

        fd, tmp_name = tempfile.mkstemp(dir=self.export_dir, prefix=".", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            "Stored exported report",
            extra={"extra_fields": {"path": str(target), "size": len(payload)}},
        )
        return target
