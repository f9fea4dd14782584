"""
Chart Stores

Persistence backends for chart documents. A store reads and writes whole
documents by patient id; the last write wins.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
import json
import os
import re
import tempfile
import threading

from dental_voice_chart.errors import ChartPersistenceError

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class ChartStore(ABC):
    """Whole-document chart persistence."""

    @abstractmethod
    def load(self, patient_id: str) -> dict[str, Any] | None:
        """Read the chart document, or None when the patient has none."""

    @abstractmethod
    def save(self, patient_id: str, document: dict[str, Any]) -> None:
        """Write (replace) the chart document."""


def _encode(document: dict[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, sort_keys=True, indent=2)


class InMemoryChartStore(ChartStore):
    """Process-local store; documents are kept serialized."""

    def __init__(self) -> None:
        self._documents: dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, patient_id: str) -> dict[str, Any] | None:
        with self._lock:
            raw = self._documents.get(patient_id)
        return json.loads(raw) if raw is not None else None

    def save(self, patient_id: str, document: dict[str, Any]) -> None:
        try:
            raw = _encode(document)
        except (TypeError, ValueError) as e:
            raise ChartPersistenceError(f"Chart document is not serializable: {e}") from e
        with self._lock:
            self._documents[patient_id] = raw

    def raw(self, patient_id: str) -> str | None:
        """Serialized document exactly as stored."""
        with self._lock:
            return self._documents.get(patient_id)


class JsonFileChartStore(ChartStore):
    """One JSON file per patient under a directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, patient_id: str) -> Path:
        if not _SAFE_ID.match(patient_id):
            raise ChartPersistenceError(f"Invalid patient id: {patient_id!r}")
        return self.directory / f"{patient_id}.json"

    def load(self, patient_id: str) -> dict[str, Any] | None:
        path = self.path_for(patient_id)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ChartPersistenceError(f"Could not read chart {path}: {e}") from e

    def save(self, patient_id: str, document: dict[str, Any]) -> None:
        path = self.path_for(patient_id)
        try:
            content = _encode(document)
        except (TypeError, ValueError) as e:
            raise ChartPersistenceError(f"Chart document is not serializable: {e}") from e

        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Unique temp file per write
            fd, tmp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{patient_id}_", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ChartPersistenceError(f"Could not write chart {path}: {e}") from e
