"""
Chart Data Types

Data models for a patient's dental chart.
"""

from dataclasses import dataclass, field
from typing import Any
import json

from dental_voice_chart.extraction.chart_types import tooth_sort_key

StatusValue = str | bool


@dataclass
class ToothEntry:
    """Status findings and completed procedures for one tooth position."""

    tooth_id: str
    statuses: dict[str, StatusValue] = field(default_factory=dict)
    procedures: dict[str, bool] = field(default_factory=dict)

    @property
    def completed_procedures(self) -> list[str]:
        """Codes of procedures marked completed."""
        return [code for code, done in self.procedures.items() if done]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.tooth_id,
            "statuses": dict(self.statuses),
            "procedures": dict(self.procedures),
        }

    @classmethod
    def from_dict(cls, tooth_id: str, data: dict[str, Any]) -> "ToothEntry":
        """Create from dictionary."""
        return cls(
            tooth_id=data.get("id", tooth_id),
            statuses=dict(data.get("statuses") or {}),
            procedures=dict(data.get("procedures") or {}),
        )


@dataclass
class PatientChart:
    """A patient's dental chart document."""

    patient_id: str
    teeth: dict[str, ToothEntry] = field(default_factory=dict)
    findings: str = ""
    updated_at: str | None = None

    def tooth(self, tooth_id: str) -> ToothEntry | None:
        """Get the entry for a tooth, if recorded."""
        return self.teeth.get(tooth_id)

    def ensure_tooth(self, tooth_id: str) -> ToothEntry:
        """Get the entry for a tooth, creating it if absent."""
        entry = self.teeth.get(tooth_id)
        if entry is None:
            entry = ToothEntry(tooth_id=tooth_id)
            self.teeth[tooth_id] = entry
        return entry

    def sorted_teeth(self) -> list[ToothEntry]:
        """Entries in tooth-number order, whole-mouth last."""
        return [self.teeth[k] for k in sorted(self.teeth, key=tooth_sort_key)]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible document."""
        return {
            "patientId": self.patient_id,
            "dentalData": {tid: entry.to_dict() for tid, entry in self.teeth.items()},
            "detailedFindings": self.findings,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PatientChart":
        """Create from a stored document."""
        teeth = {
            tid: ToothEntry.from_dict(tid, entry)
            for tid, entry in (data.get("dentalData") or {}).items()
        }
        return cls(
            patient_id=data["patientId"],
            teeth=teeth,
            findings=data.get("detailedFindings") or "",
            updated_at=data.get("updatedAt"),
        )

    def to_json(self, indent: int | None = 2) -> str:
        """Deterministic JSON serialization."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, sort_keys=True)
