"""
Transcript Data Types

Data models for transcription results.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class TranscriptAlternative:
    """Best recognition hypothesis for one result block."""

    text: str
    confidence: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"text": self.text, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptAlternative":
        """Create from dictionary."""
        return cls(text=data["text"], confidence=data.get("confidence", 1.0))


@dataclass
class Transcript:
    """Complete transcription result."""

    text: str
    alternatives: list[TranscriptAlternative] = field(default_factory=list)
    language: str = "ko-KR"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when no speech was recognized."""
        return not self.text.strip()

    @property
    def confidence(self) -> float:
        """Mean confidence across result blocks (1.0 when unknown)."""
        if not self.alternatives:
            return 1.0
        return sum(a.confidence for a in self.alternatives) / len(self.alternatives)

    @classmethod
    def empty(cls, language: str = "ko-KR", **metadata: Any) -> "Transcript":
        """Transcript for a clip with no detected speech."""
        return cls(text="", language=language, metadata=dict(metadata))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "text": self.text,
            "alternatives": [a.to_dict() for a in self.alternatives],
            "language": self.language,
            "confidence": self.confidence,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transcript":
        """Create from dictionary."""
        alternatives = [
            TranscriptAlternative.from_dict(a) for a in data.get("alternatives", [])
        ]
        return cls(
            text=data["text"],
            alternatives=alternatives,
            language=data.get("language", "ko-KR"),
            metadata=data.get("metadata", {}),
        )
