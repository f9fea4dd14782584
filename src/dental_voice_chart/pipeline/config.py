"""
Pipeline Configuration

Configuration management for the voice-to-chart pipeline.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
import os

import yaml

from dental_voice_chart.extraction.prompts import PROMPT_VERSION


@dataclass
class CaptureConfig:
    """Audio capture configuration."""

    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: int = 100
    device: int | str | None = None
    feedback_tones: bool = True


@dataclass
class TranscriptionConfig:
    """Transcription configuration."""

    api_url: str = "https://speech.googleapis.com/v1/speech:recognize"
    language_code: str = "ko-KR"
    sample_rate_hz: int = 16000
    model: str | None = None
    use_phrase_hints: bool = True
    skip_silence: bool = True
    vad_energy_threshold: float = 0.01
    timeout_seconds: float = 30.0


@dataclass
class ExtractionConfig:
    """Extraction configuration."""

    api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    model_id: str = "gemini-1.5-flash"
    prompt_version: str = PROMPT_VERSION
    max_tokens: int = 1024
    temperature: float = 0.1
    timeout_seconds: float = 30.0


@dataclass
class ConfirmationConfig:
    """Spoken confirmation configuration."""

    enabled: bool = True
    announce_failures: bool = True
    api_url: str = "https://api.openai.com/v1/audio/speech"
    model_id: str = "tts-1"
    voice: str = "shimmer"
    timeout_seconds: float = 15.0


@dataclass
class StorageConfig:
    """Chart storage configuration."""

    backend: str = "json"  # json, memory
    directory: str = "charts"


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""

    name: str = "dental-voice-chart"
    version: str = "0.1.0"

    capture: CaptureConfig = field(default_factory=CaptureConfig)
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    confirmation: ConfirmationConfig = field(default_factory=ConfirmationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # API credentials (from environment if not set)
    google_api_key: str | None = None
    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    def resolve_credentials(self) -> None:
        """Fill unset credentials from the environment."""
        self.google_api_key = self.google_api_key or os.environ.get("GOOGLE_API_KEY")
        self.gemini_api_key = self.gemini_api_key or os.environ.get("GEMINI_API_KEY")
        self.openai_api_key = self.openai_api_key or os.environ.get("OPENAI_API_KEY")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PipelineConfig":
        """Create config from dictionary."""
        config = cls()
        data = data or {}

        if "name" in data:
            config.name = data["name"]
        if "version" in data:
            config.version = data["version"]
        for key in ("google_api_key", "gemini_api_key", "openai_api_key"):
            if key in data:
                setattr(config, key, data[key])

        # Capture config
        if "capture" in data:
            cap = data["capture"] or {}
            config.capture = CaptureConfig(
                sample_rate=cap.get("sample_rate", 16000),
                channels=cap.get("channels", 1),
                chunk_duration_ms=cap.get("chunk_duration_ms", 100),
                device=cap.get("device"),
                feedback_tones=cap.get("feedback_tones", True),
            )

        # Transcription config
        if "transcription" in data:
            trans = data["transcription"] or {}
            defaults = TranscriptionConfig()
            config.transcription = TranscriptionConfig(
                api_url=trans.get("api_url", defaults.api_url),
                language_code=trans.get("language_code", "ko-KR"),
                sample_rate_hz=trans.get("sample_rate_hz", 16000),
                model=trans.get("model"),
                use_phrase_hints=trans.get("use_phrase_hints", True),
                skip_silence=trans.get("skip_silence", True),
                vad_energy_threshold=trans.get("vad_energy_threshold", 0.01),
                timeout_seconds=trans.get("timeout_seconds", 30.0),
            )

        # Extraction config
        if "extraction" in data:
            ext = data["extraction"] or {}
            defaults = ExtractionConfig()
            config.extraction = ExtractionConfig(
                api_url=ext.get("api_url", defaults.api_url),
                model_id=ext.get("model_id", "gemini-1.5-flash"),
                prompt_version=ext.get("prompt_version", PROMPT_VERSION),
                max_tokens=ext.get("max_tokens", 1024),
                temperature=ext.get("temperature", 0.1),
                timeout_seconds=ext.get("timeout_seconds", 30.0),
            )

        # Confirmation config
        if "confirmation" in data:
            conf = data["confirmation"] or {}
            defaults = ConfirmationConfig()
            config.confirmation = ConfirmationConfig(
                enabled=conf.get("enabled", True),
                announce_failures=conf.get("announce_failures", True),
                api_url=conf.get("api_url", defaults.api_url),
                model_id=conf.get("model_id", "tts-1"),
                voice=conf.get("voice", "shimmer"),
                timeout_seconds=conf.get("timeout_seconds", 15.0),
            )

        # Storage config
        if "storage" in data:
            store = data["storage"] or {}
            config.storage = StorageConfig(
                backend=store.get("backend", "json"),
                directory=store.get("directory", "charts"),
            )

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (credentials omitted)."""
        return {
            "name": self.name,
            "version": self.version,
            "capture": {
                "sample_rate": self.capture.sample_rate,
                "channels": self.capture.channels,
                "chunk_duration_ms": self.capture.chunk_duration_ms,
                "device": self.capture.device,
                "feedback_tones": self.capture.feedback_tones,
            },
            "transcription": {
                "api_url": self.transcription.api_url,
                "language_code": self.transcription.language_code,
                "sample_rate_hz": self.transcription.sample_rate_hz,
                "model": self.transcription.model,
                "use_phrase_hints": self.transcription.use_phrase_hints,
                "skip_silence": self.transcription.skip_silence,
                "vad_energy_threshold": self.transcription.vad_energy_threshold,
                "timeout_seconds": self.transcription.timeout_seconds,
            },
            "extraction": {
                "api_url": self.extraction.api_url,
                "model_id": self.extraction.model_id,
                "prompt_version": self.extraction.prompt_version,
                "max_tokens": self.extraction.max_tokens,
                "temperature": self.extraction.temperature,
                "timeout_seconds": self.extraction.timeout_seconds,
            },
            "confirmation": {
                "enabled": self.confirmation.enabled,
                "announce_failures": self.confirmation.announce_failures,
                "api_url": self.confirmation.api_url,
                "model_id": self.confirmation.model_id,
                "voice": self.confirmation.voice,
                "timeout_seconds": self.confirmation.timeout_seconds,
            },
            "storage": {
                "backend": self.storage.backend,
                "directory": self.storage.directory,
            },
        }


def load_config(config_path: str | Path) -> PipelineConfig:
    """Load configuration from YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return PipelineConfig.from_dict(data or {})
