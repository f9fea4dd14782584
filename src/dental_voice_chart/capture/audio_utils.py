"""
Audio Utilities

Data types and utility functions for audio processing.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
import io

import numpy as np

from dental_voice_chart.errors import TranscriptionError


class AudioCodec(str, Enum):
    """Encodings understood by the transcription service."""

    LINEAR16 = "LINEAR16"
    WEBM_OPUS = "WEBM_OPUS"
    OGG_OPUS = "OGG_OPUS"
    FLAC = "FLAC"


@dataclass
class AudioEncoding:
    """Encoding descriptor sent alongside an audio clip."""

    codec: AudioCodec = AudioCodec.LINEAR16
    sample_rate_hz: int = 16000
    language_code: str = "ko-KR"


@dataclass
class EncodedAudio:
    """An already-encoded clip (e.g. Opus-in-WebM uploaded by a browser)."""

    content: bytes
    encoding: AudioEncoding = field(default_factory=AudioEncoding)

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass
class AudioChunk:
    """A chunk of audio data delivered by the input stream."""

    data: np.ndarray
    sample_rate: int
    timestamp_ms: float
    sequence_number: int = 0

    @property
    def duration_ms(self) -> float:
        """Duration of this chunk in milliseconds."""
        return (len(self.data) / self.sample_rate) * 1000


@dataclass
class AudioSegment:
    """A complete audio clip (one dictated command)."""

    data: np.ndarray
    sample_rate: int
    channels: int = 1
    metadata: dict = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Duration in seconds."""
        return len(self.data) / self.sample_rate

    @property
    def duration_ms(self) -> float:
        """Duration in milliseconds."""
        return self.duration_seconds * 1000

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0

    @classmethod
    def from_chunks(
        cls, chunks: list[AudioChunk], sample_rate: int, channels: int = 1
    ) -> "AudioSegment":
        """Concatenate captured chunks into one segment."""
        if chunks:
            data = np.concatenate([c.data for c in chunks])
        else:
            data = np.array([], dtype=np.float32)
        return cls(data=data, sample_rate=sample_rate, channels=channels)

    @classmethod
    def from_file(cls, filepath: str | Path) -> "AudioSegment":
        """Load audio segment from file."""
        import soundfile as sf

        data, sample_rate = sf.read(filepath, dtype="float32")

        # Convert stereo to mono if needed
        if len(data.shape) > 1:
            data = np.mean(data, axis=1)

        return cls(
            data=data,
            sample_rate=sample_rate,
            channels=1,
            metadata={"source_file": str(filepath)},
        )

    @classmethod
    def from_bytes(cls, audio_bytes: bytes) -> "AudioSegment":
        """Decode audio segment from bytes in any format libsndfile reads."""
        import soundfile as sf

        with io.BytesIO(audio_bytes) as buffer:
            data, sr = sf.read(buffer, dtype="float32")

        if len(data.shape) > 1:
            data = np.mean(data, axis=1)

        return cls(data=data, sample_rate=sr, channels=1)

    def to_bytes(self, format: str = "wav", subtype: str | None = "PCM_16") -> bytes:
        """Export audio segment to bytes."""
        import soundfile as sf

        buffer = io.BytesIO()
        sf.write(buffer, self.data, self.sample_rate, format=format, subtype=subtype)
        buffer.seek(0)
        return buffer.read()

    def to_file(self, filepath: str | Path, format: str = "wav") -> None:
        """Save audio segment to file."""
        import soundfile as sf

        sf.write(filepath, self.data, self.sample_rate, format=format)

    def encode(self, language_code: str = "ko-KR") -> EncodedAudio:
        """Encode as 16-bit PCM WAV for the transcription service."""
        return EncodedAudio(
            content=self.to_bytes(format="wav", subtype="PCM_16"),
            encoding=AudioEncoding(
                codec=AudioCodec.LINEAR16,
                sample_rate_hz=self.sample_rate,
                language_code=language_code,
            ),
        )

    def resample(self, target_sample_rate: int) -> "AudioSegment":
        """Resample audio to target sample rate."""
        if self.sample_rate == target_sample_rate:
            return self

        from scipy import signal

        num_samples = int(len(self.data) * target_sample_rate / self.sample_rate)
        resampled = signal.resample(self.data, num_samples)

        return AudioSegment(
            data=resampled.astype(np.float32),
            sample_rate=target_sample_rate,
            channels=self.channels,
            metadata={**self.metadata, "resampled_from": self.sample_rate},
        )


# Browser recordings arrive as Opus; libsndfile decodes the rest
OPUS_SUFFIXES = {
    ".webm": AudioCodec.WEBM_OPUS,
    ".ogg": AudioCodec.OGG_OPUS,
    ".opus": AudioCodec.OGG_OPUS,
}
OPUS_SAMPLE_RATE = 48000


def load_audio(
    content: bytes, filename: str | None = None, language_code: str = "ko-KR"
) -> AudioSegment | EncodedAudio:
    """Turn a recorded clip into something the transcriber accepts.

    Opus clips are passed through still encoded; anything else is decoded
    with soundfile.

    Raises:
        TranscriptionError: the clip could not be decoded.
    """
    suffix = Path(filename).suffix.lower() if filename else ".wav"
    if suffix in OPUS_SUFFIXES:
        return EncodedAudio(
            content=content,
            encoding=AudioEncoding(
                codec=OPUS_SUFFIXES[suffix],
                sample_rate_hz=OPUS_SAMPLE_RATE,
                language_code=language_code,
            ),
        )
    try:
        return AudioSegment.from_bytes(content)
    except (RuntimeError, TypeError, ValueError) as e:
        raise TranscriptionError(
            f"Could not decode audio {filename or '<bytes>'}: {e}",
            user_message="지원하지 않는 오디오 형식입니다.",
        ) from e


def generate_tone(
    frequency_hz: float,
    duration_ms: float = 120.0,
    sample_rate: int = 16000,
    amplitude: float = 0.2,
) -> np.ndarray:
    """Generate a short sine beep with 10 ms fade in/out."""
    samples = int(sample_rate * duration_ms / 1000)
    t = np.arange(samples) / sample_rate
    tone = amplitude * np.sin(2 * np.pi * frequency_hz * t)

    fade = min(int(sample_rate * 0.01), samples // 2)
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade)
        tone[:fade] *= ramp
        tone[-fade:] *= ramp[::-1]

    return tone.astype(np.float32)
