"""
Voice Activity Detection (VAD)

Energy-based speech detection, used to short-circuit silent clips before
they reach the transcription service.
"""

from dataclasses import dataclass

import numpy as np

from dental_voice_chart.capture.audio_utils import AudioSegment


@dataclass
class VADConfig:
    """Configuration for voice activity detection."""

    energy_threshold: float = 0.01
    frame_duration_ms: int = 30
    # Total voiced time needed before a clip counts as speech
    min_speech_duration_ms: float = 150


class VoiceActivityDetector:
    """Detects voice activity in captured clips."""

    def __init__(self, config: VADConfig | None = None):
        """Initialize VAD with configuration."""
        self.config = config or VADConfig()

    def frame_energies(self, segment: AudioSegment) -> np.ndarray:
        """RMS energy of each fixed-length frame."""
        frame_samples = int(segment.sample_rate * self.config.frame_duration_ms / 1000)
        if frame_samples <= 0 or len(segment.data) < frame_samples:
            if segment.is_empty:
                return np.array([], dtype=np.float32)
            return np.array([np.sqrt(np.mean(segment.data**2))], dtype=np.float32)

        frame_count = len(segment.data) // frame_samples
        frames = segment.data[: frame_count * frame_samples].reshape(
            frame_count, frame_samples
        )
        return np.sqrt(np.mean(frames**2, axis=1))

    def speech_duration_ms(self, segment: AudioSegment) -> float:
        """Total duration of frames above the energy threshold."""
        energies = self.frame_energies(segment)
        voiced = int(np.count_nonzero(energies > self.config.energy_threshold))
        return voiced * self.config.frame_duration_ms

    def contains_speech(self, segment: AudioSegment) -> bool:
        """Whether the clip holds enough voiced audio to be worth transcribing."""
        if segment.is_empty:
            return False
        return self.speech_duration_ms(segment) >= self.config.min_speech_duration_ms
