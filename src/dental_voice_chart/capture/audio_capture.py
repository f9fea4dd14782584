"""
Audio Capture

Press-to-record microphone capture with audible start/stop feedback.
"""

from dataclasses import dataclass
import logging

import numpy as np

from dental_voice_chart.capture.audio_utils import AudioChunk, AudioSegment, generate_tone
from dental_voice_chart.errors import (
    DeviceUnavailableError,
    MicrophoneError,
    MicrophonePermissionError,
)

logger = logging.getLogger(__name__)

_PERMISSION_MARKERS = ("permission", "denied", "not authorized", "not permitted")


def _load_sounddevice():
    """Import sounddevice lazily; PortAudio is only needed when recording."""
    import sounddevice as sd

    return sd


@dataclass
class CaptureConfig:
    """Configuration for audio capture."""

    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: int = 100
    dtype: str = "float32"
    device: int | str | None = None  # None = default device

    # Feedback tones
    feedback_tones: bool = True
    start_tone_hz: float = 880.0
    stop_tone_hz: float = 660.0
    tone_duration_ms: float = 120.0

    @property
    def chunk_samples(self) -> int:
        """Number of samples per chunk."""
        return int(self.sample_rate * self.chunk_duration_ms / 1000)


def classify_device_error(error: Exception) -> MicrophoneError:
    """Map a low-level audio error to permission-denied or device-unavailable."""
    if isinstance(error, PermissionError):
        return MicrophonePermissionError(str(error))

    message = str(error).lower()
    if any(marker in message for marker in _PERMISSION_MARKERS):
        return MicrophonePermissionError(str(error))
    return DeviceUnavailableError(str(error))


class AudioCapture:
    """Microphone capture driven by explicit start/stop actions."""

    def __init__(self, config: CaptureConfig | None = None):
        """Initialize audio capture."""
        self.config = config or CaptureConfig()
        self._stream = None
        self._is_capturing = False
        self._recorded_chunks: list[AudioChunk] = []
        self._sequence_number = 0

    @property
    def is_capturing(self) -> bool:
        return self._is_capturing

    def _audio_callback(
        self, indata: np.ndarray, frames: int, time_info, status
    ) -> None:
        """Callback for audio stream."""
        if status:
            logger.warning("[Capture] Stream status: %s", status)

        # Convert to mono if needed
        if len(indata.shape) > 1 and indata.shape[1] > 1:
            data = np.mean(indata, axis=1)
        else:
            data = indata.flatten()

        chunk = AudioChunk(
            data=data.astype(np.float32),
            sample_rate=self.config.sample_rate,
            timestamp_ms=self._sequence_number * self.config.chunk_duration_ms,
            sequence_number=self._sequence_number,
        )
        self._sequence_number += 1
        self._recorded_chunks.append(chunk)

    def _play_tone(self, frequency_hz: float) -> None:
        """Play a feedback beep without blocking; failures are only logged."""
        if not self.config.feedback_tones:
            return
        try:
            sd = _load_sounddevice()
            tone = generate_tone(
                frequency_hz,
                duration_ms=self.config.tone_duration_ms,
                sample_rate=self.config.sample_rate,
            )
            sd.play(tone, self.config.sample_rate, blocking=False)
        except Exception as e:
            logger.warning("[Capture] Feedback tone failed: %s", e)

    def start(self) -> None:
        """Start buffering microphone input.

        Raises:
            MicrophonePermissionError: access to the microphone was denied.
            DeviceUnavailableError: no input device could be opened.
        """
        if self._is_capturing:
            return

        try:
            sd = _load_sounddevice()
        except OSError as e:
            # PortAudio library missing
            raise DeviceUnavailableError(f"Audio backend unavailable: {e}") from e

        self._sequence_number = 0
        self._recorded_chunks = []

        try:
            self._stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype=self.config.dtype,
                blocksize=self.config.chunk_samples,
                device=self.config.device,
                callback=self._audio_callback,
            )
            self._stream.start()
        except (sd.PortAudioError, OSError, ValueError) as e:
            self._stream = None
            error = classify_device_error(e)
            logger.error("[Capture] Could not open input device: %s", e)
            raise error from e

        self._is_capturing = True
        logger.debug("[Capture] Recording started")
        self._play_tone(self.config.start_tone_hz)

    def stop(self) -> AudioSegment | None:
        """Stop capture and return the recorded clip.

        Returns None when no capture is active.
        """
        if not self._is_capturing:
            return None

        self._is_capturing = False

        if self._stream:
            self._stream.stop()
            self._stream.close()
            self._stream = None

        self._play_tone(self.config.stop_tone_hz)

        segment = AudioSegment.from_chunks(
            self._recorded_chunks,
            sample_rate=self.config.sample_rate,
            channels=1,
        )
        logger.debug("[Capture] Recording stopped: %.2fs", segment.duration_seconds)
        return segment

    @staticmethod
    def list_devices() -> list[dict]:
        """List available audio input devices."""
        try:
            sd = _load_sounddevice()
            devices = sd.query_devices()
        except Exception as e:
            logger.warning("[Capture] Could not query devices: %s", e)
            return []

        input_devices = []
        for i, device in enumerate(devices):
            if device["max_input_channels"] > 0:
                input_devices.append(
                    {
                        "index": i,
                        "name": device["name"],
                        "channels": device["max_input_channels"],
                        "sample_rate": device["default_samplerate"],
                    }
                )

        return input_devices
