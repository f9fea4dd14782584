"""
Confirmation Speaker

Synthesizes and plays spoken confirmations. Failures here are reported
through the log and the return value only; they never undo a chart update.
"""

import logging

from dental_voice_chart.capture.audio_utils import AudioSegment
from dental_voice_chart.confirmation.phrases import FAILURE_PHRASE
from dental_voice_chart.confirmation.tts_client import TTSClient
from dental_voice_chart.errors import SynthesisError, VoiceChartError

logger = logging.getLogger(__name__)


def _load_sounddevice():
    import sounddevice as sd

    return sd


class AudioPlayer:
    """Plays compressed audio on the default output device."""

    def __init__(self, blocking: bool = False):
        self.blocking = blocking

    def play(self, audio_bytes: bytes) -> None:
        """Decode and start playback.

        Raises:
            SynthesisError: decoding or playback failed.
        """
        try:
            segment = AudioSegment.from_bytes(audio_bytes)
            sd = _load_sounddevice()
            sd.play(segment.data, segment.sample_rate, blocking=self.blocking)
        except Exception as e:
            raise SynthesisError(f"Playback failed: {e}") from e


class ConfirmationSpeaker:
    """Announces recorded chart updates."""

    def __init__(
        self,
        tts: TTSClient | None,
        player: AudioPlayer | None = None,
        enabled: bool = True,
    ):
        self.tts = tts
        self.player = player or AudioPlayer()
        self.enabled = enabled and tts is not None

    def announce(self, text: str) -> bool:
        """Speak text. Returns False (and logs) when nothing was played."""
        if not self.enabled or not text:
            return False

        try:
            audio = self.tts.synthesize(text)
            self.player.play(audio)
        except VoiceChartError as e:
            logger.warning("[TTS] Confirmation speech failed: %s", e)
            return False

        logger.info("[TTS] Announced: %s", text)
        return True

    def announce_failure(self, message: str | None = None) -> bool:
        """Speak a short failure notice."""
        text = FAILURE_PHRASE if not message else f"{FAILURE_PHRASE} {message}"
        return self.announce(text)
