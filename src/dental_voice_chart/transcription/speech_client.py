"""
Speech-to-Text Client

Google Cloud Speech-to-Text (v1 REST) client for Korean dictation.

Accepts either a captured AudioSegment, which is encoded to 16-bit PCM WAV,
or an already-encoded clip such as the Opus-in-WebM blobs browsers record.
"""

from dataclasses import dataclass
import base64
import logging
import os

import requests

from dental_voice_chart.capture.audio_utils import (
    AudioCodec,
    AudioSegment,
    EncodedAudio,
)
from dental_voice_chart.capture.vad import VADConfig, VoiceActivityDetector
from dental_voice_chart.errors import ServiceUnavailableError, TranscriptionError
from dental_voice_chart.transcription.phrase_hints import build_adaptation
from dental_voice_chart.transcription.transcript_types import (
    Transcript,
    TranscriptAlternative,
)

logger = logging.getLogger(__name__)


@dataclass
class SpeechClientConfig:
    """Configuration for the speech-to-text client."""

    api_key: str | None = None
    api_url: str = "https://speech.googleapis.com/v1/speech:recognize"
    language_code: str = "ko-KR"
    sample_rate_hz: int = 16000
    model: str | None = None  # None = service default
    use_phrase_hints: bool = True
    skip_silence: bool = True
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "SpeechClientConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("GOOGLE_API_KEY"),
            language_code=os.environ.get("SPEECH_LANGUAGE", "ko-KR"),
            timeout_seconds=float(os.environ.get("SPEECH_TIMEOUT", "30.0")),
        )


class SpeechClient:
    """Transcribes dictated chart commands."""

    def __init__(
        self,
        config: SpeechClientConfig | None = None,
        vad: VoiceActivityDetector | None = None,
    ):
        """Initialize speech client."""
        self.config = config or SpeechClientConfig()
        self.api_key = self.config.api_key or os.environ.get("GOOGLE_API_KEY")

        if not self.api_key:
            raise ValueError(
                "Google API key required for speech-to-text. "
                "Set GOOGLE_API_KEY environment variable or pass api_key in config."
            )

        self._vad = vad or VoiceActivityDetector(VADConfig())

    def _prepare_audio(self, audio: AudioSegment | EncodedAudio) -> EncodedAudio:
        """Encode captured audio for the API request."""
        if isinstance(audio, EncodedAudio):
            return audio
        if audio.sample_rate != self.config.sample_rate_hz:
            audio = audio.resample(self.config.sample_rate_hz)
        return audio.encode(language_code=self.config.language_code)

    def build_request(self, encoded: EncodedAudio) -> dict:
        """Build the recognize request body."""
        recognition_config = {
            "encoding": AudioCodec(encoded.encoding.codec).value,
            "sampleRateHertz": encoded.encoding.sample_rate_hz,
            "languageCode": encoded.encoding.language_code or self.config.language_code,
        }
        if self.config.model:
            recognition_config["model"] = self.config.model
        if self.config.use_phrase_hints:
            recognition_config["adaptation"] = build_adaptation()

        return {
            "config": recognition_config,
            "audio": {"content": base64.b64encode(encoded.content).decode("ascii")},
        }

    def transcribe(self, audio: AudioSegment | EncodedAudio) -> Transcript:
        """Transcribe a clip to text.

        Returns an empty transcript when no speech is detected.

        Raises:
            ServiceUnavailableError: the request timed out or could not connect.
            TranscriptionError: the API answered with an error or an unusable body.
        """
        language = self.config.language_code

        if isinstance(audio, AudioSegment) and self.config.skip_silence:
            if not self._vad.contains_speech(audio):
                logger.info("[Speech] No speech detected, skipping recognition")
                return Transcript.empty(language=language, skipped="silence")

        encoded = self._prepare_audio(audio)
        if not encoded.content:
            return Transcript.empty(language=language, skipped="empty")

        logger.info(
            "[Speech] Transcribing %d bytes (%s)",
            encoded.size_bytes,
            AudioCodec(encoded.encoding.codec).value,
        )

        try:
            response = requests.post(
                self.config.api_url,
                params={"key": self.api_key},
                json=self.build_request(encoded),
                timeout=self.config.timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.error("[Speech] Service unavailable: %s", e)
            raise ServiceUnavailableError("transcription", f"Speech request failed: {e}") from e
        except requests.RequestException as e:
            raise TranscriptionError(f"Speech request failed: {e}") from e

        if response.status_code != 200:
            raise TranscriptionError(
                f"Speech API error: {response.status_code} - {response.text[:500]}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise TranscriptionError(f"Speech API returned non-JSON body: {e}") from e

        transcript = self._parse_response(result, language)
        logger.info("[Speech] Transcript: %r", transcript.text)
        return transcript

    def _parse_response(self, result: dict, language: str) -> Transcript:
        """Join the best alternative of each result block."""
        alternatives = []
        for block in result.get("results") or []:
            candidates = block.get("alternatives") or []
            if not candidates:
                continue
            best = candidates[0]
            text = (best.get("transcript") or "").strip()
            if text:
                alternatives.append(
                    TranscriptAlternative(text=text, confidence=best.get("confidence", 1.0))
                )

        return Transcript(
            text="\n".join(a.text for a in alternatives),
            alternatives=alternatives,
            language=language,
            metadata={"backend": "google-speech"},
        )
