"""
Text-to-Speech Client

OpenAI audio/speech client for spoken confirmations.
"""

from dataclasses import dataclass
import logging
import os

import requests

from dental_voice_chart.errors import ServiceUnavailableError, SynthesisError

logger = logging.getLogger(__name__)


@dataclass
class TTSClientConfig:
    """Configuration for the text-to-speech client."""

    api_key: str | None = None
    api_url: str = "https://api.openai.com/v1/audio/speech"
    model_id: str = "tts-1"
    voice: str = "shimmer"
    response_format: str = "mp3"
    timeout_seconds: float = 15.0

    @classmethod
    def from_env(cls) -> "TTSClientConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("OPENAI_API_KEY"),
            voice=os.environ.get("TTS_VOICE", "shimmer"),
            timeout_seconds=float(os.environ.get("TTS_TIMEOUT", "15.0")),
        )


class TTSClient:
    """Synthesizes short phrases to compressed audio."""

    def __init__(self, config: TTSClientConfig | None = None):
        """Initialize TTS client."""
        self.config = config or TTSClientConfig()
        self.api_key = self.config.api_key or os.environ.get("OPENAI_API_KEY")

        if not self.api_key:
            raise ValueError(
                "OpenAI API key required for speech synthesis. "
                "Set OPENAI_API_KEY environment variable or pass api_key in config."
            )

    @property
    def _headers(self) -> dict[str, str]:
        """Request headers."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def synthesize(self, text: str) -> bytes:
        """Synthesize text to audio bytes (MPEG audio by default).

        Raises:
            ServiceUnavailableError: the request timed out or could not connect.
            SynthesisError: the API answered with an error.
        """
        if not text.strip():
            raise SynthesisError("Text is required")

        payload = {
            "model": self.config.model_id,
            "voice": self.config.voice,
            "input": text,
            "response_format": self.config.response_format,
        }

        try:
            response = requests.post(
                self.config.api_url,
                headers=self._headers,
                json=payload,
                timeout=self.config.timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise ServiceUnavailableError("synthesis", f"TTS request failed: {e}") from e
        except requests.RequestException as e:
            raise SynthesisError(f"TTS request failed: {e}") from e

        if response.status_code != 200:
            raise SynthesisError(
                f"TTS API error: {response.status_code} - {response.text[:500]}"
            )

        logger.debug("[TTS] Synthesized %d bytes for %r", len(response.content), text)
        return response.content
