"""
Gemini Extraction Client

Generative Language API client that turns a transcript into chart operations.

The model receives the versioned instruction template and the transcript as
two text parts and must reply with JSON satisfying the chart-operation
contract (see extraction.parser).
"""

from dataclasses import dataclass
import logging
import os

import requests

from dental_voice_chart.errors import ExtractionError, ServiceUnavailableError
from dental_voice_chart.extraction.chart_types import AnalysisResult
from dental_voice_chart.extraction.parser import parse_analysis
from dental_voice_chart.extraction.prompts import PROMPT_VERSION, load_prompt

logger = logging.getLogger(__name__)


@dataclass
class GeminiClientConfig:
    """Configuration for the Gemini extraction client."""

    api_key: str | None = None
    model_id: str = "gemini-1.5-flash"
    api_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    prompt_version: str = PROMPT_VERSION
    timeout_seconds: float = 30.0
    max_tokens: int = 1024
    temperature: float = 0.1

    @classmethod
    def from_env(cls) -> "GeminiClientConfig":
        """Create configuration from environment variables."""
        return cls(
            api_key=os.environ.get("GEMINI_API_KEY"),
            model_id=os.environ.get("GEMINI_MODEL_ID", "gemini-1.5-flash"),
            timeout_seconds=float(os.environ.get("GEMINI_TIMEOUT", "30.0")),
        )


class GeminiClient:
    """Extracts structured chart operations from transcript text."""

    def __init__(self, config: GeminiClientConfig | None = None):
        """Initialize Gemini client."""
        self.config = config or GeminiClientConfig()
        self.api_key = self.config.api_key or os.environ.get("GEMINI_API_KEY")

        if not self.api_key:
            raise ValueError(
                "Gemini API key required. "
                "Set GEMINI_API_KEY environment variable or pass api_key in config."
            )

        self._prompt: str | None = None

    @property
    def _endpoint(self) -> str:
        """generateContent URL for the configured model."""
        base = self.config.api_url.rstrip("/")
        return f"{base}/{self.config.model_id}:generateContent"

    @property
    def prompt(self) -> str:
        """Instruction template (loaded once)."""
        if self._prompt is None:
            self._prompt = load_prompt(self.config.prompt_version)
        return self._prompt

    def _build_payload(self, transcript: str) -> dict:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": self.prompt}, {"text": transcript}],
                }
            ],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens,
            },
        }

    def generate(self, transcript: str) -> str:
        """Send the transcript to the model and return its raw reply text.

        Raises:
            ServiceUnavailableError: the request timed out or could not connect.
            ExtractionError: the API answered with an error or an unusable body.
        """
        logger.info("[Gemini] Extracting with model: %s", self.config.model_id)

        try:
            response = requests.post(
                self._endpoint,
                params={"key": self.api_key},
                json=self._build_payload(transcript),
                timeout=self.config.timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            logger.error("[Gemini] Service unavailable: %s", e)
            raise ServiceUnavailableError("extraction", f"Gemini request failed: {e}") from e
        except requests.RequestException as e:
            raise ExtractionError(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            raise ExtractionError(
                f"Gemini API error: {response.status_code} - {response.text[:500]}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ExtractionError(f"Gemini API returned non-JSON body: {e}") from e

        # {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
        candidates = result.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        generated_text = "".join(part.get("text", "") for part in parts)

        logger.debug("[Gemini] Raw response: %s", generated_text)
        return generated_text

    def extract(self, transcript: str) -> AnalysisResult:
        """Extract chart operations from transcript text.

        Raises:
            ExtractionContractError: the reply violates the output contract;
                the raw reply is attached as ``raw_response``.
        """
        if not transcript.strip():
            return AnalysisResult()

        generated_text = self.generate(transcript)
        return parse_analysis(generated_text)

    def health_check(self) -> bool:
        """Check if the API is reachable."""
        try:
            response = requests.get(
                f"{self.config.api_url.rstrip('/')}/{self.config.model_id}",
                params={"key": self.api_key},
                timeout=10.0,
            )
            return response.status_code == 200
        except requests.RequestException:
            return False
