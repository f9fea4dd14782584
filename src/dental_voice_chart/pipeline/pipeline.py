"""
Voice-to-Chart Pipeline

End-to-end orchestration of capture, transcription, extraction, chart
mutation and spoken confirmation.

Each step starts only after the previous one produced its result. Failures
of transcription, extraction or persistence abort the run and come back as a
failed PipelineResult; a confirmation failure is logged and the chart update
stands.
"""

from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
import logging
import threading

from dental_voice_chart.capture.audio_capture import AudioCapture
from dental_voice_chart.capture.audio_capture import CaptureConfig as AudioCaptureConfig
from dental_voice_chart.capture.audio_utils import AudioSegment, EncodedAudio, load_audio
from dental_voice_chart.capture.vad import VADConfig, VoiceActivityDetector
from dental_voice_chart.chart.chart_types import PatientChart
from dental_voice_chart.chart.session import ChartSession
from dental_voice_chart.chart.store import ChartStore, InMemoryChartStore, JsonFileChartStore
from dental_voice_chart.confirmation.phrases import build_confirmation_phrase
from dental_voice_chart.confirmation.speaker import ConfirmationSpeaker
from dental_voice_chart.confirmation.tts_client import TTSClient, TTSClientConfig
from dental_voice_chart.errors import (
    ExtractionContractError,
    TranscriptionError,
    VoiceChartError,
)
from dental_voice_chart.extraction.chart_types import AnalysisResult
from dental_voice_chart.extraction.gemini_client import GeminiClient, GeminiClientConfig
from dental_voice_chart.pipeline.config import PipelineConfig, load_config
from dental_voice_chart.transcription.speech_client import SpeechClient, SpeechClientConfig
from dental_voice_chart.transcription.transcript_types import Transcript

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    """Outcome of one voice command."""

    APPLIED = "applied"
    NO_SPEECH = "no_speech"
    NO_OP = "no_op"
    FAILED = "failed"


class PipelineStage(str, Enum):
    """Step at which a run stopped."""

    TRANSCRIPTION = "transcription"
    EXTRACTION = "extraction"
    CHART = "chart"


STATUS_MESSAGES = {
    PipelineStatus.NO_SPEECH: "인식된 음성이 없습니다.",
    PipelineStatus.NO_OP: "차트에 기록할 명령이 없습니다.",
}


@dataclass
class PipelineResult:
    """Result of one voice-to-chart run."""

    status: PipelineStatus
    patient_id: str
    transcript: str = ""
    analysis: AnalysisResult | None = None
    chart: PatientChart | None = None
    stage: PipelineStage | None = None
    error: VoiceChartError | None = None
    confirmation: str = ""
    confirmation_played: bool = False

    @property
    def ok(self) -> bool:
        return self.status != PipelineStatus.FAILED

    @property
    def raw_response(self) -> str | None:
        """Offending model reply, for contract violations."""
        if isinstance(self.error, ExtractionContractError):
            return self.error.raw_response
        return None

    @property
    def user_message(self) -> str:
        """Message to show the clinician."""
        if self.error is not None:
            return self.error.user_message
        if self.status in STATUS_MESSAGES:
            return STATUS_MESSAGES[self.status]
        return self.confirmation

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "patientId": self.patient_id,
            "transcription": self.transcript,
            "analysis": self.analysis.to_dict() if self.analysis is not None else None,
            "message": self.user_message,
            "confirmationPlayed": self.confirmation_played,
        }
        if self.error is not None:
            data["stage"] = self.stage.value if self.stage else None
            data["error"] = str(self.error)
        if self.raw_response is not None:
            data["rawResponse"] = self.raw_response
        if self.chart is not None:
            data["chart"] = self.chart.to_dict()
        return data


class Pipeline:
    """End-to-end voice-to-chart pipeline."""

    max_sessions = 64

    def __init__(
        self,
        config: PipelineConfig | None = None,
        store: ChartStore | None = None,
        transcriber: SpeechClient | None = None,
        extractor: GeminiClient | None = None,
        speaker: ConfirmationSpeaker | None = None,
    ):
        """Initialize pipeline; components not given are created lazily."""
        self.config = config or PipelineConfig()
        self.config.resolve_credentials()

        self._capture: AudioCapture | None = None
        self._transcriber = transcriber
        self._extractor = extractor
        self._speaker = speaker
        self._store = store
        self._sessions: OrderedDict[str, ChartSession] = OrderedDict()
        self._sessions_lock = threading.Lock()

    @classmethod
    def from_config(cls, config_path: str | Path) -> "Pipeline":
        """Create pipeline from config file."""
        config = load_config(config_path)
        return cls(config)

    @property
    def capture(self) -> AudioCapture:
        """Get or create audio capture component."""
        if self._capture is None:
            cap = self.config.capture
            self._capture = AudioCapture(
                AudioCaptureConfig(
                    sample_rate=cap.sample_rate,
                    channels=cap.channels,
                    chunk_duration_ms=cap.chunk_duration_ms,
                    device=cap.device,
                    feedback_tones=cap.feedback_tones,
                )
            )
        return self._capture

    @property
    def transcriber(self) -> SpeechClient:
        """Get or create transcription component."""
        if self._transcriber is None:
            trans = self.config.transcription
            self._transcriber = SpeechClient(
                SpeechClientConfig(
                    api_key=self.config.google_api_key,
                    api_url=trans.api_url,
                    language_code=trans.language_code,
                    sample_rate_hz=trans.sample_rate_hz,
                    model=trans.model,
                    use_phrase_hints=trans.use_phrase_hints,
                    skip_silence=trans.skip_silence,
                    timeout_seconds=trans.timeout_seconds,
                ),
                vad=VoiceActivityDetector(
                    VADConfig(energy_threshold=trans.vad_energy_threshold)
                ),
            )
        return self._transcriber

    @property
    def extractor(self) -> GeminiClient:
        """Get or create extraction component."""
        if self._extractor is None:
            ext = self.config.extraction
            self._extractor = GeminiClient(
                GeminiClientConfig(
                    api_key=self.config.gemini_api_key,
                    model_id=ext.model_id,
                    api_url=ext.api_url,
                    prompt_version=ext.prompt_version,
                    timeout_seconds=ext.timeout_seconds,
                    max_tokens=ext.max_tokens,
                    temperature=ext.temperature,
                )
            )
        return self._extractor

    @property
    def speaker(self) -> ConfirmationSpeaker:
        """Get or create the confirmation speaker.

        Without an OpenAI key the speaker is created disabled.
        """
        if self._speaker is None:
            conf = self.config.confirmation
            tts = None
            if conf.enabled and self.config.openai_api_key:
                tts = TTSClient(
                    TTSClientConfig(
                        api_key=self.config.openai_api_key,
                        api_url=conf.api_url,
                        model_id=conf.model_id,
                        voice=conf.voice,
                        timeout_seconds=conf.timeout_seconds,
                    )
                )
            elif conf.enabled:
                logger.warning("[Pipeline] No OPENAI_API_KEY set; spoken confirmation disabled")
            self._speaker = ConfirmationSpeaker(tts, enabled=conf.enabled)
        return self._speaker

    @property
    def store(self) -> ChartStore:
        """Get or create the chart store."""
        if self._store is None:
            if self.config.storage.backend == "memory":
                self._store = InMemoryChartStore()
            else:
                self._store = JsonFileChartStore(self.config.storage.directory)
        return self._store

    def prepare(self) -> None:
        """Create the transcription and extraction clients up front.

        Raises:
            ValueError: a required API key is missing.
        """
        _ = self.transcriber
        _ = self.extractor

    def session(self, patient_id: str) -> ChartSession:
        """Chart session for a patient.

        Only the most recently used sessions are kept; an evicted patient
        gets a fresh session that re-reads the store.
        """
        store = self.store
        with self._sessions_lock:
            session = self._sessions.get(patient_id)
            if session is None:
                session = ChartSession(patient_id, store)
                self._sessions[patient_id] = session
            self._sessions.move_to_end(patient_id)
            while len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
        return session

    # Analysis only (no chart mutation)

    def transcribe(self, audio: AudioSegment | EncodedAudio) -> Transcript:
        """Transcribe a clip."""
        return self.transcriber.transcribe(audio)

    def analyze_transcript(self, text: str) -> AnalysisResult:
        """Extract chart operations from transcript text."""
        return self.extractor.extract(text)

    # Full runs

    def process_audio(
        self, audio: AudioSegment | EncodedAudio, patient_id: str
    ) -> PipelineResult:
        """Transcribe, extract, apply and confirm one clip."""
        # Step 1: Transcribe
        try:
            transcript = self.transcribe(audio)
        except VoiceChartError as e:
            return self._fail(patient_id, PipelineStage.TRANSCRIPTION, e)

        if transcript.is_empty:
            logger.info("[Pipeline] Empty transcript; chart untouched")
            return PipelineResult(status=PipelineStatus.NO_SPEECH, patient_id=patient_id)

        return self._process_text(transcript.text, patient_id)

    def process_file(self, filepath: str | Path, patient_id: str) -> PipelineResult:
        """Process an audio file (WAV, FLAC, or a browser Opus recording)."""
        path = Path(filepath)
        try:
            audio = load_audio(
                path.read_bytes(), path.name, self.config.transcription.language_code
            )
        except TranscriptionError as e:
            return self._fail(patient_id, PipelineStage.TRANSCRIPTION, e)
        return self.process_audio(audio, patient_id)

    def process_transcript(self, text: str, patient_id: str) -> PipelineResult:
        """Process transcript text directly (skip transcription)."""
        if not text.strip():
            return PipelineResult(status=PipelineStatus.NO_SPEECH, patient_id=patient_id)
        return self._process_text(text, patient_id)

    def start_recording(self) -> None:
        """Begin press-to-record capture.

        Raises:
            MicrophoneError: permission denied or no usable device.
        """
        self.capture.start()

    def finish_recording(self, patient_id: str) -> PipelineResult | None:
        """Stop capture and process the clip. None if nothing was recording."""
        audio = self.capture.stop()
        if audio is None:
            return None
        return self.process_audio(audio, patient_id)

    def _process_text(self, text: str, patient_id: str) -> PipelineResult:
        # Step 2: Extract chart operations
        try:
            analysis = self.analyze_transcript(text)
        except VoiceChartError as e:
            return self._fail(patient_id, PipelineStage.EXTRACTION, e, transcript=text)

        if analysis.is_empty:
            logger.info("[Pipeline] No chart commands recognized in %r", text)
            return PipelineResult(
                status=PipelineStatus.NO_OP,
                patient_id=patient_id,
                transcript=text,
                analysis=analysis,
            )

        # Step 3: Apply and persist
        session = self.session(patient_id)
        try:
            chart = session.apply(analysis)
        except VoiceChartError as e:
            return self._fail(
                patient_id, PipelineStage.CHART, e, transcript=text, analysis=analysis
            )

        # Step 4: Confirm
        phrase = build_confirmation_phrase(analysis)
        played = self.speaker.announce(phrase)

        return PipelineResult(
            status=PipelineStatus.APPLIED,
            patient_id=patient_id,
            transcript=text,
            analysis=analysis,
            chart=chart,
            confirmation=phrase,
            confirmation_played=played,
        )

    def _fail(
        self,
        patient_id: str,
        stage: PipelineStage,
        error: VoiceChartError,
        transcript: str = "",
        analysis: AnalysisResult | None = None,
    ) -> PipelineResult:
        logger.error("[Pipeline] %s failed: %s", stage.value, error)
        if isinstance(error, ExtractionContractError):
            logger.error("[Pipeline] Raw model response: %s", error.raw_response)

        # No read-back after a chart failure
        if stage != PipelineStage.CHART and self.config.confirmation.announce_failures:
            self.speaker.announce_failure()

        session = self._sessions.get(patient_id)
        return PipelineResult(
            status=PipelineStatus.FAILED,
            patient_id=patient_id,
            transcript=transcript,
            analysis=analysis,
            chart=session.current if session is not None else None,
            stage=stage,
            error=error,
        )
