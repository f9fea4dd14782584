"""
Dental Voice Chart FastAPI Server

REST API for the dental voice-chart pipeline, enabling web UI integration.

Usage:
    uvicorn server:app --reload --port 8000

Endpoints:
    GET  /api/v1/health                        - Health check
    POST /api/v1/analyze-audio                 - Transcribe and analyze an audio clip
    POST /api/v1/analyze-transcript            - Analyze transcript text
    POST /api/v1/patients/{id}/voice-chart     - Full pipeline, chart updated
    GET  /api/v1/patients/{id}/chart           - Current chart document
    POST /api/v1/tts                           - Synthesize a confirmation phrase

Environment:
    GOOGLE_API_KEY, GEMINI_API_KEY, OPENAI_API_KEY  - service credentials
    DENTAL_CHART_CONFIG                             - optional YAML config path
    CHART_STORE                                     - "json" (default) or "memory"
    CHART_DIR                                       - chart directory for the json store

Author: Cleansheet LLC
License: CC BY 4.0
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from dental_voice_chart import Pipeline, __version__
from dental_voice_chart.capture.audio_utils import load_audio
from dental_voice_chart.confirmation.tts_client import TTSClient, TTSClientConfig
from dental_voice_chart.errors import (
    ChartPersistenceError,
    ExtractionContractError,
    ServiceUnavailableError,
    SynthesisError,
    TranscriptionError,
    VoiceChartError,
)
from dental_voice_chart.pipeline.config import PipelineConfig, load_config
from dental_voice_chart.pipeline.pipeline import PipelineResult, PipelineStage, PipelineStatus

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("server")

# =============================================================================
# App Configuration
# =============================================================================

app = FastAPI(
    title="Dental Voice Chart API",
    description="Voice-driven dental charting using Google Speech, Gemini and OpenAI TTS",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Pipeline Initialization
# =============================================================================

_pipeline: Optional[Pipeline] = None
_tts_client: Optional[TTSClient] = None


def build_config() -> PipelineConfig:
    """Server configuration: YAML file if given, then environment overrides."""
    config_path = os.getenv("DENTAL_CHART_CONFIG")
    config = load_config(config_path) if config_path else PipelineConfig()

    store = os.getenv("CHART_STORE")
    if store:
        config.storage.backend = store
    chart_dir = os.getenv("CHART_DIR")
    if chart_dir:
        config.storage.directory = chart_dir

    # Confirmation audio is served through /tts, never played on the server
    config.confirmation.enabled = False
    return config


def get_pipeline() -> Pipeline:
    """Get or create the shared pipeline instance."""
    global _pipeline
    if _pipeline is None:
        config = build_config()
        logger.info(
            "[Server] Creating pipeline (store=%s, dir=%s)",
            config.storage.backend,
            config.storage.directory,
        )
        _pipeline = Pipeline(config)
    return _pipeline


def get_tts_client() -> TTSClient:
    """Get or create the shared TTS client."""
    global _tts_client
    if _tts_client is None:
        _tts_client = TTSClient(TTSClientConfig.from_env())
    return _tts_client


# =============================================================================
# Request/Response Models
# =============================================================================

class TranscriptRequest(BaseModel):
    """Request body for transcript analysis."""
    text: str


class TTSRequest(BaseModel):
    """Request body for speech synthesis."""
    text: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    services: dict[str, bool]


class AnalysisResponse(BaseModel):
    """Transcript plus extracted chart operations."""
    transcription: str
    analysis: dict | list


# =============================================================================
# Helpers
# =============================================================================

def load_upload(content: bytes, filename: Optional[str], language_code: str):
    """Turn an uploaded clip into something the transcriber accepts."""
    try:
        return load_audio(content, filename, language_code)
    except TranscriptionError as e:
        raise HTTPException(status_code=400, detail=f"Unsupported audio file: {e}")


def read_upload(file: Optional[UploadFile]) -> tuple[bytes, Optional[str]]:
    if file is None:
        raise HTTPException(status_code=400, detail="Audio file is required")
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    return content, file.filename


def error_response(status_code: int, error: Exception, **extra) -> JSONResponse:
    """JSON error body with the user-facing message and the technical detail."""
    message = error.user_message if isinstance(error, VoiceChartError) else str(error)
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "detail": str(error), **extra},
    )


def status_for(error: Exception) -> int:
    """HTTP status for a pipeline error."""
    if isinstance(error, ServiceUnavailableError):
        return 503
    if isinstance(error, ExtractionContractError):
        return 500
    if isinstance(error, (ChartPersistenceError, ValueError)):
        return 500
    if isinstance(error, VoiceChartError):
        return 502
    return 500


def result_status(result: PipelineResult) -> int:
    if result.status != PipelineStatus.FAILED:
        return 200
    if result.stage == PipelineStage.CHART:
        return 500
    return status_for(result.error)


def analyze_text(pipeline: Pipeline, text: str):
    """Run extraction, mapping failures to HTTP responses."""
    try:
        analysis = pipeline.analyze_transcript(text)
    except ExtractionContractError as e:
        logger.error("[Server] Extraction contract violated: %s", e)
        return error_response(500, e, transcription=text, rawResponse=e.raw_response)
    except (VoiceChartError, ValueError) as e:
        logger.error("[Server] Extraction failed: %s", e)
        return error_response(status_for(e), e, transcription=text)

    return AnalysisResponse(transcription=text, analysis=analysis.to_dict())


# =============================================================================
# API Endpoints
# =============================================================================

@app.get("/api/v1/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    config = get_pipeline().config
    return HealthResponse(
        status="ok",
        version=__version__,
        services={
            "transcription": bool(config.google_api_key),
            "extraction": bool(config.gemini_api_key),
            "synthesis": bool(config.openai_api_key),
        },
    )


@app.post("/api/v1/analyze-audio", response_model=AnalysisResponse)
def analyze_audio(file: Optional[UploadFile] = File(None)):
    """
    Transcribe an audio clip and extract chart operations.

    The chart is not modified. An empty transcript yields no operations.
    """
    content, filename = read_upload(file)
    pipeline = get_pipeline()
    audio = load_upload(content, filename, pipeline.config.transcription.language_code)

    try:
        transcript = pipeline.transcribe(audio)
    except (VoiceChartError, ValueError) as e:
        logger.error("[Server] Transcription failed: %s", e)
        return error_response(status_for(e), e)

    if transcript.is_empty:
        return AnalysisResponse(transcription="", analysis={"results": []})

    return analyze_text(pipeline, transcript.text)


@app.post("/api/v1/analyze-transcript", response_model=AnalysisResponse)
def analyze_transcript(request: TranscriptRequest):
    """Extract chart operations from transcript text."""
    if not request.text.strip():
        return AnalysisResponse(transcription=request.text, analysis={"results": []})
    return analyze_text(get_pipeline(), request.text)


@app.post("/api/v1/patients/{patient_id}/voice-chart")
def voice_chart(patient_id: str, file: Optional[UploadFile] = File(None)):
    """
    Run the full pipeline for one clip and update the patient's chart.

    Returns the pipeline result including the updated chart and the
    confirmation phrase (synthesize it with /api/v1/tts).
    """
    content, filename = read_upload(file)
    pipeline = get_pipeline()
    audio = load_upload(content, filename, pipeline.config.transcription.language_code)

    try:
        result = pipeline.process_audio(audio, patient_id)
    except ValueError as e:
        return error_response(500, e)

    return JSONResponse(status_code=result_status(result), content=result.to_dict())


@app.get("/api/v1/patients/{patient_id}/chart")
def get_chart(patient_id: str):
    """Current chart document of a patient."""
    try:
        document = get_pipeline().store.load(patient_id)
    except ChartPersistenceError as e:
        return error_response(500, e)

    if document is None:
        raise HTTPException(status_code=404, detail=f"No chart for patient {patient_id}")
    return document


@app.post("/api/v1/tts")
def synthesize(request: TTSRequest):
    """Synthesize text to MPEG audio."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        audio = get_tts_client().synthesize(request.text)
    except ServiceUnavailableError as e:
        return error_response(503, e)
    except SynthesisError as e:
        return error_response(502, e)
    except ValueError as e:
        return error_response(500, e)

    return Response(content=audio, media_type="audio/mpeg")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
