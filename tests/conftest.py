"""
Pytest Configuration and Shared Fixtures

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import json
from unittest.mock import MagicMock

import pytest
import numpy as np

from dental_voice_chart.capture.audio_utils import AudioSegment
from dental_voice_chart.chart.chart_types import PatientChart, ToothEntry
from dental_voice_chart.chart.store import InMemoryChartStore
from dental_voice_chart.extraction.chart_types import (
    ActionOperation,
    AnalysisResult,
    StatusOperation,
)
from dental_voice_chart.pipeline.config import PipelineConfig


# =============================================================================
# AUDIO FIXTURES
# =============================================================================


@pytest.fixture
def sample_rate() -> int:
    """Standard sample rate for tests."""
    return 16000


@pytest.fixture
def silent_audio(sample_rate: int) -> AudioSegment:
    """One second of digital silence."""
    return AudioSegment(data=np.zeros(sample_rate, dtype=np.float32), sample_rate=sample_rate)


@pytest.fixture
def quiet_noise(sample_rate: int) -> AudioSegment:
    """One second of low-level background noise."""
    rng = np.random.default_rng(0)
    data = (rng.standard_normal(sample_rate) * 0.001).astype(np.float32)
    return AudioSegment(data=data, sample_rate=sample_rate)


@pytest.fixture
def speech_audio(sample_rate: int) -> AudioSegment:
    """Two seconds of a loud speech-like signal."""
    duration = 2.0
    t = np.arange(int(sample_rate * duration)) / sample_rate
    signal = (
        0.3 * np.sin(2 * np.pi * 200 * t) +
        0.2 * np.sin(2 * np.pi * 400 * t) +
        0.1 * np.sin(2 * np.pi * 800 * t)
    )
    return AudioSegment(data=signal.astype(np.float32), sample_rate=sample_rate)


@pytest.fixture
def speech_wav_bytes(speech_audio: AudioSegment) -> bytes:
    """Speech-like clip encoded as a WAV file."""
    return speech_audio.to_bytes()


# =============================================================================
# EXTRACTION FIXTURES
# =============================================================================


@pytest.fixture
def extraction_example_transcript() -> str:
    """Dictation mixing two procedures and a memo."""
    return "104번 발치하고 전체 스케일링, 그리고 잇몸 색깔이 이상함 메모"


@pytest.fixture
def extraction_example_response() -> str:
    """Model reply for the mixed dictation, wrapped in a code fence."""
    payload = {
        "results": [
            {"toothId": "104", "type": "action", "actionId": "EXT"},
            {"toothId": "all", "type": "action", "actionId": "SC"},
        ],
        "memo": "잇몸 색깔이 이상함",
    }
    return "```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```"


@pytest.fixture
def status_result() -> AnalysisResult:
    """Periodontitis stage 2 on tooth 301."""
    return AnalysisResult(operations=[StatusOperation("301", "PD", "2")])


@pytest.fixture
def mixed_result() -> AnalysisResult:
    """Extraction, whole-mouth scaling and a memo."""
    return AnalysisResult(
        operations=[ActionOperation("104", "EXT"), ActionOperation("all", "SC")],
        memo="잇몸 색깔이 이상함",
    )


def _gemini_reply(text: str) -> dict:
    """generateContent response body carrying ``text``."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def _speech_reply(*texts: str, confidence: float = 0.9) -> dict:
    """recognize response body with one result block per text."""
    return {
        "results": [
            {"alternatives": [{"transcript": text, "confidence": confidence}]}
            for text in texts
        ]
    }


def _mock_response(status_code: int = 200, json_data=None, text: str = "", content: bytes = b""):
    """A requests.Response stand-in."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    response.text = text
    response.content = content
    return response


@pytest.fixture
def gemini_reply():
    """Factory for generateContent response bodies."""
    return _gemini_reply


@pytest.fixture
def speech_reply():
    """Factory for recognize response bodies."""
    return _speech_reply


@pytest.fixture
def mock_response():
    """Factory for fake HTTP responses."""
    return _mock_response


# =============================================================================
# CHART FIXTURES
# =============================================================================


@pytest.fixture
def sample_chart() -> PatientChart:
    """Chart with prior findings on two teeth."""
    return PatientChart(
        patient_id="p-001",
        teeth={
            "101": ToothEntry("101", statuses={"GR": "1"}),
            "204": ToothEntry("204", procedures={"POL": True}),
        },
        findings="초진 시 구취 있음",
        updated_at="2024-05-01T09:00:00+00:00",
    )


@pytest.fixture
def memory_store() -> InMemoryChartStore:
    """Empty in-memory chart store."""
    return InMemoryChartStore()


# =============================================================================
# CONFIG FIXTURES
# =============================================================================


@pytest.fixture
def test_config() -> PipelineConfig:
    """Pipeline config with fake credentials and in-memory storage."""
    config = PipelineConfig(
        google_api_key="test-google-key",
        gemini_api_key="test-gemini-key",
        openai_api_key="test-openai-key",
    )
    config.storage.backend = "memory"
    return config


@pytest.fixture
def sample_config_yaml(tmp_path) -> str:
    """Write a sample YAML config and return its path."""
    config_content = """
name: test-clinic
version: "1.0.0"

capture:
  sample_rate: 16000
  feedback_tones: false

transcription:
  language_code: ko-KR
  use_phrase_hints: true
  vad_energy_threshold: 0.02

extraction:
  model_id: gemini-1.5-pro
  temperature: 0.0

confirmation:
  voice: nova
  announce_failures: false

storage:
  backend: memory
"""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(config_content)
    return str(config_path)
