"""
Tests for audio utilities.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

from dental_voice_chart.capture.audio_utils import (
    AudioChunk,
    AudioCodec,
    AudioEncoding,
    AudioSegment,
    EncodedAudio,
    generate_tone,
    load_audio,
)
from dental_voice_chart.errors import TranscriptionError


class TestAudioChunk:
    """Tests for AudioChunk."""

    def test_duration(self):
        """Test chunk duration calculation."""
        chunk = AudioChunk(data=np.zeros(1600, dtype=np.float32), sample_rate=16000, timestamp_ms=0)

        assert chunk.duration_ms == pytest.approx(100.0)


class TestAudioSegment:
    """Tests for AudioSegment."""

    def test_from_chunks(self):
        """Test concatenating captured chunks."""
        chunks = [
            AudioChunk(data=np.full(800, i, dtype=np.float32), sample_rate=16000, timestamp_ms=i * 50)
            for i in range(3)
        ]

        segment = AudioSegment.from_chunks(chunks, sample_rate=16000)

        assert len(segment.data) == 2400
        assert segment.data[0] == 0
        assert segment.data[-1] == 2
        assert segment.duration_seconds == pytest.approx(0.15)

    def test_from_no_chunks(self):
        """Test an empty recording gives an empty segment."""
        segment = AudioSegment.from_chunks([], sample_rate=16000)

        assert segment.is_empty
        assert segment.duration_ms == 0

    def test_to_bytes_is_wav(self, speech_audio: AudioSegment):
        """Test default export is a RIFF/WAVE file."""
        data = speech_audio.to_bytes()

        assert data[:4] == b"RIFF"
        assert data[8:12] == b"WAVE"

    def test_from_bytes(self, speech_wav_bytes: bytes, speech_audio: AudioSegment):
        """Test decoding a WAV file from memory."""
        segment = AudioSegment.from_bytes(speech_wav_bytes)

        assert segment.sample_rate == speech_audio.sample_rate
        assert len(segment.data) == len(speech_audio.data)
        assert segment.data.dtype == np.float32

    def test_from_file_downmixes_stereo(self, tmp_path: Path):
        """Test loading a stereo file yields mono data."""
        path = tmp_path / "stereo.wav"
        stereo = np.column_stack([np.full(800, 0.5), np.full(800, -0.5)]).astype(np.float32)
        sf.write(path, stereo, 8000)

        segment = AudioSegment.from_file(path)

        assert segment.channels == 1
        assert segment.sample_rate == 8000
        assert segment.data.shape == (800,)
        assert np.allclose(segment.data, 0.0, atol=1e-3)
        assert segment.metadata["source_file"] == str(path)

    def test_encode_linear16(self, speech_audio: AudioSegment):
        """Test encoding for the transcription service."""
        encoded = speech_audio.encode(language_code="ko-KR")

        assert encoded.encoding.codec == AudioCodec.LINEAR16
        assert encoded.encoding.sample_rate_hz == 16000
        assert encoded.encoding.language_code == "ko-KR"
        assert encoded.size_bytes == len(encoded.content)
        assert encoded.content[:4] == b"RIFF"

    def test_resample(self, speech_audio: AudioSegment):
        """Test resampling halves the sample count at half the rate."""
        resampled = speech_audio.resample(8000)

        assert resampled.sample_rate == 8000
        assert len(resampled.data) == len(speech_audio.data) // 2
        assert resampled.metadata["resampled_from"] == 16000

    def test_resample_same_rate_is_identity(self, speech_audio: AudioSegment):
        """Test resampling to the current rate returns the same segment."""
        assert speech_audio.resample(16000) is speech_audio


class TestEncodedAudio:
    """Tests for pre-encoded clips."""

    def test_defaults(self):
        """Test default encoding descriptor."""
        encoded = EncodedAudio(content=b"\x1aE\xdf\xa3")

        assert encoded.encoding.codec == AudioCodec.LINEAR16
        assert encoded.encoding.language_code == "ko-KR"
        assert encoded.size_bytes == 4

    def test_webm_opus(self):
        """Test describing a browser recording."""
        encoding = AudioEncoding(codec=AudioCodec.WEBM_OPUS, sample_rate_hz=48000)

        assert encoding.codec.value == "WEBM_OPUS"
        assert encoding.sample_rate_hz == 48000


class TestLoadAudio:
    """Tests for turning recorded clips into transcriber input."""

    @pytest.mark.parametrize(
        "filename, codec",
        [
            ("clip.webm", AudioCodec.WEBM_OPUS),
            ("clip.OGG", AudioCodec.OGG_OPUS),
            ("clip.opus", AudioCodec.OGG_OPUS),
        ],
    )
    def test_opus_passed_through(self, filename: str, codec: AudioCodec):
        """Test Opus clips stay encoded."""
        audio = load_audio(b"\x1aE\xdf\xa3", filename, language_code="ko-KR")

        assert isinstance(audio, EncodedAudio)
        assert audio.content == b"\x1aE\xdf\xa3"
        assert audio.encoding.codec == codec
        assert audio.encoding.sample_rate_hz == 48000

    def test_wav_decoded(self, speech_wav_bytes: bytes):
        audio = load_audio(speech_wav_bytes, "clip.wav")

        assert isinstance(audio, AudioSegment)
        assert audio.sample_rate == 16000

    def test_no_filename_decoded(self, speech_wav_bytes: bytes):
        assert isinstance(load_audio(speech_wav_bytes), AudioSegment)

    def test_undecodable(self):
        """Test unreadable clips raise TranscriptionError."""
        with pytest.raises(TranscriptionError) as exc_info:
            load_audio(b"not audio", "clip.m4a")

        assert exc_info.value.user_message == "지원하지 않는 오디오 형식입니다."


class TestGenerateTone:
    """Tests for feedback tone generation."""

    def test_length_and_amplitude(self):
        """Test tone duration and peak level."""
        tone = generate_tone(880.0, duration_ms=120, sample_rate=16000, amplitude=0.2)

        assert len(tone) == 1920
        assert tone.dtype == np.float32
        assert np.max(np.abs(tone)) <= 0.2 + 1e-6

    def test_fades_in_and_out(self):
        """Test the tone starts and ends silent."""
        tone = generate_tone(660.0)

        assert tone[0] == pytest.approx(0.0)
        assert tone[-1] == pytest.approx(0.0, abs=1e-6)
