"""
Audio Capture Module

Press-to-record microphone capture, audio data types and silence detection.
"""

from dental_voice_chart.capture.audio_capture import AudioCapture, CaptureConfig
from dental_voice_chart.capture.audio_utils import (
    AudioChunk,
    AudioCodec,
    AudioEncoding,
    AudioSegment,
    EncodedAudio,
)
from dental_voice_chart.capture.vad import VoiceActivityDetector

__all__ = [
    "AudioCapture",
    "CaptureConfig",
    "AudioChunk",
    "AudioCodec",
    "AudioEncoding",
    "AudioSegment",
    "EncodedAudio",
    "VoiceActivityDetector",
]
