"""
Confirmation Module

Spoken read-back of recorded chart updates.
"""

from dental_voice_chart.confirmation.phrases import build_confirmation_phrase
from dental_voice_chart.confirmation.speaker import AudioPlayer, ConfirmationSpeaker
from dental_voice_chart.confirmation.tts_client import TTSClient, TTSClientConfig

__all__ = [
    "build_confirmation_phrase",
    "AudioPlayer",
    "ConfirmationSpeaker",
    "TTSClient",
    "TTSClientConfig",
]
