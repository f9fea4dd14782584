"""
Transcription Module

Korean speech-to-text with a dental vocabulary bias.
"""

from dental_voice_chart.transcription.transcript_types import (
    Transcript,
    TranscriptAlternative,
)
from dental_voice_chart.transcription.speech_client import SpeechClient, SpeechClientConfig
from dental_voice_chart.transcription.phrase_hints import DENTAL_PHRASES, PhraseHint

__all__ = [
    "Transcript",
    "TranscriptAlternative",
    "SpeechClient",
    "SpeechClientConfig",
    "DENTAL_PHRASES",
    "PhraseHint",
]
