"""
Extraction Module

Gemini-based intent extraction from transcripts into chart operations.
"""

from dental_voice_chart.extraction.chart_types import (
    ACTION_CODES,
    STATUS_CODES,
    VALID_TOOTH_IDS,
    ActionOperation,
    AnalysisResult,
    ChartOperation,
    MemoOperation,
    OperationKind,
    StatusOperation,
    validate_tooth_id,
)
from dental_voice_chart.extraction.gemini_client import GeminiClient, GeminiClientConfig
from dental_voice_chart.extraction.parser import parse_analysis, strip_code_fences

__all__ = [
    "ACTION_CODES",
    "STATUS_CODES",
    "VALID_TOOTH_IDS",
    "ActionOperation",
    "AnalysisResult",
    "ChartOperation",
    "MemoOperation",
    "OperationKind",
    "StatusOperation",
    "validate_tooth_id",
    "GeminiClient",
    "GeminiClientConfig",
    "parse_analysis",
    "strip_code_fences",
]
