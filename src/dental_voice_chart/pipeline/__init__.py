"""
Pipeline Module

End-to-end voice-to-chart orchestration.
"""

from dental_voice_chart.pipeline.pipeline import (
    Pipeline,
    PipelineResult,
    PipelineStage,
    PipelineStatus,
)
from dental_voice_chart.pipeline.config import PipelineConfig, load_config

__all__ = [
    "Pipeline",
    "PipelineResult",
    "PipelineStage",
    "PipelineStatus",
    "PipelineConfig",
    "load_config",
]
