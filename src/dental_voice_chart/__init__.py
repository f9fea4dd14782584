"""
Dental Voice Chart

Hands-free dental charting for veterinary clinics: Korean voice commands
are transcribed, turned into structured chart operations and applied to the
patient's dental chart, with a short spoken read-back.

Usage:
    from dental_voice_chart import Pipeline

    pipeline = Pipeline.from_config("configs/clinic.yaml")
    result = pipeline.process_file("command.wav", patient_id="p-001")
    print(result.confirmation)

Author: Cleansheet LLC
License: CC BY 4.0
"""

from dental_voice_chart.pipeline.pipeline import Pipeline
from dental_voice_chart.pipeline.config import PipelineConfig

__version__ = "0.1.0"
__author__ = "Cleansheet LLC"
__license__ = "CC BY 4.0"

__all__ = [
    "Pipeline",
    "PipelineConfig",
    "__version__",
]
