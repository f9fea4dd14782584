"""
Chart Module

Patient dental chart model, atomic mutation and persistence.
"""

from dental_voice_chart.chart.chart_types import PatientChart, ToothEntry
from dental_voice_chart.chart.mutator import append_memo, apply_analysis
from dental_voice_chart.chart.session import ChartSession
from dental_voice_chart.chart.store import ChartStore, InMemoryChartStore, JsonFileChartStore

__all__ = [
    "PatientChart",
    "ToothEntry",
    "append_memo",
    "apply_analysis",
    "ChartSession",
    "ChartStore",
    "InMemoryChartStore",
    "JsonFileChartStore",
]
