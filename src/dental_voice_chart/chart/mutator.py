"""
Chart Mutator

Applies an AnalysisResult to a PatientChart.

The input chart is never modified: operations are applied to a deep copy
which is returned only if every operation succeeded.
"""

import copy
import logging

from dental_voice_chart.chart.chart_types import PatientChart
from dental_voice_chart.errors import ChartMutationError
from dental_voice_chart.extraction.chart_types import (
    ActionOperation,
    AnalysisResult,
    StatusOperation,
)

logger = logging.getLogger(__name__)

MEMO_SEPARATOR = "\n"


def append_memo(findings: str, memo: str) -> str:
    """Append a memo to the findings text without dropping prior content."""
    memo = memo.strip()
    if not memo:
        return findings
    if not findings.strip():
        return memo
    return f"{findings.rstrip()}{MEMO_SEPARATOR}{memo}"


def apply_analysis(chart: PatientChart, result: AnalysisResult) -> PatientChart:
    """Return a new chart with all operations of ``result`` applied.

    Raises:
        ChartMutationError: an operation could not be applied. The input
            chart is left untouched.
    """
    updated = copy.deepcopy(chart)

    for index, op in enumerate(result.operations):
        if isinstance(op, StatusOperation):
            entry = updated.ensure_tooth(op.tooth_id)
            entry.statuses[op.code] = op.value if op.value is not None else True
        elif isinstance(op, ActionOperation):
            entry = updated.ensure_tooth(op.tooth_id)
            entry.procedures[op.code] = True
        else:
            raise ChartMutationError(
                f"Unsupported operation at index {index}: {type(op).__name__}"
            )

    if result.memo:
        updated.findings = append_memo(updated.findings, result.memo)

    logger.debug(
        "[Chart] Applied %d operation(s) to patient %s (memo=%s)",
        len(result.operations),
        chart.patient_id,
        bool(result.memo),
    )
    return updated
