"""
Confirmation Phrases

Short Korean sentences read back to the clinician after a chart update.
"""

from dental_voice_chart.extraction.chart_types import (
    STATUS_CODES,
    WHOLE_MOUTH,
    ActionOperation,
    AnalysisResult,
    StatusOperation,
)

COMPLETION_SUFFIX = "기록 완료."
FAILURE_PHRASE = "분석에 실패했습니다."


def tooth_phrase(tooth_id: str) -> str:
    """Spoken form of a tooth id."""
    if tooth_id == WHOLE_MOUTH:
        return "전체"
    return f"{tooth_id}번 치아"


def operation_phrase(op: StatusOperation | ActionOperation) -> str:
    """Spoken form of the status or procedure (without the tooth)."""
    if isinstance(op, StatusOperation) and op.value is not None:
        info = STATUS_CODES.get(op.code)
        unit = "밀리" if info is not None and info.measurement else "단계"
        return f"{op.label} {op.value}{unit}"
    return op.label


def build_confirmation_phrase(result: AnalysisResult) -> str:
    """Describe what was just recorded, e.g. "301번 치아, 치주염 2단계, 기록 완료."

    Returns an empty string for an empty result.
    """
    if result.is_empty:
        return ""

    parts: list[str] = []
    last_tooth: str | None = None
    for op in result.operations:
        if op.tooth_id != last_tooth:
            parts.append(tooth_phrase(op.tooth_id))
            last_tooth = op.tooth_id
        parts.append(operation_phrase(op))

    if result.memo:
        parts.append("메모")

    parts.append(COMPLETION_SUFFIX)
    return ", ".join(parts)
