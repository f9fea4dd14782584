"""
Chart Operation Types

Data models for the structured operations extracted from a dictated command,
plus the code tables and tooth numbering they are validated against.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OperationKind(str, Enum):
    """Discriminator of a chart operation."""

    STATUS = "status"
    ACTION = "action"
    MEMO = "memo"


@dataclass(frozen=True)
class CodeInfo:
    """Label and allowed values of a status or procedure code."""

    label: str
    values: tuple[str, ...] | None = None
    measurement: bool = False

    @property
    def takes_value(self) -> bool:
        return self.values is not None or self.measurement


STATUS_CODES: dict[str, CodeInfo] = {
    "PD": CodeInfo("치주염", values=("1", "2", "3", "4")),
    "GR": CodeInfo("치은염", values=("1", "2", "3")),
    "CAL": CodeInfo("치석", values=("1", "2", "3")),
    "P": CodeInfo("치주 포켓", measurement=True),
    "FX": CodeInfo("치아 파절"),
    "BOP": CodeInfo("탐침 시 출혈"),
    "AT": CodeInfo("치아 마모"),
    "M": CodeInfo("실종치"),
}

ACTION_CODES: dict[str, CodeInfo] = {
    "EXT": CodeInfo("발치"),
    "SURG_EXT": CodeInfo("수술적 발치"),
    "POL": CodeInfo("폴리싱"),
    "SC": CodeInfo("스케일링"),
    "RESIN": CodeInfo("레진"),
    "RP": CodeInfo("루트 플래닝"),
}

# Older codes still emitted by some replies
CODE_ALIASES: dict[str, str] = {"CR": "CAL"}

# Quadrant -> highest tooth position (positions start at 1)
QUADRANT_RANGES: dict[int, int] = {1: 4, 2: 4, 3: 12, 4: 12}

WHOLE_MOUTH = "all"

VALID_TOOTH_IDS: frozenset[str] = frozenset(
    f"{quadrant}{position:02d}"
    for quadrant, last in QUADRANT_RANGES.items()
    for position in range(1, last + 1)
)


def validate_tooth_id(tooth_id: str) -> bool:
    """Whether tooth_id is a valid tooth number or the whole-mouth sentinel."""
    return tooth_id == WHOLE_MOUTH or tooth_id in VALID_TOOTH_IDS


def tooth_sort_key(tooth_id: str) -> tuple[int, str]:
    """Sort numbered teeth first in numeric order, then 'all'."""
    if tooth_id.isdigit():
        return (int(tooth_id), "")
    return (10_000, tooth_id)


@dataclass(frozen=True)
class StatusOperation:
    """Set a status (finding) on a tooth, optionally with a severity value."""

    tooth_id: str
    code: str
    value: str | None = None

    @property
    def kind(self) -> OperationKind:
        return OperationKind.STATUS

    @property
    def label(self) -> str:
        info = STATUS_CODES.get(self.code)
        return info.label if info else self.code

    def to_dict(self) -> dict[str, Any]:
        data = {"toothId": self.tooth_id, "type": "status", "actionId": self.code}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class ActionOperation:
    """Mark a procedure as completed on a tooth."""

    tooth_id: str
    code: str

    @property
    def kind(self) -> OperationKind:
        return OperationKind.ACTION

    @property
    def label(self) -> str:
        info = ACTION_CODES.get(self.code)
        return info.label if info else self.code

    def to_dict(self) -> dict[str, Any]:
        return {"toothId": self.tooth_id, "type": "action", "actionId": self.code}


@dataclass(frozen=True)
class MemoOperation:
    """Free-text clinical note."""

    content: str

    @property
    def kind(self) -> OperationKind:
        return OperationKind.MEMO

    def to_dict(self) -> dict[str, Any]:
        return {"type": "memo", "content": self.content}


ChartOperation = StatusOperation | ActionOperation | MemoOperation


@dataclass
class AnalysisResult:
    """Structured output of one dictated command.

    Memos are never stored inside ``operations``; they live in ``memo``.
    """

    operations: list[StatusOperation | ActionOperation] = field(default_factory=list)
    memo: str | None = None

    def __post_init__(self) -> None:
        if any(isinstance(op, MemoOperation) for op in self.operations):
            raise ValueError("memo operations belong in AnalysisResult.memo")

    @property
    def is_empty(self) -> bool:
        return not self.operations and not self.memo

    @property
    def status_operations(self) -> list[StatusOperation]:
        return [op for op in self.operations if isinstance(op, StatusOperation)]

    @property
    def action_operations(self) -> list[ActionOperation]:
        return [op for op in self.operations if isinstance(op, ActionOperation)]

    def to_dict(self) -> dict[str, Any] | list:
        """Render the canonical contract shape."""
        if self.is_empty:
            return []
        data: dict[str, Any] = {}
        if self.operations:
            data["results"] = [op.to_dict() for op in self.operations]
        if self.memo:
            data["memo"] = self.memo
        return data
