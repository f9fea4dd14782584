"""
Extraction Response Parser

Turns the generative model's reply into an AnalysisResult.

Accepted shapes (all normalized to one AnalysisResult):
- ``[]`` or ``{}``: nothing to do
- ``[op, ...]``: legacy bare array of operations
- ``{"results": [op, ...]}``
- ``{"memo": "..."}``
- ``{"results": [op, ...], "memo": "..."}``
- ``{op}``: a single bare operation object

Memo items found inside the results array are hoisted into the memo field.
Anything else is a contract violation and raises ExtractionContractError
with the raw reply attached.
"""

import json
import logging
import math
import re
from typing import Any

from dental_voice_chart.errors import ExtractionContractError
from dental_voice_chart.extraction.chart_types import (
    ACTION_CODES,
    CODE_ALIASES,
    STATUS_CODES,
    ActionOperation,
    AnalysisResult,
    StatusOperation,
    validate_tooth_id,
)

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class _ContractViolation(Exception):
    """Internal signal; converted to ExtractionContractError at the boundary."""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```)."""
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()
    # Unbalanced fences: drop any stray fence markers
    return re.sub(r"```[a-zA-Z0-9_-]*", "", stripped).strip()


def parse_analysis(response_text: str) -> AnalysisResult:
    """Parse a model reply into an AnalysisResult.

    Raises:
        ExtractionContractError: the reply is not valid JSON or does not
            satisfy the chart-operation contract.
    """
    cleaned = strip_code_fences(response_text or "")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("[Parser] JSON decode error: %s", e)
        raise ExtractionContractError(
            f"Model reply is not valid JSON: {e}", raw_response=response_text
        ) from e

    try:
        result = normalize_payload(data)
    except _ContractViolation as e:
        logger.error("[Parser] Contract violation: %s", e)
        raise ExtractionContractError(
            f"Model reply violates the chart contract: {e}",
            raw_response=response_text,
        ) from e

    logger.debug(
        "[Parser] Parsed %d operation(s), memo=%s",
        len(result.operations),
        bool(result.memo),
    )
    return result


def normalize_payload(data: Any) -> AnalysisResult:
    """Normalize any accepted contract shape to an AnalysisResult."""
    memo_parts: list[str] = []

    if isinstance(data, list):
        items = data
        top_memo = None
    elif isinstance(data, dict):
        if "results" in data or "memo" in data:
            items = data.get("results") or []
            top_memo = data.get("memo")
        elif "type" in data:
            items = [data]
            top_memo = None
        elif not data:
            items = []
            top_memo = None
        else:
            raise _ContractViolation(f"unexpected object keys: {sorted(data)}")
    else:
        raise _ContractViolation(f"unexpected top-level type: {type(data).__name__}")

    if not isinstance(items, list):
        raise _ContractViolation("'results' must be an array")

    operations: list[StatusOperation | ActionOperation] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise _ContractViolation(f"results[{index}] is not an object")

        op_type = item.get("type")
        if op_type == "memo":
            content = _memo_text(item.get("content"), f"results[{index}].content")
            if content:
                memo_parts.append(content)
        elif op_type == "status":
            operations.append(_parse_status(item, index))
        elif op_type == "action":
            operations.append(_parse_action(item, index))
        else:
            raise _ContractViolation(f"results[{index}] has unknown type {op_type!r}")

    top = _memo_text(top_memo, "memo")
    if top:
        memo_parts.append(top)

    memo = "\n".join(memo_parts) if memo_parts else None
    return AnalysisResult(operations=operations, memo=memo)


def _memo_text(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise _ContractViolation(f"{path} must be a string")
    return value.strip() or None


def _scalar_text(value: Any) -> str | None:
    """Coerce a JSON scalar (string or number) to its string form."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def _parse_tooth_id(item: dict[str, Any], index: int) -> str:
    tooth_id = _scalar_text(item.get("toothId"))
    if tooth_id is None:
        raise _ContractViolation(f"results[{index}] is missing toothId")
    tooth_id = tooth_id.lower() if tooth_id.lower() == "all" else tooth_id
    if not validate_tooth_id(tooth_id):
        raise _ContractViolation(f"results[{index}] has invalid toothId {tooth_id!r}")
    return tooth_id


def _parse_code(item: dict[str, Any], index: int, table: dict) -> str:
    code = item.get("actionId")
    if not isinstance(code, str) or not code.strip():
        raise _ContractViolation(f"results[{index}] is missing actionId")
    code = code.strip().upper()
    code = CODE_ALIASES.get(code, code)
    if code not in table:
        raise _ContractViolation(f"results[{index}] has unknown actionId {code!r}")
    return code


def _parse_status(item: dict[str, Any], index: int) -> StatusOperation:
    tooth_id = _parse_tooth_id(item, index)
    code = _parse_code(item, index, STATUS_CODES)
    info = STATUS_CODES[code]

    raw_value = item.get("value")
    value = _scalar_text(raw_value)
    if raw_value is not None and value is None and raw_value != "":
        raise _ContractViolation(f"results[{index}] has non-scalar value")

    if value is not None:
        if not info.takes_value:
            raise _ContractViolation(f"results[{index}]: {code} does not take a value")
        if info.values is not None and value not in info.values:
            raise _ContractViolation(
                f"results[{index}]: {code} value {value!r} not in {list(info.values)}"
            )
        if info.measurement:
            try:
                measured = float(value)
            except ValueError:
                raise _ContractViolation(
                    f"results[{index}]: {code} value {value!r} is not a number"
                ) from None
            if not math.isfinite(measured) or measured <= 0:
                raise _ContractViolation(f"results[{index}]: {code} value must be positive")

    return StatusOperation(tooth_id=tooth_id, code=code, value=value)


def _parse_action(item: dict[str, Any], index: int) -> ActionOperation:
    tooth_id = _parse_tooth_id(item, index)
    code = _parse_code(item, index, ACTION_CODES)
    if item.get("value") not in (None, ""):
        raise _ContractViolation(f"results[{index}]: action {code} does not take a value")
    return ActionOperation(tooth_id=tooth_id, code=code)
