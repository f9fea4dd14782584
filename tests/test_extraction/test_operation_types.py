"""
Tests for chart operation types.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import pytest

from dental_voice_chart.extraction.chart_types import (
    ACTION_CODES,
    STATUS_CODES,
    VALID_TOOTH_IDS,
    ActionOperation,
    AnalysisResult,
    MemoOperation,
    OperationKind,
    StatusOperation,
    tooth_sort_key,
    validate_tooth_id,
)


def _expected_ids() -> set[str]:
    ids = set()
    for quadrant, last in ((1, 4), (2, 4), (3, 12), (4, 12)):
        ids.update(f"{quadrant}{n:02d}" for n in range(1, last + 1))
    return ids


class TestToothIds:
    """Tests for tooth numbering."""

    def test_valid_ids(self):
        """Test every id in the quadrant ranges is accepted."""
        assert VALID_TOOTH_IDS == _expected_ids()
        for tooth_id in _expected_ids():
            assert validate_tooth_id(tooth_id)

    def test_whole_mouth(self):
        """Test the whole-mouth sentinel is accepted."""
        assert validate_tooth_id("all")

    def test_every_other_numeric_string_rejected(self):
        """Test all other three-digit ids are rejected."""
        valid = _expected_ids()
        for n in range(1000):
            tooth_id = f"{n:03d}"
            if tooth_id not in valid:
                assert not validate_tooth_id(tooth_id), tooth_id

    @pytest.mark.parametrize("tooth_id", ["105", "205", "313", "413", "100", "501", "1", "0104", "ALL", ""])
    def test_invalid_ids(self, tooth_id: str):
        """Test out-of-range and malformed ids."""
        assert not validate_tooth_id(tooth_id)

    def test_sort_key(self):
        """Test numeric order with whole-mouth last."""
        assert sorted(["all", "301", "104", "412"], key=tooth_sort_key) == ["104", "301", "412", "all"]


class TestCodeTables:
    """Tests for the status and action code tables."""

    def test_status_values(self):
        """Test severity ranges."""
        assert STATUS_CODES["PD"].values == ("1", "2", "3", "4")
        assert STATUS_CODES["GR"].values == ("1", "2", "3")
        assert STATUS_CODES["P"].measurement is True
        assert STATUS_CODES["FX"].takes_value is False

    def test_actions_take_no_value(self):
        """Test procedures never carry a value."""
        assert all(not info.takes_value for info in ACTION_CODES.values())


class TestOperations:
    """Tests for operation data types."""

    def test_status_operation(self):
        """Test status operation rendering."""
        op = StatusOperation("301", "PD", "2")

        assert op.kind == OperationKind.STATUS
        assert op.label == "치주염"
        assert op.to_dict() == {"toothId": "301", "type": "status", "actionId": "PD", "value": "2"}

    def test_status_without_value(self):
        """Test value is omitted when absent."""
        assert StatusOperation("203", "BOP").to_dict() == {
            "toothId": "203", "type": "status", "actionId": "BOP",
        }

    def test_action_operation(self):
        """Test action operation rendering."""
        op = ActionOperation("104", "EXT")

        assert op.kind == OperationKind.ACTION
        assert op.label == "발치"
        assert op.to_dict() == {"toothId": "104", "type": "action", "actionId": "EXT"}

    def test_memo_operation(self):
        """Test memo operation rendering."""
        op = MemoOperation("잇몸 색깔이 이상함")

        assert op.kind == OperationKind.MEMO
        assert op.to_dict() == {"type": "memo", "content": "잇몸 색깔이 이상함"}

    def test_operations_are_immutable(self):
        """Test operations cannot be modified after extraction."""
        op = StatusOperation("301", "PD", "2")

        with pytest.raises(AttributeError):
            op.value = "3"


class TestAnalysisResult:
    """Tests for AnalysisResult."""

    def test_empty(self):
        """Test the no-op result."""
        result = AnalysisResult()

        assert result.is_empty
        assert result.to_dict() == []

    def test_operations_only(self, status_result: AnalysisResult):
        """Test results without memo."""
        assert status_result.to_dict() == {
            "results": [{"toothId": "301", "type": "status", "actionId": "PD", "value": "2"}]
        }

    def test_memo_only(self):
        """Test memo without operations."""
        result = AnalysisResult(memo="오른쪽 아래 어금니쪽 불편함")

        assert not result.is_empty
        assert result.to_dict() == {"memo": "오른쪽 아래 어금니쪽 불편함"}

    def test_both(self, mixed_result: AnalysisResult):
        """Test results plus memo."""
        data = mixed_result.to_dict()

        assert [op["actionId"] for op in data["results"]] == ["EXT", "SC"]
        assert data["memo"] == "잇몸 색깔이 이상함"

    def test_memo_never_inside_operations(self):
        """Test memo operations are rejected in the operations list."""
        with pytest.raises(ValueError):
            AnalysisResult(operations=[MemoOperation("메모")])

    def test_filters(self):
        """Test status/action accessors."""
        result = AnalysisResult(
            operations=[StatusOperation("301", "PD", "2"), ActionOperation("104", "EXT")]
        )

        assert len(result.status_operations) == 1
        assert len(result.action_operations) == 1
