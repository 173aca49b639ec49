"""
tests/unit/test_decoding.py

Unit tests for reportd.diagnosis.decoding.

Coverage
--------
  parse_check_id: hex, decimal, legacy octal, binary, whitespace, garbage
  parse_int_tag:  None and garbage → None
  as_number:      int/float accepted; str, bool, None, NaN, inf rejected
  field_key:      unqualified passthrough; prefix + underscore stripped;
                  sibling metric sharing the prefix unchanged
"""
from __future__ import annotations

import pytest

from reportd.diagnosis.decoding import as_number, field_key, parse_check_id, parse_int_tag


class TestParseCheckId:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("0x0100", 256),
            ("0X1F", 31),
            ("256", 256),
            ("0", 0),
            ("0400", 256),
            ("0o400", 256),
            ("0b11", 3),
            (" 42 ", 42),
        ],
    )
    def test_parses_literals(self, text: str, expected: int) -> None:
        assert parse_check_id(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "0x", "1.5", "09"])
    def test_rejects_garbage(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_check_id(text)


class TestParseIntTag:
    def test_none_is_none(self) -> None:
        assert parse_int_tag(None) is None

    def test_garbage_is_none(self) -> None:
        assert parse_int_tag("panel-7") is None

    def test_valid_tag(self) -> None:
        assert parse_int_tag("7") == 7


class TestAsNumber:
    def test_float(self) -> None:
        assert as_number(0.75) == 0.75

    def test_int_becomes_float(self) -> None:
        result = as_number(3)
        assert result == 3.0
        assert isinstance(result, float)

    @pytest.mark.parametrize("value", ["0.5", None, True, float("nan"), float("inf"), [1.0]])
    def test_rejects_non_numbers(self, value: object) -> None:
        assert as_number(value) is None


class TestFieldKey:
    def test_unqualified_passthrough(self) -> None:
        assert field_key("end_time", "fast_tune_anomaly", qualified=False) == "end_time"

    def test_qualified_prefix_stripped(self) -> None:
        assert field_key("fast_tune_anomaly_end_time", "fast_tune_anomaly", qualified=True) == "end_time"

    def test_qualified_without_prefix_unchanged(self) -> None:
        assert field_key("other_metric", "fast_tune_anomaly", qualified=True) == "other_metric"

    def test_none_field(self) -> None:
        assert field_key(None, "m", qualified=True) is None

    def test_sibling_metric_unchanged(self) -> None:
        field = "fast_tune_anomaly2_end_time"
        assert field_key(field, "fast_tune_anomaly", qualified=True) == field

    def test_bare_measurement_name(self) -> None:
        assert field_key("fast_tune_anomaly", "fast_tune_anomaly", qualified=True) == ""
