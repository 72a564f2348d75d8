"""Tests for record parsing and number coercion."""

import pytest

from cobenefits.errors import MalformedInput
from cobenefits.parser import parse_text, to_number


class TestToNumber:
    def test_comma_decimal(self):
        assert to_number("1,5") == 1.5

    def test_empty_and_absent(self):
        assert to_number("") == 0.0
        assert to_number("   ") == 0.0
        assert to_number(None) == 0.0

    def test_non_numeric(self):
        assert to_number("abc") == 0.0

    def test_whitespace_and_sign(self):
        assert to_number("  2.25 ") == 2.25
        assert to_number("-3,5") == -3.5

    def test_only_first_comma_is_decimal_point(self):
        assert to_number("1,234,5") == 1.234

    def test_trailing_junk_ignored(self):
        assert to_number("12abc") == 12.0

    def test_exponent(self):
        assert to_number("1e3") == 1000.0

    def test_non_finite_degrades_to_zero(self):
        assert to_number("1e999") == 0.0
        assert to_number("Infinity") == 0.0
        assert to_number("nan") == 0.0


class TestParseText:
    def test_header_and_rows(self):
        rows = parse_text("small_area;air_quality;sum\nA;2,5;10\nB;1,0;20\n")
        assert rows == [
            {"small_area": "A", "air_quality": "2,5", "sum": "10"},
            {"small_area": "B", "air_quality": "1,0", "sum": "20"},
        ]

    def test_blank_lines_skipped(self):
        rows = parse_text("a;b\n\n1;2\n   \n3;4\n\n")
        assert [r["a"] for r in rows] == ["1", "3"]

    def test_short_row_padded(self):
        rows = parse_text("a;b;c\n1\n")
        assert rows == [{"a": "1", "b": "", "c": ""}]

    def test_extra_values_ignored(self):
        rows = parse_text("a;b\n1;2;3;4\n")
        assert rows == [{"a": "1", "b": "2"}]

    def test_crlf_line_endings(self):
        rows = parse_text("a;b\r\nx;2\r\ny;3\r\n")
        assert rows == [{"a": "x", "b": "2"}, {"a": "y", "b": "3"}]

    def test_header_line_is_trimmed(self):
        rows = parse_text("  a;b  \n1;2\n")
        assert list(rows[0].keys()) == ["a", "b"]

    def test_values_not_trimmed(self):
        rows = parse_text("a;b\n x ;2\n")
        assert rows[0]["a"] == " x "

    def test_header_only(self):
        assert parse_text("a;b\n") == []

    def test_empty_input_is_malformed(self):
        with pytest.raises(MalformedInput):
            parse_text("")

    def test_blank_header_is_malformed(self):
        with pytest.raises(MalformedInput):
            parse_text("   \nA;1\n")
