"""
Unit tests for Range header interpretation.
"""

import pytest

from staticserve.files.ranges import RangeOutcome, RangeSpec, parse_range


class TestParseRange:
    """Tests for parse_range()."""

    @pytest.mark.parametrize("header,start,end", [
        ("bytes=0-499", 0, 499),
        ("bytes=2-3", 2, 3),
        ("bytes=500-", 500, 999),
        ("bytes=0-", 0, 999),
        ("bytes=-200", 800, 999),
        ("bytes=900-5000", 900, 999),
        ("bytes=-5000", 0, 999),
        ("bytes=999-999", 999, 999),
        ("Bytes = 10-19", 10, 19),
    ])
    def test_satisfiable(self, header, start, end):
        result = parse_range(header, 1000)

        assert result.outcome is RangeOutcome.SATISFIABLE
        assert result.range_spec == RangeSpec(start, end)

    @pytest.mark.parametrize("header", ["bytes=1000-", "bytes=1000-2000", "bytes=-0"])
    def test_unsatisfiable(self, header):
        assert parse_range(header, 1000).outcome is RangeOutcome.UNSATISFIABLE

    def test_empty_file_is_unsatisfiable(self):
        assert parse_range("bytes=0-", 0).outcome is RangeOutcome.UNSATISFIABLE
        assert parse_range("bytes=-10", 0).outcome is RangeOutcome.UNSATISFIABLE

    @pytest.mark.parametrize("header", [
        "bytes=5-2",
        "bytes=-",
        "bytes=abc",
        "bytes=1-2-3",
        "bytes=",
        "bytes= 1 - 2",
    ])
    def test_malformed(self, header):
        assert parse_range(header, 1000).outcome is RangeOutcome.MALFORMED

    @pytest.mark.parametrize("header", [
        "items=0-5",
        "0-5",
        "bytes=0-1,5-6",
        "bytes=0-1, 5-6",
    ])
    def test_ignored(self, header):
        """Other units and multiple ranges fall back to the full body."""
        result = parse_range(header, 1000)

        assert result.outcome is RangeOutcome.IGNORE
        assert result.range_spec is None


class TestRangeSpec:
    """Tests for RangeSpec."""

    def test_length(self):
        assert RangeSpec(2, 3).length == 2
        assert RangeSpec(0, 0).length == 1

    def test_content_range(self):
        assert RangeSpec(0, 499).content_range(1234) == "bytes 0-499/1234"
