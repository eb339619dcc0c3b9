"""Tests for week range parsing."""

import pytest

from schoolsoft.errors import WeekRangeError
from schoolsoft.weeks import parse_week_range


class TestParseWeekRange:
    def test_range(self):
        assert list(parse_week_range("13-17")) == [13, 14, 15, 16, 17]

    def test_single_week(self):
        assert list(parse_week_range("11")) == [11]

    def test_mixed_tokens(self):
        weeks = list(parse_week_range("30-37, 39, 40-42, 44-50"))
        assert weeks == [30, 31, 32, 33, 34, 35, 36, 37, 39, 40, 41, 42,
                         44, 45, 46, 47, 48, 49, 50]
        assert len(weeks) == 19

    def test_empty(self):
        assert list(parse_week_range("")) == []
        assert list(parse_week_range("   ")) == []

    def test_variable_spacing(self):
        assert list(parse_week_range("5 ,6-7,  8")) == [5, 6, 7, 8]
        assert list(parse_week_range("1 - 3")) == [1, 2, 3]

    def test_token_order_is_kept(self):
        assert list(parse_week_range("34-35, 3-4")) == [34, 35, 3, 4]

    def test_duplicates_are_not_collapsed(self):
        assert list(parse_week_range("3-5, 4")) == [3, 4, 5, 4]

    def test_single_element_range(self):
        assert list(parse_week_range("7-7")) == [7]

    def test_restartable(self):
        text = "1-3"
        assert list(parse_week_range(text)) == list(parse_week_range(text))


class TestMalformedWeekRange:
    @pytest.mark.parametrize("text", ["3-", "-3", "a", "1,,2", "1, 2,", "5-3", "1-2-3", "4.5"])
    def test_raises(self, text):
        with pytest.raises(WeekRangeError):
            list(parse_week_range(text))

    def test_error_names_token(self):
        with pytest.raises(WeekRangeError) as exc_info:
            list(parse_week_range("1-3, x, 5"))
        assert exc_info.value.token == "x"
        assert exc_info.value.text == "1-3, x, 5"

    def test_valid_prefix_is_yielded_before_error(self):
        weeks = parse_week_range("1, 2, oops")
        assert next(weeks) == 1
        assert next(weeks) == 2
        with pytest.raises(WeekRangeError):
            next(weeks)
