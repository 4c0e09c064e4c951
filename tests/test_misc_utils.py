"""Tests for shared helpers."""

import pytest

from league_history.utils.misc_utils import (
    calculate_win_percentage,
    format_record,
    get_year_range,
    round_half_up,
    slugify,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Alice Smith", "alice-smith"),
        ("  Alice   Smith  ", "alice-smith"),
        ("O'Brien", "obrien"),
        ("alice_smith", "alice-smith"),
        ("--Alice--", "alice"),
        ("!!!", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_round_half_up():
    assert round_half_up(2.25) == 2.3
    assert round_half_up(2.35) == 2.4
    assert round_half_up(1400.005, 2) == 1400.01


def test_calculate_win_percentage():
    assert calculate_win_percentage(0, 0) == 0.0
    assert calculate_win_percentage(16, 12) == 57.1
    assert calculate_win_percentage(1, 0, 1) == 50.0
    assert calculate_win_percentage(14, 0) == 100.0


def test_format_record():
    assert format_record(12, 1) == "12-1"
    assert format_record(12, 1, 0) == "12-1"
    assert format_record(10, 3, 1) == "10-3-1"


def test_get_year_range():
    assert get_year_range([]) == ""
    assert get_year_range([2010]) == "2010"
    assert get_year_range([2012, 2010, 2011]) == "2010-2012"
    assert get_year_range([2010, 2015]) == "2010-2015 (2 seasons)"
