"""Tests for historical CSV ingestion."""

import pytest

from league_history.models.enums import DataSource
from league_history.normalization.csv_processor import (
    CSVFormatError,
    parse_csv,
    validate_csv,
)

HEADER = "Year,OwnerName,TeamName,Rank,Wins,Losses,Ties,PointsFor,PointsAgainst,Champion,RunnerUp,MadePlayoffs"


def _csv(*rows: str) -> str:
    return "\n".join([HEADER, *rows]) + "\n"


class TestValidateCsv:
    """Tests for validate_csv()."""

    def test_valid_header(self):
        assert validate_csv(_csv()) == []

    def test_empty_content(self):
        assert validate_csv("") == ["CSV content is empty"]
        assert validate_csv("   \n") == ["CSV content is empty"]

    def test_missing_columns(self):
        problems = validate_csv("Year,OwnerName\n2020,Alice\n")
        assert "Missing required column: TeamName" in problems
        assert "Missing required column: PointsAgainst" in problems
        assert len(problems) == 5


class TestParseCsv:
    """Tests for parse_csv()."""

    def test_rows_grouped_by_year(self):
        result = parse_csv(
            _csv(
                "2019,Alice,Hammers,1,12,1,0,1800.5,1500,Yes,No,Yes",
                "2019,Bob,Anvils,2,10,3,0,1700,1550,no,YES,yes",
                "2020,Alice,Hammers,2,8,5,1,1600,1580,No,Yes,Yes",
            )
        )
        assert result.years == [2019, 2020]
        assert result.errors == []
        assert result.owner_names == {"Alice", "Bob"}
        assert result.champions == {2019: "Alice"}
        assert result.runner_ups == {2019: "Bob", 2020: "Alice"}

        alice = result.standings_by_year[2019][0]
        assert alice.rank == 1
        assert alice.points_for == 1800.5
        assert alice.made_playoffs
        assert result.standings_by_year[2020][0].ties == 1

    def test_bad_rows_are_reported_not_fatal(self):
        result = parse_csv(
            _csv(
                "abc,Alice,Hammers,1,12,1,0,1800,1500,No,No,No",
                "1999,Alice,Hammers,1,12,1,0,1800,1500,No,No,No",
                "2019,,Hammers,1,12,1,0,1800,1500,No,No,No",
                "2019,Bob,Anvils,2,10,3,0,1700,1550,No,No,No",
            )
        )
        assert result.errors == [
            'Row 2: Invalid year "abc"',
            'Row 3: Invalid year "1999"',
            "Row 4: Missing owner name",
        ]
        assert result.years == [2019]

    def test_missing_numbers_default_to_zero(self):
        result = parse_csv(_csv("2019,Alice,,,,,,,,,,"))
        standing = result.standings_by_year[2019][0]
        assert standing.team_name == "Unknown Team"
        assert standing.rank == 1
        assert standing.wins == 0
        assert standing.points_for == 0.0
        assert not standing.made_playoffs

    def test_unranked_rows_follow_ranked_rows(self):
        result = parse_csv(
            _csv(
                "2019,Carol,Chisels,,3,10,0,1100,1500,No,No,No",
                "2019,Alice,Hammers,1,12,1,0,1800,1500,No,No,No",
                "2019,Dave,Drills,0,2,11,0,1000,1600,No,No,No",
                "2019,Bob,Anvils,2,10,3,0,1700,1550,No,No,No",
            )
        )
        ranks = {s.owner_name: s.rank for s in result.standings_by_year[2019]}
        assert ranks == {"Alice": 1, "Bob": 2, "Carol": 3, "Dave": 4}
        assert result.errors == []

    def test_byte_order_mark_is_ignored(self):
        result = parse_csv("\ufeff" + _csv("2019,Alice,Hammers,1,12,1,0,1800,1500,No,No,No"))
        assert result.years == [2019]

    def test_year_window_is_configurable(self):
        result = parse_csv(
            _csv("1999,Alice,Hammers,1,12,1,0,1800,1500,No,No,No"), min_year=1990
        )
        assert result.years == [1999]

    def test_missing_columns_raise(self):
        with pytest.raises(CSVFormatError):
            parse_csv("Year,OwnerName\n2020,Alice\n")

    def test_raw_seasons_and_overrides(self):
        result = parse_csv(
            _csv(
                "2019,Alice,Hammers,2,12,1,0,1800,1500,Yes,No,Yes",
                "2019,Bob,Anvils,1,10,3,0,1700,1550,No,Yes,Yes",
            )
        )
        raw = result.raw_seasons()
        assert [r.year for r in raw] == [2019]
        assert raw[0].source == DataSource.CSV
        overrides = result.overrides_for(2019)
        assert overrides.champion_override == "Alice"
        assert overrides.runner_up_override == "Bob"
        assert result.overrides_for(2018).champion_override is None
