"""Tests for the end-to-end pipeline runner."""

import pytest

from league_history.models.enums import DataSource
from league_history.models.overrides import LeagueOverrides
from league_history.models.season import RawSeason
from league_history.normalization.csv_processor import parse_csv
from league_history.pipeline.runner import build_statistics, normalize_seasons, run_pipeline

CSV = """Year,OwnerName,TeamName,Rank,Wins,Losses,Ties,PointsFor,PointsAgainst,Champion,RunnerUp,MadePlayoffs
2019,Alice,Hammers,1,10,3,0,1500,1300,Yes,No,Yes
2019,Bob,Anvils,2,9,4,0,1450,1350,No,Yes,Yes
2019,Carol,Chisels,3,3,10,0,1100,1500,No,No,No
2020,Alice,Hammers,1,9,4,0,1400,1300,No,No,Yes
2020,Bobby Smith,Anvils,2,9,4,0,1420,1320,No,No,Yes
2020,Carol,Chisels,3,4,9,0,1200,1400,No,No,No
1990,Carol,Chisels,3,4,9,0,1200,1400,No,No,No
"""


@pytest.fixture
def csv_result():
    return parse_csv(CSV)


@pytest.fixture
def espn_by_year(make_standing, make_matchup):
    return {
        2019: RawSeason(year=2019, standings=[], source=DataSource.ESPN),
        2021: RawSeason(
            year=2021,
            standings=[make_standing("Alice", 1), make_standing("  ", 2)],
            source=DataSource.ESPN,
        ),
        2022: RawSeason(
            year=2022,
            standings=[
                make_standing("Bob", 1, wins=11, losses=3, points_for=1600.0),
                make_standing("Alice", 2, wins=8, losses=6, points_for=1500.0),
            ],
            matchups=[make_matchup(15, "Bob", 130.0, "Alice", 120.0)],
            regular_season_weeks=14,
            playoff_team_count=2,
            source=DataSource.ESPN,
        ),
    }


@pytest.fixture
def league_overrides():
    return LeagueOverrides(
        name_fixes={"Bobby Smith": "Bob"},
        champion_overrides={2019: "Bob"},
        runner_up_overrides={2019: "Alice"},
        split_championships={2020: ["Alice", "Bob", "Carol"]},
    )


class TestRunPipeline:
    """Tests for run_pipeline()."""

    def test_seasons_and_failures(self, csv_result, espn_by_year, league_overrides):
        result = run_pipeline(csv_result, espn_by_year, league_overrides)
        assert [s.year for s in result.seasons] == [2019, 2020, 2022]
        assert sorted(result.failed_years) == [2021]
        assert result.failed_years[2021].startswith("InvalidIdentity")

    def test_warnings(self, csv_result, espn_by_year, league_overrides):
        warnings = run_pipeline(csv_result, espn_by_year, league_overrides).warnings
        assert 'CSV Row 8: Invalid year "1990"' in warnings
        assert any(w.startswith("2020:") and "split champions" in w for w in warnings)
        assert any(w.startswith("2019: espn season skipped") for w in warnings)

    def test_operator_overrides_beat_csv_flags(self, csv_result, league_overrides):
        result = run_pipeline(csv_result, {}, league_overrides)
        season_2019 = result.seasons[0]
        assert season_2019.champion == "Bob"
        assert season_2019.runner_up == "Alice"

    def test_bad_split_falls_back_to_rank(self, csv_result, league_overrides):
        result = run_pipeline(csv_result, {}, league_overrides)
        season_2020 = result.seasons[1]
        assert season_2020.champion == "Alice"
        assert not season_2020.is_split_championship

    def test_owners(self, csv_result, espn_by_year, league_overrides):
        result = run_pipeline(csv_result, espn_by_year, league_overrides)
        owners = {o.name: o for o in result.owners}
        assert sorted(owners) == ["Alice", "Bob", "Carol"]
        assert owners["Bob"].seasons_played == [2019, 2020, 2022]
        assert owners["Bob"].championships == [2019, 2022]
        assert owners["Bob"].is_active
        assert not owners["Carol"].is_active
        assert owners["Alice"].playoff_record.losses == 1

    def test_espn_season_flags_championship(self, csv_result, espn_by_year, league_overrides):
        season_2022 = run_pipeline(csv_result, espn_by_year, league_overrides).seasons[-1]
        assert season_2022.weekly_scores[0].is_championship
        assert season_2022.sources == [DataSource.ESPN]

    def test_idempotent(self, csv_result, espn_by_year, league_overrides):
        first = run_pipeline(csv_result, espn_by_year, league_overrides)
        second = run_pipeline(csv_result, espn_by_year, league_overrides)
        assert first.model_dump() == second.model_dump()

    def test_empty(self):
        result = run_pipeline()
        assert result.seasons == []
        assert result.owners == []
        assert result.failed_years == {}


class TestNormalizeSeasons:
    """Tests for per-season error tolerance."""

    def test_one_bad_year_does_not_stop_the_rest(self, normalizer, make_standing):
        raw = {
            2018: RawSeason(year=2018, standings=[make_standing("Alice", 1)]),
            2019: RawSeason(year=2019, standings=[]),
        }
        seasons, failed, warnings = normalize_seasons(raw, normalizer)
        assert [s.year for s in seasons] == [2018]
        assert list(failed) == [2019]
        assert failed[2019].startswith("EmptyStandings")
        assert warnings == []


class TestBuildStatistics:
    """Tests for computing every view at once."""

    def test_views(self, csv_result, espn_by_year, league_overrides):
        result = run_pipeline(csv_result, espn_by_year, league_overrides)
        stats = build_statistics(result.seasons, result.owners, rivalry_limit=1)
        assert len(stats.leaderboard) == 3
        assert stats.records
        assert len(stats.rivalries) == 1
        assert stats.head_to_head[0].owner1 == "Alice"
        assert stats.all_time.total_seasons == 3

    def test_empty(self):
        stats = build_statistics([], [])
        assert stats.leaderboard == []
        assert stats.records == []
        assert stats.rivalries == []
        assert stats.head_to_head == []
