"""Tests for single-season normalization."""

import pytest
from pydantic import ValidationError

from league_history.models.enums import DataSource
from league_history.models.overrides import SeasonOverrides
from league_history.models.season import RawSeason, Standing
from league_history.normalization.normalizer import (
    EmptyStandings,
    InvalidSplitChampions,
    NormalizationError,
    SeasonNormalizer,
    flag_championship,
)


@pytest.fixture
def four_team_standings(make_standing):
    return [
        make_standing("Carol", 3, wins=7, losses=6, points_for=1650.0),
        make_standing("Alice", 1, wins=12, losses=1, points_for=1800.0, made_playoffs=True),
        make_standing("Dave", 4, wins=2, losses=11, points_for=1400.0),
        make_standing("Bob", 2, wins=10, losses=3, points_for=1700.0, made_playoffs=True),
    ]


class TestChampionResolution:
    """Tests for champion, runner-up, most points and last place."""

    def test_rank_based_champion(self, normalizer, make_standing):
        season = normalizer.normalize(
            2019,
            [
                make_standing("Alice", 1, wins=12, losses=1, points_for=1800.0),
                make_standing("Bob", 2, wins=10, losses=3, points_for=1700.0),
            ],
        )
        assert season.champion == "Alice"
        assert season.champions == ["Alice"]
        assert season.runner_up == "Bob"
        assert season.most_points.owner == "Alice"
        assert season.last_place == "Bob"
        assert season.league_size == 2
        assert not season.champion_confirmed

    def test_standings_sorted_by_rank(self, normalizer, four_team_standings):
        season = normalizer.normalize(2019, four_team_standings)
        assert [s.owner_name for s in season.standings] == ["Alice", "Bob", "Carol", "Dave"]
        assert season.last_place == "Dave"

    def test_split_championship(self, normalizer, four_team_standings):
        season = normalizer.normalize(
            2020,
            four_team_standings,
            overrides=SeasonOverrides(split_champions=["Alice", "Bob"]),
        )
        assert season.champion == "Alice & Bob"
        assert season.runner_up == ""
        assert season.is_split_championship
        assert season.champion_confirmed

    def test_single_name_split_is_a_champion_override(self, normalizer, four_team_standings):
        season = normalizer.normalize(
            2020, four_team_standings, overrides=SeasonOverrides(split_champions=["Carol"])
        )
        assert season.champions == ["Carol"]
        assert season.runner_up == "Alice"

    def test_champion_override(self, normalizer, four_team_standings):
        season = normalizer.normalize(
            2019,
            four_team_standings,
            overrides=SeasonOverrides(champion_override="Bob", runner_up_override="Dave"),
        )
        assert season.champion == "Bob"
        assert season.runner_up == "Dave"
        assert season.champion_confirmed

    def test_runner_up_skips_the_champion(self, normalizer, four_team_standings):
        season = normalizer.normalize(
            2019, four_team_standings, overrides=SeasonOverrides(champion_override="Bob")
        )
        assert season.runner_up == "Alice"

    def test_most_points_tie_keeps_better_rank(self, normalizer, make_standing):
        season = normalizer.normalize(
            2019,
            [
                make_standing("Bob", 2, points_for=1500.0),
                make_standing("Alice", 1, points_for=1500.0),
            ],
        )
        assert season.most_points.owner == "Alice"

    def test_owner_names_are_resolved(self, normalizer, make_standing):
        season = normalizer.normalize(
            2019,
            [make_standing("Bobby Smith", 1), make_standing("Alice", 2)],
            overrides=SeasonOverrides(runner_up_override="alice"),
        )
        assert season.champion == "Bob"
        assert season.standings[0].owner_name == "Bob"
        assert season.runner_up == "alice"


class TestNormalizationErrors:
    """Tests for the normalizer's boundary checks."""

    def test_empty_standings(self, normalizer):
        with pytest.raises(EmptyStandings):
            normalizer.normalize(2019, [])

    def test_too_many_split_champions(self, normalizer, four_team_standings):
        with pytest.raises(InvalidSplitChampions):
            normalizer.normalize(
                2019,
                four_team_standings,
                overrides=SeasonOverrides(split_champions=["Alice", "Bob", "Carol"]),
            )

    def test_rank_must_be_positive(self):
        with pytest.raises(ValidationError):
            Standing(rank=0, owner_name="Alice")

    def test_errors_share_a_base(self):
        assert issubclass(EmptyStandings, NormalizationError)
        assert issubclass(InvalidSplitChampions, NormalizationError)


class TestPlayoffs:
    """Tests for playoff appearance and week handling."""

    def test_made_playoffs_recomputed_from_count(self, normalizer, four_team_standings):
        season = normalizer.normalize(
            2019, four_team_standings, overrides=SeasonOverrides(playoff_team_count=3)
        )
        assert [s.made_playoffs for s in season.standings] == [True, True, True, False]

    def test_made_playoffs_trusted_without_count(self, normalizer, four_team_standings):
        season = normalizer.normalize(2019, four_team_standings)
        assert [s.made_playoffs for s in season.standings] == [True, True, False, False]

    def test_default_week_counts_without_matchups(self, normalizer, four_team_standings):
        season = normalizer.normalize(2019, four_team_standings)
        assert season.weekly_scores is None
        assert season.regular_season_weeks == 14
        assert season.playoff_weeks == 3

    def test_week_counts_follow_the_matchups(self, normalizer, four_team_standings, make_matchup):
        season = normalizer.normalize(
            2019,
            four_team_standings,
            [make_matchup(1, "Alice", 100, "Bob", 90), make_matchup(16, "Alice", 110, "Bob", 95)],
        )
        assert season.regular_season_weeks == 14
        assert season.playoff_weeks == 2
        assert season.final_week == 16


class TestChampionshipFlag:
    """Tests for identifying the title game."""

    def test_consolation_game_is_not_the_final(
        self, normalizer, four_team_standings, make_matchup
    ):
        season = normalizer.normalize(
            2019,
            four_team_standings,
            [
                make_matchup(14, "Alice", 120, "Dave", 80, matchup_id=1),
                make_matchup(15, "Alice", 130, "Carol", 100, matchup_id=1),
                make_matchup(17, "Carol", 99, "Dave", 98, matchup_id=1),
                make_matchup(17, "Bob", 101, "Alice", 125, matchup_id=2),
            ],
        )
        flags = {(m.week, m.matchup_id): (m.is_playoff, m.is_championship) for m in season.weekly_scores}
        assert flags[(14, 1)] == (False, False)
        assert flags[(15, 1)] == (True, False)
        assert flags[(17, 1)] == (True, False)
        assert flags[(17, 2)] == (True, True)

    def test_split_year_final_is_between_co_champions(self, make_matchup):
        flagged = flag_championship(
            [
                make_matchup(17, "Alice", 100, "Carol", 90, matchup_id=1),
                make_matchup(17, "Bob", 100, "Alice", 100, matchup_id=2),
            ],
            ["Alice", "Bob"],
            "",
            14,
        )
        assert [m.is_championship for m in flagged] == [False, True]

    def test_existing_flag_is_cleared(self, make_matchup):
        stale = make_matchup(16, "Carol", 100, "Dave", 90).model_copy(
            update={"is_championship": True}
        )
        flagged = flag_championship([stale], ["Alice"], "Bob", 14)
        assert not flagged[0].is_championship
        assert flagged[0].is_playoff

    def test_no_matchups(self):
        assert flag_championship([], ["Alice"], "Bob", 14) == []


class TestNormalizeRaw:
    """Tests for normalizing ingestion output."""

    def test_raw_playoff_count_and_source(self, normalizer, four_team_standings):
        raw = RawSeason(
            year=2023,
            standings=four_team_standings,
            playoff_team_count=2,
            source=DataSource.ESPN,
        )
        season = normalizer.normalize_raw(raw)
        assert season.sources == [DataSource.ESPN]
        assert [s.made_playoffs for s in season.standings] == [True, True, False, False]

    def test_override_count_beats_raw_count(self, normalizer, four_team_standings):
        raw = RawSeason(year=2023, standings=four_team_standings, playoff_team_count=2)
        season = normalizer.normalize_raw(raw, SeasonOverrides(playoff_team_count=1))
        assert [s.made_playoffs for s in season.standings] == [True, False, False, False]

    def test_custom_defaults(self, four_team_standings):
        season = SeasonNormalizer(regular_season_weeks=13, playoff_weeks=2).normalize(
            2010, four_team_standings
        )
        assert season.final_week == 15
