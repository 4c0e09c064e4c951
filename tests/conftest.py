"""Shared builders for league history tests."""

from typing import Optional

import pytest

from league_history.identity.resolver import IdentityResolver
from league_history.models.season import Standing, TeamScore, WeeklyMatchup
from league_history.normalization.normalizer import SeasonNormalizer


@pytest.fixture
def make_standing():
    def _make(
        owner: str,
        rank: int,
        wins: int = 0,
        losses: int = 0,
        ties: int = 0,
        points_for: float = 0.0,
        points_against: float = 0.0,
        made_playoffs: bool = False,
        team_name: Optional[str] = None,
    ) -> Standing:
        return Standing(
            rank=rank,
            owner_name=owner,
            team_name=team_name or f"{owner} Team",
            wins=wins,
            losses=losses,
            ties=ties,
            points_for=points_for,
            points_against=points_against,
            made_playoffs=made_playoffs,
        )

    return _make


@pytest.fixture
def make_matchup():
    def _make(
        week: int,
        home: str,
        home_score: float,
        away: str,
        away_score: float,
        matchup_id: int = 0,
        is_playoff: bool = False,
    ) -> WeeklyMatchup:
        return WeeklyMatchup(
            week=week,
            matchup_id=matchup_id,
            home_team=TeamScore(owner_name=home, score=home_score),
            away_team=TeamScore(owner_name=away, score=away_score),
            is_playoff=is_playoff,
        )

    return _make


@pytest.fixture
def resolver():
    return IdentityResolver(name_fixes={"Bobby Smith": "Bob"})


@pytest.fixture
def normalizer(resolver):
    return SeasonNormalizer(resolver)


@pytest.fixture
def two_season_league(normalizer, make_standing, make_matchup):
    """Alice and Bob meet once in 2021 and once in 2022; Carol plays both years."""
    season_2021 = normalizer.normalize(
        2021,
        [
            make_standing("Alice", 1, wins=10, losses=4, points_for=1500.0, made_playoffs=True),
            make_standing("Bob", 2, wins=9, losses=5, points_for=1450.0, made_playoffs=True),
            make_standing("Carol", 3, wins=4, losses=10, points_for=1200.0),
        ],
        [
            make_matchup(5, "Alice", 150.0, "Bob", 140.0, matchup_id=1),
            make_matchup(5, "Carol", 90.0, "Dave", 80.0, matchup_id=2),
        ],
    )
    season_2022 = normalizer.normalize(
        2022,
        [
            make_standing("Bob", 1, wins=11, losses=3, points_for=1600.0, made_playoffs=True),
            make_standing("Carol", 2, wins=8, losses=6, points_for=1400.0, made_playoffs=True),
            make_standing("Alice", 3, wins=6, losses=8, points_for=1300.0),
        ],
        [make_matchup(6, "Bob", 160.0, "Alice", 100.0, matchup_id=1)],
    )
    return [season_2021, season_2022]
