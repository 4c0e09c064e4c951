from collections import Counter
from typing import List, Optional, Sequence

from loguru import logger

from league_history.identity.resolver import IdentityResolver
from league_history.models.enums import DataSource
from league_history.models.overrides import SeasonOverrides
from league_history.models.season import (
    MostPoints,
    RawSeason,
    Season,
    Standing,
    TeamScore,
    WeeklyMatchup,
)
from league_history.utils.misc_utils import slugify

DEFAULT_REGULAR_SEASON_WEEKS = 14
DEFAULT_PLAYOFF_WEEKS = 3


class NormalizationError(Exception):
    """Custom exception for season normalization errors."""

    pass


class EmptyStandings(NormalizationError):
    """A season was presented with no standings at all."""

    pass


class InvalidSplitChampions(NormalizationError):
    """A split-championship override named more than two owners."""

    pass


def flag_championship(
    matchups: Sequence[WeeklyMatchup],
    champions: Sequence[str],
    runner_up: str,
    regular_season_weeks: int,
) -> List[WeeklyMatchup]:
    """Marks the single title game among ``matchups``.

    The title game is the final-period playoff matchup between the two
    co-champions (split year) or between the champion and the runner-up.
    Consolation games and byes can share that period, so "last week" alone
    is not enough. Every other matchup has its championship flag cleared.
    """
    if not matchups:
        return list(matchups)

    final_week = max(m.week for m in matchups)
    if len(champions) == 2:
        title_pair = {slugify(champions[0]), slugify(champions[1])}
    elif champions and runner_up:
        title_pair = {slugify(champions[0]), slugify(runner_up)}
    else:
        title_pair = set()

    flagged: List[WeeklyMatchup] = []
    found = False
    for matchup in matchups:
        is_playoff = matchup.is_playoff or matchup.week > regular_season_weeks
        is_championship = False
        if not found and len(title_pair) == 2 and is_playoff and matchup.week == final_week:
            owners = {
                slugify(matchup.home_team.owner_name),
                slugify(matchup.away_team.owner_name),
            }
            if owners == title_pair:
                is_championship = True
                found = True
        flagged.append(
            matchup.model_copy(
                update={"is_playoff": is_playoff, "is_championship": is_championship}
            )
        )

    if title_pair and not found:
        logger.debug(
            f"No championship matchup found in week {final_week} for {sorted(title_pair)}"
        )
    return flagged


class SeasonNormalizer:
    """Turns one season of raw standings and matchups into a canonical Season."""

    def __init__(
        self,
        resolver: Optional[IdentityResolver] = None,
        regular_season_weeks: int = DEFAULT_REGULAR_SEASON_WEEKS,
        playoff_weeks: int = DEFAULT_PLAYOFF_WEEKS,
    ):
        self.resolver = resolver or IdentityResolver()
        self.regular_season_weeks = regular_season_weeks
        self.playoff_weeks = playoff_weeks
        logger.debug(
            f"SeasonNormalizer initialized ({regular_season_weeks} regular weeks, "
            f"{playoff_weeks} playoff weeks by default)."
        )

    def normalize_raw(
        self, raw: RawSeason, overrides: Optional[SeasonOverrides] = None
    ) -> Season:
        overrides = overrides or SeasonOverrides()
        if overrides.playoff_team_count is None and raw.playoff_team_count:
            overrides = overrides.model_copy(
                update={"playoff_team_count": raw.playoff_team_count}
            )
        return self.normalize(
            raw.year,
            raw.standings,
            raw.matchups,
            overrides,
            regular_season_weeks=raw.regular_season_weeks,
            sources=[raw.source],
        )

    def normalize(
        self,
        year: int,
        standings: Sequence[Standing],
        matchups: Optional[Sequence[WeeklyMatchup]] = None,
        overrides: Optional[SeasonOverrides] = None,
        regular_season_weeks: Optional[int] = None,
        sources: Optional[List[DataSource]] = None,
    ) -> Season:
        """Normalizes a single season.

        Args:
            year: The season year.
            standings: Season-end rows, in any order.
            matchups: Weekly games, if the source has them.
            overrides: Operator corrections for champion, runner-up,
                split titles and playoff field size.
            regular_season_weeks: Length of the regular season, when the
                source knows it; otherwise the configured default.
            sources: Where the season came from.

        Returns:
            The canonical Season.

        Raises:
            EmptyStandings: If ``standings`` is empty.
            InvalidSplitChampions: If more than two split champions are given.
            InvalidIdentity: If any owner name is blank.
        """
        overrides = overrides or SeasonOverrides()
        if not standings:
            raise EmptyStandings(f"Season {year} has no standings.")

        split = [name for name in (overrides.split_champions or []) if name and name.strip()]
        if len(split) > 2:
            raise InvalidSplitChampions(
                f"Season {year} lists {len(split)} split champions: {split}"
            )

        ordered = sorted(
            (self._normalize_standing(s, overrides.playoff_team_count) for s in standings),
            key=lambda s: s.rank,
        )
        duplicate_ranks = [rank for rank, count in Counter(s.rank for s in ordered).items() if count > 1]
        if duplicate_ranks:
            logger.warning(f"Season {year} has duplicate ranks {duplicate_ranks}")

        # max() keeps the first of equal values, i.e. the better-ranked owner
        most_points_standing = max(ordered, key=lambda s: s.points_for)
        last_place_standing = ordered[-1]

        champions, runner_up, confirmed = self._resolve_champions(ordered, split, overrides)

        regular_weeks = regular_season_weeks or self.regular_season_weeks
        playoff_weeks = self.playoff_weeks
        weekly_scores: Optional[List[WeeklyMatchup]] = None
        if matchups:
            weekly_scores = sorted(
                (self._normalize_matchup(m) for m in matchups),
                key=lambda m: (m.week, m.matchup_id),
            )
            max_week = weekly_scores[-1].week
            playoff_weeks = max(0, max_week - regular_weeks)
            regular_weeks = max_week - playoff_weeks
            weekly_scores = flag_championship(weekly_scores, champions, runner_up, regular_weeks)

        season = Season(
            year=year,
            standings=ordered,
            weekly_scores=weekly_scores,
            champions=champions,
            runner_up=runner_up,
            champion_confirmed=confirmed,
            most_points=MostPoints(
                owner=most_points_standing.owner_name,
                team_name=most_points_standing.team_name,
                points=most_points_standing.points_for,
            ),
            last_place=last_place_standing.owner_name,
            league_size=len(ordered),
            regular_season_weeks=regular_weeks,
            playoff_weeks=playoff_weeks,
            sources=list(sources or []),
        )
        logger.debug(
            f"Normalized {year}: champion '{season.champion}', runner-up "
            f"'{season.runner_up}', {season.league_size} teams, "
            f"{len(weekly_scores or [])} matchups"
        )
        return season

    def _normalize_standing(
        self, standing: Standing, playoff_team_count: Optional[int]
    ) -> Standing:
        update = {"owner_name": self.resolver.canonical_name(standing.owner_name)}
        if playoff_team_count:
            update["made_playoffs"] = standing.rank <= playoff_team_count
        return standing.model_copy(update=update)

    def _normalize_matchup(self, matchup: WeeklyMatchup) -> WeeklyMatchup:
        return matchup.model_copy(
            update={
                "home_team": self._normalize_team_score(matchup.home_team),
                "away_team": self._normalize_team_score(matchup.away_team),
            }
        )

    def _normalize_team_score(self, team: TeamScore) -> TeamScore:
        return team.model_copy(
            update={"owner_name": self.resolver.canonical_name(team.owner_name)}
        )

    def _resolve_champions(
        self,
        ordered: List[Standing],
        split: List[str],
        overrides: SeasonOverrides,
    ):
        """Returns (champions, runner_up, confirmed) in override priority order."""
        if len(split) == 2:
            return [self.resolver.canonical_name(name) for name in split], "", True

        confirmed = True
        if split:
            # A one-name split list is just a champion override
            champion = self.resolver.canonical_name(split[0])
        elif overrides.champion_override:
            champion = self.resolver.canonical_name(overrides.champion_override)
        else:
            champion = ordered[0].owner_name
            confirmed = False

        if overrides.runner_up_override:
            runner_up = self.resolver.canonical_name(overrides.runner_up_override)
        else:
            champion_id = slugify(champion)
            runner_up = next(
                (s.owner_name for s in ordered if slugify(s.owner_name) != champion_id),
                "",
            )
        return [champion], runner_up, confirmed
