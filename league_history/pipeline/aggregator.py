from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from loguru import logger

from league_history.identity.resolver import IdentityRegistry, IdentityResolver
from league_history.models.owner import Owner, SeasonRecord, StreakSpan
from league_history.models.season import Season, Standing
from league_history.utils.misc_utils import (
    calculate_win_percentage,
    round_half_up,
)

SPLIT_CHAMPIONSHIP_CREDIT = 0.5


def _season_win_ratio(standing: Standing) -> float:
    games = standing.games_played
    return standing.wins / games if games else 0.0


def _season_record(year: int, standing: Standing) -> SeasonRecord:
    return SeasonRecord(
        year=year,
        wins=standing.wins,
        losses=standing.losses,
        ties=standing.ties,
        points_for=standing.points_for,
        points_against=standing.points_against,
    )


def longest_consecutive_span(years: Sequence[int]) -> StreakSpan:
    """Longest run of consecutive years; the earliest run wins ties."""
    ordered = sorted(set(years))
    if not ordered:
        return StreakSpan()
    best = StreakSpan(length=1, start_year=ordered[0], end_year=ordered[0])
    run_start, run_length = ordered[0], 1
    for previous, year in zip(ordered, ordered[1:]):
        if year == previous + 1:
            run_length += 1
        else:
            run_start, run_length = year, 1
        if run_length > best.length:
            best = StreakSpan(length=run_length, start_year=run_start, end_year=year)
    return best


class _WeeklyState:
    """Running weekly streak state for one owner."""

    __slots__ = ("win_run", "loss_run")

    def __init__(self):
        self.win_run = 0
        self.loss_run = 0


class OwnerAggregator:
    """Folds the full season list into one Owner record per identity.

    Owners are rebuilt from scratch on every call, never patched, so they are
    always consistent with the seasons passed in.
    """

    def __init__(
        self,
        resolver: Optional[IdentityResolver] = None,
        split_championships: Optional[Mapping[int, Sequence[str]]] = None,
    ):
        self.resolver = resolver or IdentityResolver()
        self.split_championships: Dict[int, List[str]] = {}
        for year, names in (split_championships or {}).items():
            names = [n for n in names if n and n.strip()]
            if len(names) != 2:
                logger.warning(
                    f"Ignoring split championship for {year}: expected 2 names, got {names}"
                )
                continue
            self.split_championships[int(year)] = list(names)

    def aggregate(
        self, seasons: Sequence[Season], current_year: Optional[int] = None
    ) -> List[Owner]:
        """Builds owner records for every identity seen in ``seasons``.

        Args:
            seasons: Normalized seasons; order does not matter.
            current_year: The season that decides ``is_active``. Defaults to
                the most recent season present.

        Returns:
            Owners sorted by canonical name, case-insensitive.
        """
        registry = IdentityRegistry(self.resolver)
        owners: Dict[str, Owner] = {}
        ordered = sorted(seasons, key=lambda s: s.year)

        self._seed_split_championships(registry, owners)
        best_ratios: Dict[str, Tuple[float, float]] = {}
        playoff_teams: Set[Tuple[int, str]] = set()
        for season in ordered:
            if not season.standings:
                raise AssertionError(
                    f"Season {season.year} reached aggregation with no standings"
                )
            for standing in season.standings:
                self._apply_standing(registry, owners, best_ratios, season, standing)
                if standing.made_playoffs:
                    playoff_teams.add((season.year, self._id(standing.owner_name)))

        self._apply_weekly_results(owners, ordered, playoff_teams)

        if current_year is None and ordered:
            current_year = ordered[-1].year
        active_ids = set()
        for season in ordered:
            if season.year == current_year:
                active_ids = {self._id(s.owner_name) for s in season.standings}

        for owner in owners.values():
            self._finalize(owner, owner.id in active_ids)

        result = sorted(owners.values(), key=lambda o: (o.name.casefold(), o.name))
        logger.info(
            f"Aggregated {len(result)} owners over {len(ordered)} seasons "
            f"({len(active_ids)} active in {current_year})"
        )
        return result

    def _id(self, name: str) -> str:
        return self.resolver.owner_id(name)

    def _owner_for(
        self,
        registry: IdentityRegistry,
        owners: Dict[str, Owner],
        name: str,
        team_name: Optional[str] = None,
    ) -> Owner:
        identity = registry.observe(name, team_name)
        owner = owners.get(identity.id)
        if owner is None:
            owner = Owner(id=identity.id, name=identity.canonical_name)
            owners[identity.id] = owner
        if team_name and team_name not in owner.team_names:
            owner.team_names.append(team_name)
        return owner

    def _seed_split_championships(
        self, registry: IdentityRegistry, owners: Dict[str, Owner]
    ) -> None:
        # Seeded before the standings pass so a co-champion missing from that
        # year's standings still gets credit
        for year in sorted(self.split_championships):
            for name in self.split_championships[year]:
                owner = self._owner_for(registry, owners, name)
                if year not in owner.championships:
                    owner.championships.append(year)
                    owner.championship_count += SPLIT_CHAMPIONSHIP_CREDIT

    def _apply_standing(
        self,
        registry: IdentityRegistry,
        owners: Dict[str, Owner],
        best_ratios: Dict[str, Tuple[float, float]],
        season: Season,
        standing: Standing,
    ) -> None:
        owner = self._owner_for(registry, owners, standing.owner_name, standing.team_name)
        year = season.year

        if year not in owner.seasons_played:
            owner.seasons_played.append(year)
            owner.total_seasons += 1
        else:
            logger.warning(f"{owner.name} appears more than once in {year} standings")

        champion_ids = {self._id(name) for name in season.champions}
        if year not in self.split_championships and owner.id in champion_ids:
            if year not in owner.championships:
                owner.championships.append(year)
                owner.championship_count += (
                    SPLIT_CHAMPIONSHIP_CREDIT if season.is_split_championship else 1.0
                )

        if season.runner_up and self._id(season.runner_up) == owner.id:
            if year not in owner.runner_ups:
                owner.runner_ups.append(year)
        if self._id(season.most_points.owner) == owner.id:
            if year not in owner.most_points_seasons:
                owner.most_points_seasons.append(year)
        if self._id(season.last_place) == owner.id:
            if year not in owner.last_place_seasons:
                owner.last_place_seasons.append(year)

        if standing.made_playoffs:
            owner.playoff_appearances += 1

        stats = owner.stats
        stats.total_wins += standing.wins
        stats.total_losses += standing.losses
        stats.total_ties += standing.ties
        stats.total_points_for += standing.points_for
        stats.total_points_against += standing.points_against

        # Best/worst are replaced only on strict improvement, so the earliest
        # of equally good (or bad) seasons is kept
        ratio = _season_win_ratio(standing)
        record = _season_record(year, standing)
        if owner.id not in best_ratios:
            stats.best_record = record
            stats.worst_record = record
            best_ratios[owner.id] = (ratio, ratio)
            return
        best_ratio, worst_ratio = best_ratios[owner.id]
        if ratio > best_ratio:
            stats.best_record = record
            best_ratio = ratio
        if ratio < worst_ratio:
            stats.worst_record = record
            worst_ratio = ratio
        best_ratios[owner.id] = (best_ratio, worst_ratio)

    def _apply_weekly_results(
        self,
        owners: Dict[str, Owner],
        seasons: Sequence[Season],
        playoff_teams: Set[Tuple[int, str]],
    ) -> None:
        """Playoff records and weekly win/loss streaks from matchup data.

        Seasons without matchups contribute nothing. Streaks run across
        consecutive seasons in (year, week) order; a tie ends both streaks.
        Playoff-period games count toward the playoff record only for owners
        who made the playoffs that year; consolation games are left out.
        """
        states: Dict[str, _WeeklyState] = {}
        for season in seasons:
            for matchup in sorted(season.weekly_scores or [], key=lambda m: (m.week, m.matchup_id)):
                sides = (
                    (matchup.home_team, matchup.away_team),
                    (matchup.away_team, matchup.home_team),
                )
                for team, opponent in sides:
                    owner = owners.get(self._id(team.owner_name))
                    if owner is None:
                        continue
                    state = states.setdefault(owner.id, _WeeklyState())
                    if team.score > opponent.score:
                        state.win_run += 1
                        state.loss_run = 0
                    elif team.score < opponent.score:
                        state.loss_run += 1
                        state.win_run = 0
                    else:
                        state.win_run = state.loss_run = 0

                    stats = owner.stats
                    stats.longest_win_streak = max(stats.longest_win_streak, state.win_run)
                    stats.longest_losing_streak = max(stats.longest_losing_streak, state.loss_run)

                    if matchup.is_playoff and (season.year, owner.id) in playoff_teams:
                        if team.score > opponent.score:
                            owner.playoff_record.wins += 1
                        elif team.score < opponent.score:
                            owner.playoff_record.losses += 1
                        else:
                            owner.playoff_record.ties += 1

    def _finalize(self, owner: Owner, is_active: bool) -> None:
        stats = owner.stats
        stats.win_percentage = calculate_win_percentage(
            stats.total_wins, stats.total_losses, stats.total_ties
        )
        if owner.total_seasons > 0:
            stats.playoff_percentage = round_half_up(
                owner.playoff_appearances / owner.total_seasons * 100, 1
            )
            stats.avg_points_per_season = round_half_up(
                stats.total_points_for / owner.total_seasons, 2
            )
            stats.avg_wins_per_season = round_half_up(
                stats.total_wins / owner.total_seasons, 1
            )
        stats.longest_season_streak = longest_consecutive_span(owner.seasons_played)
        owner.is_active = is_active

        owner.seasons_played.sort()
        owner.championships.sort()
        owner.runner_ups.sort()
        owner.most_points_seasons.sort()
        owner.last_place_seasons.sort()
