from typing import Callable, Iterable, List, NamedTuple, Sequence, Tuple

from loguru import logger

from league_history.models.enums import RecordCategory
from league_history.models.owner import Owner
from league_history.models.season import Season
from league_history.models.stats import LeagueRecord, RecordEntry
from league_history.utils.misc_utils import format_record

MIN_SEASONS_FOR_WIN_PERCENTAGE = 3
TOP_N = 10


class RecordCandidate(NamedTuple):
    """One contender for a record; lower ``tie_break`` wins equal values."""

    entry: RecordEntry
    tie_break: Tuple = ()


Eligibility = Callable[[RecordCandidate], bool]


def _has_value(candidate: RecordCandidate) -> bool:
    return candidate.entry.value > 0


def rank_candidates(
    candidates: Iterable[RecordCandidate],
    eligible: Eligibility = _has_value,
    limit: int = TOP_N,
) -> List[RecordEntry]:
    """Sorts qualifying candidates by value (desc), then tie-break, then name."""
    qualifying = [c for c in candidates if eligible(c)]
    qualifying.sort(
        key=lambda c: (
            -c.entry.value,
            c.tie_break,
            c.entry.owner_name.casefold(),
            c.entry.year or 0,
            c.entry.week or 0,
        )
    )
    return [c.entry for c in qualifying[:limit]]


def _format_count(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def _years(years: Sequence[int]) -> str:
    return f"Years: {', '.join(str(y) for y in years)}"


# --- Candidate builders, one per category ---


def _championships(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=owner.championship_count,
                display_value=_format_count(owner.championship_count),
                details=_years(owner.championships),
            ),
            (-len(owner.runner_ups),),
        )


def _win_percentage(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        stats = owner.stats
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=stats.win_percentage,
                display_value=f"{stats.win_percentage:.1f}%",
                details=(
                    f"{format_record(stats.total_wins, stats.total_losses, stats.total_ties)}"
                    f" over {owner.total_seasons} seasons"
                ),
            ),
            (-stats.total_wins,),
        )


def _wins_in_season(owners: Sequence[Owner], seasons: Sequence[Season]):
    for season in seasons:
        for standing in season.standings:
            yield RecordCandidate(
                RecordEntry(
                    owner_name=standing.owner_name,
                    value=standing.wins,
                    display_value=format_record(standing.wins, standing.losses, standing.ties),
                    year=season.year,
                ),
                (standing.losses, season.year),
            )


def _points_in_season(owners: Sequence[Owner], seasons: Sequence[Season]):
    for season in seasons:
        for standing in season.standings:
            yield RecordCandidate(
                RecordEntry(
                    owner_name=standing.owner_name,
                    value=standing.points_for,
                    display_value=f"{standing.points_for:.2f}",
                    year=season.year,
                    details=standing.team_name,
                ),
                (season.year,),
            )


def _weekly_scores(owners: Sequence[Owner], seasons: Sequence[Season]):
    for season in seasons:
        for matchup in season.weekly_scores or []:
            for team in (matchup.home_team, matchup.away_team):
                yield RecordCandidate(
                    RecordEntry(
                        owner_name=team.owner_name,
                        value=team.score,
                        display_value=f"{team.score:.2f}",
                        year=season.year,
                        week=matchup.week,
                        details=f"Week {matchup.week}",
                    ),
                    (season.year, matchup.week),
                )


def _playoff_appearances(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=owner.playoff_appearances,
                display_value=str(owner.playoff_appearances),
                details=f"{owner.stats.playoff_percentage:.1f}% playoff rate",
            ),
            (-owner.stats.playoff_percentage,),
        )


def _most_points_titles(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=len(owner.most_points_seasons),
                display_value=str(len(owner.most_points_seasons)),
                details=_years(owner.most_points_seasons),
            ),
            (owner.total_seasons,),
        )


def _last_place_finishes(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=len(owner.last_place_seasons),
                display_value=str(len(owner.last_place_seasons)),
                details=_years(owner.last_place_seasons),
            ),
            (owner.total_seasons,),
        )


def _career_wins(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        stats = owner.stats
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=stats.total_wins,
                display_value=str(stats.total_wins),
                details=f"{stats.win_percentage:.1f}% win rate",
            ),
            (-stats.win_percentage,),
        )


def _seasons_played(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=owner.total_seasons,
                display_value=str(owner.total_seasons),
            ),
            (-owner.stats.total_wins,),
        )


def _career_points(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        points = owner.stats.total_points_for
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=points,
                display_value=f"{points:.2f}",
                details=f"{owner.stats.avg_points_per_season:.2f} per season",
            ),
            (owner.total_seasons,),
        )


def _runner_ups(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=len(owner.runner_ups),
                display_value=str(len(owner.runner_ups)),
                details=_years(owner.runner_ups),
            ),
            (-owner.championship_count,),
        )


def _iron_man(owners: Sequence[Owner], seasons: Sequence[Season]):
    for owner in owners:
        span = owner.stats.longest_season_streak
        yield RecordCandidate(
            RecordEntry(
                owner_name=owner.name,
                value=span.length,
                display_value=str(span.length),
                year=span.end_year,
                details=f"{span.start_year}-{span.end_year}" if span.length else None,
            ),
            (span.start_year or 0,),
        )


class _RecordDefinition(NamedTuple):
    category: RecordCategory
    title: str
    description: str
    candidates: Callable[[Sequence[Owner], Sequence[Season]], Iterable[RecordCandidate]]
    eligible: Eligibility = _has_value


def _record_definitions(owners: Sequence[Owner], min_seasons: int) -> List[_RecordDefinition]:
    seasoned = {o.name for o in owners if o.total_seasons >= min_seasons}

    def has_min_seasons(candidate: RecordCandidate) -> bool:
        return candidate.entry.owner_name in seasoned

    definitions = [
        _RecordDefinition(
            RecordCategory.MOST_CHAMPIONSHIPS,
            "Most Championships",
            "Most league championships won",
            _championships,
        ),
        _RecordDefinition(
            RecordCategory.BEST_WIN_PERCENTAGE,
            "Best Win Percentage",
            f"Highest career win percentage (min. {min_seasons} seasons)",
            _win_percentage,
            has_min_seasons,
        ),
        _RecordDefinition(
            RecordCategory.MOST_WINS_SEASON,
            "Most Wins in a Season",
            "Best single-season record",
            _wins_in_season,
        ),
        _RecordDefinition(
            RecordCategory.MOST_POINTS_SEASON,
            "Most Points in a Season",
            "Highest scoring season",
            _points_in_season,
        ),
        _RecordDefinition(
            RecordCategory.HIGHEST_WEEKLY_SCORE,
            "Highest Single-Week Score",
            "Best weekly performance",
            _weekly_scores,
        ),
        _RecordDefinition(
            RecordCategory.MOST_PLAYOFF_APPEARANCES,
            "Most Playoff Appearances",
            "Most times making the playoffs",
            _playoff_appearances,
        ),
        _RecordDefinition(
            RecordCategory.MOST_POINTS_TITLES,
            'Most "Most Points" Titles',
            "Most times leading the league in points",
            _most_points_titles,
        ),
        _RecordDefinition(
            RecordCategory.MOST_LAST_PLACE,
            "Most Last Place Finishes",
            "Most times finishing in last place",
            _last_place_finishes,
        ),
        _RecordDefinition(
            RecordCategory.MOST_CAREER_WINS,
            "Most Career Wins",
            "Most regular-season wins all-time",
            _career_wins,
        ),
        _RecordDefinition(
            RecordCategory.MOST_SEASONS,
            "Most Seasons Played",
            "Most seasons in the league",
            _seasons_played,
        ),
        _RecordDefinition(
            RecordCategory.MOST_CAREER_POINTS,
            "Most Career Points",
            "Most points scored all-time",
            _career_points,
        ),
        _RecordDefinition(
            RecordCategory.MOST_RUNNER_UPS,
            "Most Runner-Up Finishes",
            "Most times losing in the championship",
            _runner_ups,
        ),
        _RecordDefinition(
            RecordCategory.IRON_MAN,
            "Iron Man Award",
            "Most consecutive seasons played",
            _iron_man,
        ),
    ]
    return definitions


def calculate_records(
    owners: Sequence[Owner],
    seasons: Sequence[Season],
    min_seasons: int = MIN_SEASONS_FOR_WIN_PERCENTAGE,
    limit: int = TOP_N,
) -> List[LeagueRecord]:
    """All-time league records, each with its leader and a top-N list.

    A category with no qualifying candidate is left out entirely.
    """
    definitions = _record_definitions(owners, min_seasons)

    records: List[LeagueRecord] = []
    for definition in definitions:
        top = rank_candidates(definition.candidates(owners, seasons), definition.eligible, limit)
        if not top:
            logger.debug(f"No qualifying entries for record {definition.category.value}")
            continue
        records.append(
            LeagueRecord(
                category=definition.category,
                title=definition.title,
                description=definition.description,
                leader=top[0],
                top_ten=top,
            )
        )
    logger.debug(f"Calculated {len(records)} league records")
    return records
