from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from league_history.models.owner import Owner
from league_history.models.season import Season, WeeklyMatchup
from league_history.models.stats import GameMargin, HeadToHeadRecord, Rivalry
from league_history.utils.misc_utils import slugify

CLOSE_GAME_MARGIN = 10.0

# Rivalry score weights
COMPETITIVENESS_WEIGHT = 2
PLAYOFF_MEETING_WEIGHT = 5
CHAMPIONSHIP_MEETING_WEIGHT = 10
CLOSE_GAME_WEIGHT = 3

PairKey = Tuple[str, str]


class _PairTally:
    """Head-to-head record plus the rivalry signals for one pair of owners."""

    def __init__(self, owner1: str, owner2: str):
        self.record = HeadToHeadRecord(owner1=owner1, owner2=owner2)
        self.playoff_meetings = 0
        self.championship_meetings = 0
        self.close_games = 0

    def add(self, season: Season, matchup: WeeklyMatchup, owner1_is_home: bool, close_margin: float):
        record = self.record
        if owner1_is_home:
            owner1_score, owner2_score = matchup.home_team.score, matchup.away_team.score
        else:
            owner1_score, owner2_score = matchup.away_team.score, matchup.home_team.score

        record.total_matchups += 1
        record.owner1_points_for += owner1_score
        record.owner2_points_for += owner2_score

        margin = matchup.margin
        if owner1_score > owner2_score:
            record.owner1_wins += 1
            winner = record.owner1
        elif owner2_score > owner1_score:
            record.owner2_wins += 1
            winner = record.owner2
        else:
            record.ties += 1
            winner = None

        if winner is not None:
            game = GameMargin(winner=winner, margin=margin, year=season.year, week=matchup.week)
            # Strict comparisons: the first game found keeps the title on a tie
            if record.biggest_blowout is None or margin > record.biggest_blowout.margin:
                record.biggest_blowout = game
            if record.closest_game is None or margin < record.closest_game.margin:
                record.closest_game = game

        if matchup.is_championship:
            self.championship_meetings += 1
        elif matchup.is_playoff:
            self.playoff_meetings += 1
        if margin < close_margin:
            self.close_games += 1


def _display_names(owners: Optional[Iterable[Owner]]) -> Dict[str, str]:
    return {owner.id: owner.name for owner in owners or []}


def _tally_pairs(
    seasons: Sequence[Season],
    owners: Optional[Iterable[Owner]] = None,
    close_margin: float = CLOSE_GAME_MARGIN,
) -> Dict[PairKey, _PairTally]:
    names = _display_names(owners)
    tallies: Dict[PairKey, _PairTally] = {}

    for season in sorted(seasons, key=lambda s: s.year):
        for matchup in sorted(season.weekly_scores or [], key=lambda m: (m.week, m.matchup_id)):
            home_id = slugify(matchup.home_team.owner_name)
            away_id = slugify(matchup.away_team.owner_name)
            if home_id == away_id:
                logger.debug(
                    f"Skipping {season.year} week {matchup.week} matchup of "
                    f"'{matchup.home_team.owner_name}' against themselves"
                )
                continue
            names.setdefault(home_id, matchup.home_team.owner_name)
            names.setdefault(away_id, matchup.away_team.owner_name)

            # Sorted ids make the key independent of home/away roles
            key: PairKey = tuple(sorted((home_id, away_id)))  # type: ignore[assignment]
            tally = tallies.get(key)
            if tally is None:
                tally = _PairTally(names[key[0]], names[key[1]])
                tallies[key] = tally
            tally.add(season, matchup, owner1_is_home=home_id == key[0], close_margin=close_margin)
    return tallies


def calculate_head_to_head(
    seasons: Sequence[Season], owners: Optional[Iterable[Owner]] = None
) -> List[HeadToHeadRecord]:
    """All-time records for every pair of owners who have met at least once.

    ``owner1`` is always the owner whose id sorts first. Seasons without
    weekly matchups contribute nothing.
    """
    tallies = _tally_pairs(seasons, owners)
    return [tallies[key].record for key in sorted(tallies)]


def head_to_head(
    seasons: Sequence[Season],
    owner_a: str,
    owner_b: str,
    owners: Optional[Iterable[Owner]] = None,
) -> Optional[HeadToHeadRecord]:
    """The record between two owners, oriented so ``owner1`` is ``owner_a``."""
    id_a, id_b = slugify(owner_a), slugify(owner_b)
    if id_a == id_b:
        return None
    key: PairKey = tuple(sorted((id_a, id_b)))  # type: ignore[assignment]
    tally = _tally_pairs(seasons, owners).get(key)
    if tally is None:
        return None
    return tally.record if key[0] == id_a else tally.record.swapped()


def rivalry_score(
    record: HeadToHeadRecord, playoff_meetings: int, championship_meetings: int, close_games: int
) -> float:
    competitiveness = min(record.owner1_wins, record.owner2_wins)
    return (
        COMPETITIVENESS_WEIGHT * competitiveness
        + PLAYOFF_MEETING_WEIGHT * playoff_meetings
        + CHAMPIONSHIP_MEETING_WEIGHT * championship_meetings
        + CLOSE_GAME_WEIGHT * close_games
        + record.total_matchups
    )


def calculate_rivalries(
    seasons: Sequence[Season],
    owners: Optional[Iterable[Owner]] = None,
    close_margin: float = CLOSE_GAME_MARGIN,
    limit: Optional[int] = None,
) -> List[Rivalry]:
    """Ranks every head-to-head pairing by rivalry score, highest first."""
    tallies = _tally_pairs(seasons, owners, close_margin)
    rivalries = [
        Rivalry(
            owner1=tally.record.owner1,
            owner2=tally.record.owner2,
            rivalry_score=rivalry_score(
                tally.record,
                tally.playoff_meetings,
                tally.championship_meetings,
                tally.close_games,
            ),
            head_to_head=tally.record,
            playoff_meetings=tally.playoff_meetings,
            championship_meetings=tally.championship_meetings,
            close_games=tally.close_games,
        )
        for _, tally in sorted(tallies.items())
    ]
    # Stable sort keeps pair-key order among equal scores
    rivalries.sort(key=lambda r: r.rivalry_score, reverse=True)
    if limit is not None:
        rivalries = rivalries[:limit]
    logger.debug(f"Calculated {len(rivalries)} rivalries from {len(tallies)} pairings")
    return rivalries
