from typing import Optional, Sequence

from loguru import logger

from league_history.models.owner import Owner
from league_history.models.season import Season
from league_history.models.stats import (
    AllTimeStats,
    ScoringGame,
    StreakHolder,
    TitleHolder,
)


def calculate_all_time_stats(owners: Sequence[Owner], seasons: Sequence[Season]) -> AllTimeStats:
    """League-wide totals and single-game extremes.

    Returns zeroed stats (and None for every "best of") when there is no data.
    """
    total_games = 0
    total_points = 0.0
    highest: Optional[ScoringGame] = None
    lowest: Optional[ScoringGame] = None

    for season in sorted(seasons, key=lambda s: s.year):
        total_games += len(season.standings)
        total_points += sum(s.points_for for s in season.standings)

        for matchup in season.weekly_scores or []:
            for team in (matchup.home_team, matchup.away_team):
                game = ScoringGame(
                    owner_name=team.owner_name,
                    points=team.score,
                    year=season.year,
                    week=matchup.week,
                )
                if team.score > 0 and (highest is None or team.score > highest.points):
                    highest = game
                # Zero scores are unplayed games, not real lows
                if team.score > 0 and (lowest is None or team.score < lowest.points):
                    lowest = game

    most_titles = None
    win_streak = None
    lose_streak = None
    for owner in owners:
        if owner.championship_count > 0 and (
            most_titles is None or owner.championship_count > most_titles.count
        ):
            most_titles = TitleHolder(owner_name=owner.name, count=owner.championship_count)
        if owner.stats.longest_win_streak > 0 and (
            win_streak is None or owner.stats.longest_win_streak > win_streak.streak
        ):
            win_streak = StreakHolder(owner_name=owner.name, streak=owner.stats.longest_win_streak)
        if owner.stats.longest_losing_streak > 0 and (
            lose_streak is None or owner.stats.longest_losing_streak > lose_streak.streak
        ):
            lose_streak = StreakHolder(
                owner_name=owner.name, streak=owner.stats.longest_losing_streak
            )

    stats = AllTimeStats(
        total_seasons=len(seasons),
        total_games_played=total_games,
        total_points_scored=total_points,
        average_points_per_game=total_points / total_games if total_games else 0.0,
        highest_scoring_game=highest,
        lowest_scoring_game=lowest,
        most_championships=most_titles,
        longest_win_streak=win_streak,
        longest_lose_streak=lose_streak,
        owners_count=len(owners),
    )
    logger.debug(f"All-time stats: {stats.total_seasons} seasons, {stats.total_games_played} rows")
    return stats
