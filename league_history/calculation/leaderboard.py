from typing import List, Optional, Sequence

from league_history.models.owner import Owner, SeasonRecord
from league_history.models.stats import LeaderboardEntry
from league_history.utils.misc_utils import format_record


def _summarize(record: Optional[SeasonRecord]) -> str:
    if record is None:
        return "N/A"
    return f"{format_record(record.wins, record.losses, record.ties)} ({record.year})"


def create_leaderboard(owners: Sequence[Owner]) -> List[LeaderboardEntry]:
    """One row per owner for the all-time stats table.

    Rows keep the order of ``owners``; sorting is left to the page.
    """
    return [
        LeaderboardEntry(
            owner_name=owner.name,
            owner_id=owner.id,
            championships=owner.championship_count,
            runner_ups=len(owner.runner_ups),
            most_points_titles=len(owner.most_points_seasons),
            last_place_finishes=len(owner.last_place_seasons),
            playoff_percentage=owner.stats.playoff_percentage,
            win_percentage=owner.stats.win_percentage,
            total_seasons=owner.total_seasons,
            total_wins=owner.stats.total_wins,
            total_losses=owner.stats.total_losses,
            total_ties=owner.stats.total_ties,
            total_points_for=owner.stats.total_points_for,
            playoff_appearances=owner.playoff_appearances,
            playoff_wins=owner.playoff_record.wins,
            playoff_losses=owner.playoff_record.losses,
            best_record=_summarize(owner.stats.best_record),
            worst_record=_summarize(owner.stats.worst_record),
            avg_points_per_season=owner.stats.avg_points_per_season,
            is_active=owner.is_active,
        )
        for owner in owners
    ]
