from typing import List, Optional

from pydantic import Field

from .base import LeagueModel


class OwnerIdentity(LeagueModel):
    """A canonical person, regardless of the spelling or team name used."""

    id: str  # Slug of the canonical name
    canonical_name: str
    aliases: List[str] = Field(default_factory=list)
    team_names: List[str] = Field(default_factory=list)


class SeasonRecord(LeagueModel):
    year: int
    wins: int
    losses: int
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0


class PlayoffRecord(LeagueModel):
    wins: int = 0
    losses: int = 0
    ties: int = 0


class StreakSpan(LeagueModel):
    length: int = 0
    start_year: Optional[int] = None
    end_year: Optional[int] = None


class OwnerStats(LeagueModel):
    total_wins: int = 0
    total_losses: int = 0
    total_ties: int = 0
    total_points_for: float = 0.0
    total_points_against: float = 0.0
    # Always recomputed from the totals above
    win_percentage: float = 0.0
    playoff_percentage: float = 0.0
    best_record: Optional[SeasonRecord] = None
    worst_record: Optional[SeasonRecord] = None
    avg_points_per_season: float = 0.0
    avg_wins_per_season: float = 0.0
    longest_win_streak: int = 0
    longest_losing_streak: int = 0
    longest_season_streak: StreakSpan = Field(default_factory=StreakSpan)


class Owner(LeagueModel):
    """All career data for one owner identity."""

    id: str
    name: str
    team_names: List[str] = Field(default_factory=list)
    seasons_played: List[int] = Field(default_factory=list)
    championships: List[int] = Field(default_factory=list)
    # 0.5 per split title, so not necessarily len(championships)
    championship_count: float = 0.0
    runner_ups: List[int] = Field(default_factory=list)
    most_points_seasons: List[int] = Field(default_factory=list)
    last_place_seasons: List[int] = Field(default_factory=list)
    total_seasons: int = 0
    playoff_appearances: int = 0
    playoff_record: PlayoffRecord = Field(default_factory=PlayoffRecord)
    is_active: bool = False
    stats: OwnerStats = Field(default_factory=OwnerStats)
