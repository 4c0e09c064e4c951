from typing import List, Optional

from pydantic import Field

from .base import LeagueModel
from .enums import RecordCategory
from league_history.utils.misc_utils import slugify


class LeaderboardEntry(LeagueModel):
    owner_name: str
    owner_id: str
    championships: float
    runner_ups: int
    most_points_titles: int
    last_place_finishes: int
    playoff_percentage: float
    win_percentage: float
    total_seasons: int
    total_wins: int
    total_losses: int
    total_ties: int
    total_points_for: float
    playoff_appearances: int
    playoff_wins: int
    playoff_losses: int
    best_record: str  # e.g. "12-1 (2015)"
    worst_record: str
    avg_points_per_season: float
    is_active: bool


class RecordEntry(LeagueModel):
    owner_name: str
    value: float
    display_value: str
    year: Optional[int] = None
    week: Optional[int] = None
    details: Optional[str] = None


class LeagueRecord(LeagueModel):
    category: RecordCategory
    title: str
    description: str
    leader: RecordEntry
    top_ten: List[RecordEntry]


class GameMargin(LeagueModel):
    winner: Optional[str] = None  # None for a tied game
    margin: float
    year: int
    week: int


class HeadToHeadRecord(LeagueModel):
    owner1: str
    owner2: str
    owner1_wins: int = 0
    owner2_wins: int = 0
    ties: int = 0
    total_matchups: int = 0
    owner1_points_for: float = 0.0
    owner2_points_for: float = 0.0
    biggest_blowout: Optional[GameMargin] = None
    closest_game: Optional[GameMargin] = None

    @property
    def pair_key(self) -> str:
        return "|".join(sorted((slugify(self.owner1), slugify(self.owner2))))

    def swapped(self) -> "HeadToHeadRecord":
        return self.model_copy(
            update={
                "owner1": self.owner2,
                "owner2": self.owner1,
                "owner1_wins": self.owner2_wins,
                "owner2_wins": self.owner1_wins,
                "owner1_points_for": self.owner2_points_for,
                "owner2_points_for": self.owner1_points_for,
            }
        )


class Rivalry(LeagueModel):
    owner1: str
    owner2: str
    rivalry_score: float
    head_to_head: HeadToHeadRecord
    playoff_meetings: int = 0
    championship_meetings: int = 0
    close_games: int = 0  # Decided by less than the close-game margin


class ScoringGame(LeagueModel):
    owner_name: str
    points: float
    year: int
    week: int


class StreakHolder(LeagueModel):
    owner_name: str
    streak: int


class TitleHolder(LeagueModel):
    owner_name: str
    count: float


class AllTimeStats(LeagueModel):
    total_seasons: int = 0
    total_games_played: int = 0
    total_points_scored: float = 0.0
    average_points_per_game: float = 0.0
    highest_scoring_game: Optional[ScoringGame] = None
    lowest_scoring_game: Optional[ScoringGame] = None
    most_championships: Optional[TitleHolder] = None
    longest_win_streak: Optional[StreakHolder] = None
    longest_lose_streak: Optional[StreakHolder] = None
    owners_count: int = Field(0, description="Distinct owners across all seasons.")


class HallOfFame(LeagueModel):
    """Owner names grouped by honor, each list already in display order."""

    inductees: List[str] = Field(default_factory=list)
    iron_men: List[str] = Field(default_factory=list)
    elite_winners: List[str] = Field(default_factory=list)


class LeagueStatistics(LeagueModel):
    """Every derived view, computed together from one pipeline run."""

    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)
    records: List[LeagueRecord] = Field(default_factory=list)
    head_to_head: List[HeadToHeadRecord] = Field(default_factory=list)
    rivalries: List[Rivalry] = Field(default_factory=list)
    all_time: AllTimeStats = Field(default_factory=AllTimeStats)
    hall_of_fame: HallOfFame = Field(default_factory=HallOfFame)
