from typing import List, Optional

from pydantic import Field, computed_field

from .base import LeagueModel
from .enums import DataSource


class Standing(LeagueModel):
    """One owner's season-end result row."""

    rank: int = Field(..., ge=1, description="Final placement, 1 = best.")
    owner_name: str
    team_name: str = "Unknown Team"
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    made_playoffs: bool = False

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties


class TeamScore(LeagueModel):
    owner_name: str
    team_name: str = "Unknown Team"
    score: float = 0.0
    projected: Optional[float] = None


class WeeklyMatchup(LeagueModel):
    """One scheduled game between two owners."""

    week: int = Field(..., ge=1)
    matchup_id: int = 0
    home_team: TeamScore
    away_team: TeamScore
    is_playoff: bool = False
    is_championship: bool = False

    @property
    def margin(self) -> float:
        return abs(self.home_team.score - self.away_team.score)


class MostPoints(LeagueModel):
    owner: str
    team_name: str
    points: float


class Season(LeagueModel):
    """One year's complete, normalized record."""

    year: int
    standings: List[Standing]
    weekly_scores: Optional[List[WeeklyMatchup]] = None
    # One name normally, two for a split championship
    champions: List[str] = Field(default_factory=list, max_length=2)
    runner_up: str = ""
    # True when the champion came from an explicit source (CSV flag, override),
    # False when it was read off rank 1
    champion_confirmed: bool = False
    most_points: MostPoints
    last_place: str
    league_size: int
    regular_season_weeks: int
    playoff_weeks: int
    sources: List[DataSource] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def champion(self) -> str:
        return " & ".join(self.champions)

    @property
    def is_split_championship(self) -> bool:
        return len(self.champions) == 2

    @property
    def final_week(self) -> int:
        return self.regular_season_weeks + self.playoff_weeks


class RawSeason(LeagueModel):
    """One season as delivered by an ingestion source, before normalization."""

    year: int
    standings: List[Standing]
    matchups: Optional[List[WeeklyMatchup]] = None
    regular_season_weeks: Optional[int] = None
    playoff_team_count: Optional[int] = None
    source: DataSource = DataSource.MANUAL
