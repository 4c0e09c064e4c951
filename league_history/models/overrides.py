from typing import Dict, List, Optional

from pydantic import Field, field_validator

from .base import LeagueModel


class SeasonOverrides(LeagueModel):
    """Operator corrections applied while normalizing a single season."""

    champion_override: Optional[str] = None
    runner_up_override: Optional[str] = None
    split_champions: Optional[List[str]] = None
    playoff_team_count: Optional[int] = Field(None, ge=1)


class LeagueOverrides(LeagueModel):
    """The owner-mappings document maintained out-of-band by league operators.

    Passed explicitly to the resolver, normalizer and aggregator; nothing in
    the pipeline reads it from module state.
    """

    name_fixes: Dict[str, str] = Field(default_factory=dict)
    by_display_name: Dict[str, str] = Field(default_factory=dict)
    split_championships: Dict[int, List[str]] = Field(default_factory=dict)
    champion_overrides: Dict[int, str] = Field(default_factory=dict)
    runner_up_overrides: Dict[int, str] = Field(default_factory=dict)
    playoff_team_counts: Dict[int, int] = Field(default_factory=dict)

    @field_validator("split_championships")
    @classmethod
    def _drop_empty_splits(cls, value: Dict[int, List[str]]) -> Dict[int, List[str]]:
        return {year: names for year, names in value.items() if names}

    def for_year(
        self, year: int, default_playoff_team_count: Optional[int] = None
    ) -> SeasonOverrides:
        return SeasonOverrides(
            champion_override=self.champion_overrides.get(year),
            runner_up_override=self.runner_up_overrides.get(year),
            split_champions=self.split_championships.get(year),
            playoff_team_count=self.playoff_team_counts.get(
                year, default_playoff_team_count
            ),
        )
