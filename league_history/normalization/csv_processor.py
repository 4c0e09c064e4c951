import csv
import io
from typing import Any, Dict, List, Optional, Set

from loguru import logger
from pydantic import BaseModel, Field

from league_history.models.enums import DataSource
from league_history.models.overrides import SeasonOverrides
from league_history.models.season import RawSeason, Standing

# Expected format:
# Year, OwnerName, TeamName, Rank, Wins, Losses, Ties, PointsFor, PointsAgainst,
# Champion, RunnerUp, MadePlayoffs
REQUIRED_COLUMNS = [
    "Year",
    "OwnerName",
    "TeamName",
    "Wins",
    "Losses",
    "PointsFor",
    "PointsAgainst",
]


class CSVFormatError(ValueError):
    """Raised when a CSV upload is missing required columns."""

    pass


class CSVProcessResult(BaseModel):
    """Standings parsed from a historical CSV upload, grouped by year."""

    standings_by_year: Dict[int, List[Standing]] = Field(default_factory=dict)
    champions: Dict[int, str] = Field(default_factory=dict)
    runner_ups: Dict[int, str] = Field(default_factory=dict)
    owner_names: Set[str] = Field(default_factory=set)
    errors: List[str] = Field(default_factory=list)

    @property
    def years(self) -> List[int]:
        return sorted(self.standings_by_year)

    def raw_seasons(self) -> List[RawSeason]:
        return [
            RawSeason(
                year=year,
                standings=self.standings_by_year[year],
                source=DataSource.CSV,
            )
            for year in self.years
        ]

    def overrides_for(self, year: int) -> SeasonOverrides:
        return SeasonOverrides(
            champion_override=self.champions.get(year),
            runner_up_override=self.runner_ups.get(year),
        )


def _read_rows(content: str) -> csv.DictReader:
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
    return reader


def validate_csv(content: Optional[str]) -> List[str]:
    """Checks CSV structure before processing. Returns a list of problems."""
    if not content or not content.strip():
        return ["CSV content is empty"]

    headers = _read_rows(content).fieldnames or []
    return [f"Missing required column: {col}" for col in REQUIRED_COLUMNS if col not in headers]


def _cell(row: Dict[str, Optional[str]], column: str) -> str:
    return (row.get(column) or "").strip()


def _parse_int(value: str) -> int:
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return 0


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _is_yes(value: str) -> bool:
    return value.lower() == "yes"


def _place_unranked(result: CSVProcessResult, unranked: Dict[int, List[Dict[str, Any]]]) -> None:
    """Ranks rows with no usable rank after the ranked rows of their year, in file order."""
    for year, rows in unranked.items():
        standings = result.standings_by_year.setdefault(year, [])
        next_rank = max((s.rank for s in standings), default=0) + 1
        logger.warning(
            f"{year}: {len(rows)} CSV row(s) have no rank; placing them from rank {next_rank}"
        )
        for offset, row in enumerate(rows):
            standings.append(Standing(rank=next_rank + offset, **row))


def parse_csv(content: str, min_year: int = 2004, max_year: int = 2025) -> CSVProcessResult:
    """Parses historical standings rows into per-year standings.

    Args:
        content: The raw CSV text, with a header row.
        min_year: Earliest season the league played.
        max_year: Latest season the league played.

    Returns:
        A CSVProcessResult. Bad rows are reported in ``errors`` and skipped;
        they never abort the whole file.

    Raises:
        CSVFormatError: If required columns are missing.
    """
    problems = validate_csv(content)
    if problems:
        raise CSVFormatError("; ".join(problems))

    result = CSVProcessResult()
    unranked: Dict[int, List[Dict[str, Any]]] = {}
    for index, row in enumerate(_read_rows(content)):
        line = index + 2  # Header is line 1
        raw_year = _cell(row, "Year")
        try:
            year = int(raw_year)
        except ValueError:
            year = None
        if year is None or year < min_year or year > max_year:
            result.errors.append(f'Row {line}: Invalid year "{raw_year}"')
            continue

        owner_name = _cell(row, "OwnerName")
        if not owner_name:
            result.errors.append(f"Row {line}: Missing owner name")
            continue
        result.owner_names.add(owner_name)

        if _is_yes(_cell(row, "Champion")):
            result.champions[year] = owner_name
        if _is_yes(_cell(row, "RunnerUp")):
            result.runner_ups[year] = owner_name

        rank = _parse_int(_cell(row, "Rank"))
        fields = dict(
            owner_name=owner_name,
            team_name=_cell(row, "TeamName") or "Unknown Team",
            wins=_parse_int(_cell(row, "Wins")),
            losses=_parse_int(_cell(row, "Losses")),
            ties=_parse_int(_cell(row, "Ties")),
            points_for=_parse_float(_cell(row, "PointsFor")),
            points_against=_parse_float(_cell(row, "PointsAgainst")),
            made_playoffs=_is_yes(_cell(row, "MadePlayoffs")),
        )
        if rank > 0:
            result.standings_by_year.setdefault(year, []).append(Standing(rank=rank, **fields))
        else:
            unranked.setdefault(year, []).append(fields)

    _place_unranked(result, unranked)

    if result.errors:
        logger.warning(f"CSV parsed with {len(result.errors)} row error(s)")
    logger.info(
        f"Parsed CSV: {len(result.years)} season(s), {len(result.owner_names)} owner(s)"
    )
    return result
