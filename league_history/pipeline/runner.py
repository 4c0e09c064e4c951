from typing import Dict, List, Mapping, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from league_history.calculation.hall_of_fame import select_hall_of_fame
from league_history.calculation.head_to_head import (
    CLOSE_GAME_MARGIN,
    calculate_head_to_head,
    calculate_rivalries,
)
from league_history.calculation.leaderboard import create_leaderboard
from league_history.calculation.league_summary import calculate_all_time_stats
from league_history.calculation.records import calculate_records
from league_history.identity.resolver import IdentityResolver, InvalidIdentity
from league_history.models.overrides import LeagueOverrides, SeasonOverrides
from league_history.models.owner import Owner
from league_history.models.season import RawSeason, Season
from league_history.models.stats import LeagueStatistics
from league_history.normalization.csv_processor import CSVProcessResult
from league_history.normalization.normalizer import (
    DEFAULT_PLAYOFF_WEEKS,
    DEFAULT_REGULAR_SEASON_WEEKS,
    InvalidSplitChampions,
    NormalizationError,
    SeasonNormalizer,
)
from league_history.pipeline.aggregator import OwnerAggregator
from league_history.pipeline.merger import merge


class PipelineResult(BaseModel):
    """Canonical output of one run, plus what went wrong along the way."""

    seasons: List[Season] = Field(default_factory=list)
    owners: List[Owner] = Field(default_factory=list)
    failed_years: Dict[int, str] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


def normalize_seasons(
    raw_by_year: Mapping[int, RawSeason],
    normalizer: SeasonNormalizer,
    overrides_by_year: Optional[Mapping[int, SeasonOverrides]] = None,
) -> Tuple[List[Season], Dict[int, str], List[str]]:
    """Normalizes each year on its own so one bad season never stops the rest.

    A season with too many split champions is retried without the split and
    reported as a warning. Any other normalization or identity error marks
    the year as failed.

    Returns:
        (seasons sorted by year, failed year -> reason, warnings)
    """
    overrides_by_year = overrides_by_year or {}
    seasons: List[Season] = []
    failed: Dict[int, str] = {}
    warnings: List[str] = []

    for year in sorted(raw_by_year):
        raw = raw_by_year[year]
        overrides = overrides_by_year.get(year)
        try:
            try:
                season = normalizer.normalize_raw(raw, overrides)
            except InvalidSplitChampions as e:
                message = f"{year}: {e} Falling back to the ranked champion."
                logger.warning(message)
                warnings.append(message)
                season = normalizer.normalize_raw(
                    raw, overrides.model_copy(update={"split_champions": None})
                )
        except (NormalizationError, InvalidIdentity) as e:
            logger.error(f"Skipping season {year} ({raw.source.value}): {e}")
            failed[year] = f"{type(e).__name__}: {e}"
            continue
        seasons.append(season)

    return seasons, failed, warnings


def _base_overrides(
    csv_result: CSVProcessResult, league_overrides: LeagueOverrides
) -> Dict[int, SeasonOverrides]:
    # Operator overrides beat the CSV flag columns
    overrides: Dict[int, SeasonOverrides] = {}
    for year in csv_result.years:
        flags = csv_result.overrides_for(year)
        operator = league_overrides.for_year(year)
        overrides[year] = operator.model_copy(
            update={
                "champion_override": operator.champion_override or flags.champion_override,
                "runner_up_override": operator.runner_up_override or flags.runner_up_override,
            }
        )
    return overrides


def run_pipeline(
    csv_result: Optional[CSVProcessResult] = None,
    espn_by_year: Optional[Mapping[int, RawSeason]] = None,
    league_overrides: Optional[LeagueOverrides] = None,
    regular_season_weeks: int = DEFAULT_REGULAR_SEASON_WEEKS,
    playoff_weeks: int = DEFAULT_PLAYOFF_WEEKS,
    current_year: Optional[int] = None,
) -> PipelineResult:
    """Normalize, merge and aggregate both sources into the canonical dataset.

    Pure: no I/O, and the same inputs always give the same result.
    """
    csv_result = csv_result or CSVProcessResult()
    espn_by_year = espn_by_year or {}
    league_overrides = league_overrides or LeagueOverrides()

    resolver = IdentityResolver(league_overrides.name_fixes, league_overrides.by_display_name)
    normalizer = SeasonNormalizer(resolver, regular_season_weeks, playoff_weeks)

    base_raw = {raw.year: raw for raw in csv_result.raw_seasons()}
    base, base_failed, base_warnings = normalize_seasons(
        base_raw, normalizer, _base_overrides(csv_result, league_overrides)
    )
    overlay_overrides = {year: league_overrides.for_year(year) for year in espn_by_year}
    overlay, overlay_failed, overlay_warnings = normalize_seasons(
        espn_by_year, normalizer, overlay_overrides
    )

    seasons = merge(base, {season.year: season for season in overlay})
    warnings = [f"CSV {error}" for error in csv_result.errors]
    warnings.extend(base_warnings)
    warnings.extend(overlay_warnings)

    # A year only fails outright when no source produced it
    present = {season.year for season in seasons}
    failed_years: Dict[int, str] = {}
    for source, failures in (("csv", base_failed), ("espn", overlay_failed)):
        for year, reason in failures.items():
            if year in present:
                warnings.append(f"{year}: {source} season skipped ({reason})")
            elif year in failed_years:
                failed_years[year] = f"{failed_years[year]}; {reason}"
            else:
                failed_years[year] = reason

    aggregator = OwnerAggregator(resolver, league_overrides.split_championships)
    owners = aggregator.aggregate(seasons, current_year)

    if failed_years:
        logger.warning(f"Pipeline finished with failed years: {sorted(failed_years)}")
    logger.success(f"Pipeline complete: {len(seasons)} seasons, {len(owners)} owners")
    return PipelineResult(
        seasons=seasons,
        owners=owners,
        failed_years=failed_years,
        warnings=warnings,
    )


def build_statistics(
    seasons: List[Season],
    owners: List[Owner],
    close_margin: float = CLOSE_GAME_MARGIN,
    rivalry_limit: Optional[int] = None,
) -> LeagueStatistics:
    """Every statistics view over the canonical dataset."""
    return LeagueStatistics(
        leaderboard=create_leaderboard(owners),
        records=calculate_records(owners, seasons),
        head_to_head=calculate_head_to_head(seasons, owners),
        rivalries=calculate_rivalries(seasons, owners, close_margin, rivalry_limit),
        all_time=calculate_all_time_stats(owners, seasons),
        hall_of_fame=select_hall_of_fame(owners),
    )
