import sys
from typing import Dict

from league_history.logging.setup import setup_logging
from league_history.config.settings import settings

setup_logging()

from loguru import logger

from league_history.identity.resolver import IdentityResolver
from league_history.models.season import RawSeason
from league_history.normalization.csv_processor import (
    CSVFormatError,
    CSVProcessResult,
    parse_csv,
)
from league_history.normalization.espn import process_league_payload
from league_history.pipeline.runner import PipelineResult, build_statistics, run_pipeline
from league_history.storage.json_store import (
    StorageError,
    load_csv_text,
    load_league_payloads,
    load_overrides,
    load_owners,
    save_owners,
    save_seasons,
)
from league_history.utils.misc_utils import get_year_range

from rich import print
from rich.panel import Panel
from rich.table import Table


def print_summary(result: PipelineResult) -> None:
    stats = build_statistics(
        result.seasons,
        result.owners,
        close_margin=settings.close_game_margin,
        rivalry_limit=settings.rivalry_top_n,
    )
    all_time = stats.all_time
    failed = ", ".join(str(year) for year in sorted(result.failed_years)) or "none"
    print(
        Panel(
            f"Seasons: {all_time.total_seasons} ({get_year_range([s.year for s in result.seasons])})\n"
            f"Owners: {all_time.owners_count}\n"
            f"Points scored: {all_time.total_points_scored:,.2f}\n"
            f"Hall of Fame: {', '.join(stats.hall_of_fame.inductees) or 'none'}\n"
            f"Failed years: {failed}\n"
            f"Warnings: {len(result.warnings)}",
            title="League History",
        )
    )

    table = Table(title="Top Rivalries")
    table.add_column("Rivalry")
    table.add_column("Record", justify="center")
    table.add_column("Score", justify="right")
    for rivalry in stats.rivalries:
        record = rivalry.head_to_head
        table.add_row(
            f"{rivalry.owner1} vs {rivalry.owner2}",
            f"{record.owner1_wins}-{record.owner2_wins}-{record.ties}",
            f"{rivalry.rivalry_score:g}",
        )
    print(table)


def main() -> int:
    """Main entry point: rebuild seasons.json and owners.json from the raw sources."""
    logger.info("Starting league history rebuild")

    try:
        overrides = load_overrides(settings.resolved_overrides_path)
        resolver = IdentityResolver(overrides.name_fixes, overrides.by_display_name)

        csv_result = CSVProcessResult()
        if settings.resolved_csv_path.exists():
            csv_result = parse_csv(
                load_csv_text(settings.resolved_csv_path),
                min_year=settings.min_year,
                max_year=settings.max_year,
            )
        else:
            logger.warning(f"No historical CSV at {settings.resolved_csv_path}")

        known_owners = []
        if settings.resolved_owners_output.exists():
            known_owners = load_owners(settings.resolved_owners_output)

        espn_by_year: Dict[int, RawSeason] = {}
        for year, payload in load_league_payloads(settings.resolved_espn_dir).items():
            espn_by_year[year] = process_league_payload(
                payload,
                year,
                resolver,
                points_multiplier=settings.points_multiplier,
                default_playoff_team_count=settings.playoff_team_count,
                known_owners=known_owners,
            )
    except (StorageError, CSVFormatError) as e:
        logger.critical(f"Could not load league inputs: {e}")
        return 1

    if not csv_result.years and not espn_by_year:
        logger.error("No season data found. Nothing to do.")
        return 1

    result = run_pipeline(
        csv_result,
        espn_by_year,
        overrides,
        regular_season_weeks=settings.regular_season_weeks,
        playoff_weeks=settings.playoff_weeks,
        current_year=settings.current_year,
    )
    for warning in result.warnings:
        logger.warning(warning)

    try:
        save_seasons(result.seasons, settings.resolved_seasons_output)
        save_owners(result.owners, settings.resolved_owners_output)
    except StorageError as e:
        logger.error(f"Failed to save league documents: {e}")
        return 1

    print_summary(result)
    return 0 if not result.failed_years else 2


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
