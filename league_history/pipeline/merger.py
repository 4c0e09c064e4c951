from typing import Dict, List, Mapping, Sequence

from loguru import logger

from league_history.models.season import Season
from league_history.normalization.normalizer import flag_championship


def _merge_year(base: Season, overlay: Season) -> Season:
    """Overlay a season onto the base season for the same year.

    The overlay's standings and matchups replace the base's wholesale, along
    with everything derived from them. An explicit champion in the base (CSV
    flag or override) survives an overlay whose champion was only read off
    rank 1.
    """
    keep_base_champion = base.champion_confirmed and not overlay.champion_confirmed
    champions = base.champions if keep_base_champion else overlay.champions
    runner_up = base.runner_up if keep_base_champion else overlay.runner_up

    weekly_scores = overlay.weekly_scores
    if keep_base_champion and weekly_scores:
        weekly_scores = flag_championship(
            weekly_scores, champions, runner_up, overlay.regular_season_weeks
        )

    sources = list(base.sources)
    sources.extend(s for s in overlay.sources if s not in sources)

    return overlay.model_copy(
        update={
            "champions": list(champions),
            "runner_up": runner_up,
            "champion_confirmed": base.champion_confirmed or overlay.champion_confirmed,
            "weekly_scores": weekly_scores,
            "sources": sources,
        }
    )


def merge(
    base_seasons: Sequence[Season], overlay_by_year: Mapping[int, Season]
) -> List[Season]:
    """Merges base (historical CSV) seasons with overlay (API) seasons.

    Args:
        base_seasons: Seasons from the historical source, any order.
        overlay_by_year: Authoritative seasons keyed by year.

    Returns:
        Exactly one Season per distinct year, sorted ascending by year.
    """
    merged: Dict[int, Season] = {}
    for season in base_seasons:
        if season.year in merged:
            logger.warning(f"Duplicate base season {season.year}; keeping the later one")
        merged[season.year] = season

    replaced = added = 0
    for year, overlay in overlay_by_year.items():
        if overlay.year != year:
            logger.warning(f"Overlay keyed {year} holds season {overlay.year}; using key")
            overlay = overlay.model_copy(update={"year": year})
        if year in merged:
            merged[year] = _merge_year(merged[year], overlay)
            replaced += 1
        else:
            merged[year] = overlay
            added += 1

    logger.info(
        f"Merged seasons: {len(merged)} total ({replaced} overlaid, {added} added "
        f"from overlay, {len(merged) - replaced - added} base-only)"
    )
    return [merged[year] for year in sorted(merged)]
