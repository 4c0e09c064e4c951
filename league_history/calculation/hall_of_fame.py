from typing import Sequence

from loguru import logger

from league_history.models.owner import Owner
from league_history.models.stats import HallOfFame

MIN_CHAMPIONSHIPS = 2.0
MIN_POINTS_TITLES = 5
IRON_MAN_SEASONS = 15
ELITE_MIN_SEASONS = 5
ELITE_WIN_PERCENTAGE = 55.0


def is_hall_of_famer(owner: Owner) -> bool:
    return (
        owner.championship_count >= MIN_CHAMPIONSHIPS
        or len(owner.most_points_seasons) >= MIN_POINTS_TITLES
    )


def select_hall_of_fame(owners: Sequence[Owner]) -> HallOfFame:
    """Inductees, iron men and elite winners.

    Inductees need two titles (split titles count half) or five most-points
    titles. Every list is sorted by its headline number, highest first, and
    keeps the input order among equals.
    """
    inductees = sorted(
        (o for o in owners if is_hall_of_famer(o)),
        key=lambda o: o.championship_count,
        reverse=True,
    )
    iron_men = sorted(
        (o for o in owners if o.total_seasons >= IRON_MAN_SEASONS),
        key=lambda o: o.total_seasons,
        reverse=True,
    )
    elite = sorted(
        (
            o
            for o in owners
            if o.total_seasons >= ELITE_MIN_SEASONS
            and o.stats.win_percentage >= ELITE_WIN_PERCENTAGE
        ),
        key=lambda o: o.stats.win_percentage,
        reverse=True,
    )
    logger.debug(f"Hall of fame: {len(inductees)} inductees")
    return HallOfFame(
        inductees=[o.name for o in inductees],
        iron_men=[o.name for o in iron_men],
        elite_winners=[o.name for o in elite],
    )
