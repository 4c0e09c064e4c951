# league_history/utils/misc_utils.py
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional


def slugify(text: str) -> str:
    """Generates a consistent, URL-safe id from a display name."""
    slug = text.lower().strip()
    # Keep letters, digits, whitespace, underscore and hyphen
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def round_half_up(value: float, places: int = 1) -> float:
    """Rounds like the site always has (2.25 -> 2.3), not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_win_percentage(wins: int, losses: int, ties: int = 0) -> float:
    total_games = wins + losses + ties
    if total_games == 0:
        return 0.0
    return round_half_up(wins / total_games * 100, 1)


def format_record(wins: int, losses: int, ties: Optional[int] = None) -> str:
    if ties:
        return f"{wins}-{losses}-{ties}"
    return f"{wins}-{losses}"


def get_year_range(years: List[int]) -> str:
    if not years:
        return ""
    ordered = sorted(years)
    if len(ordered) == 1:
        return str(ordered[0])
    first, last = ordered[0], ordered[-1]
    if last - first + 1 == len(ordered):
        return f"{first}-{last}"
    return f"{first}-{last} ({len(ordered)} seasons)"
