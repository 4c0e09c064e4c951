from enum import Enum


class DataSource(str, Enum):
    CSV = "CSV"
    ESPN = "ESPN"
    MANUAL = "MANUAL"


class RecordCategory(str, Enum):
    MOST_CHAMPIONSHIPS = "MOST_CHAMPIONSHIPS"
    BEST_WIN_PERCENTAGE = "BEST_WIN_PERCENTAGE"
    MOST_WINS_SEASON = "MOST_WINS_SEASON"
    MOST_POINTS_SEASON = "MOST_POINTS_SEASON"
    HIGHEST_WEEKLY_SCORE = "HIGHEST_WEEKLY_SCORE"
    MOST_PLAYOFF_APPEARANCES = "MOST_PLAYOFF_APPEARANCES"
    MOST_POINTS_TITLES = "MOST_POINTS_TITLES"
    MOST_LAST_PLACE = "MOST_LAST_PLACE"
    MOST_CAREER_WINS = "MOST_CAREER_WINS"
    MOST_SEASONS = "MOST_SEASONS"
    MOST_CAREER_POINTS = "MOST_CAREER_POINTS"
    MOST_RUNNER_UPS = "MOST_RUNNER_UPS"
    IRON_MAN = "IRON_MAN"  # Most consecutive seasons played
