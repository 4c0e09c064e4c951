import logging
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Input/Output Paths
    data_dir: Path = Field(Path("data"), description="Directory holding league data files.")
    csv_path: Optional[Path] = Field(
        None, description="Historical standings CSV. Defaults to <data_dir>/history.csv."
    )
    espn_dir: Optional[Path] = Field(
        None, description="Directory of per-year league payloads (<year>.json)."
    )
    overrides_path: Optional[Path] = Field(
        None, description="Owner mappings / override document. Defaults to <data_dir>/owner-mappings.json."
    )
    seasons_output: Optional[Path] = Field(None, description="Where seasons.json is written.")
    owners_output: Optional[Path] = Field(None, description="Where owners.json is written.")

    # League Configuration
    current_year: Optional[int] = Field(
        None, description="Season that decides which owners are active. Defaults to the latest."
    )
    min_year: int = Field(2004, description="First season the league played.")
    max_year: int = Field(2025, description="Last season accepted from the CSV.")
    regular_season_weeks: int = Field(14, ge=1)
    playoff_weeks: int = Field(3, ge=0)
    playoff_team_count: int = Field(6, ge=1)
    points_multiplier: float = Field(
        1.0, gt=0, description="Scales platform scores onto the historical scale."
    )

    # Statistics Settings
    close_game_margin: float = Field(10.0, gt=0)
    rivalry_top_n: int = Field(10, ge=1)

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def resolved_csv_path(self) -> Path:
        return self.csv_path or self.data_dir / "history.csv"

    @property
    def resolved_espn_dir(self) -> Path:
        return self.espn_dir or self.data_dir / "espn"

    @property
    def resolved_overrides_path(self) -> Path:
        return self.overrides_path or self.data_dir / "owner-mappings.json"

    @property
    def resolved_seasons_output(self) -> Path:
        return self.seasons_output or self.data_dir / "seasons.json"

    @property
    def resolved_owners_output(self) -> Path:
        return self.owners_output or self.data_dir / "owners.json"


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        if settings.min_year > settings.max_year:
            raise ValueError(
                f"min_year ({settings.min_year}) is after max_year ({settings.max_year})"
            )
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
