"""
Farkle Duel - Application Settings

Loads configuration from environment variables using Pydantic Settings.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from src.engine.base import ScoringRules


DEFAULT_ROOM_NAMES = ["Table 1", "Table 2", "Table 3", "Table 4", "Table 5"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    # Needed to read the private intake topics
    supabase_service_key: str | None = None

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Tables
    room_names: list[str] = Field(default_factory=lambda: list(DEFAULT_ROOM_NAMES))
    bust_delay_seconds: float = Field(default=2.0, ge=0)

    # Rules
    win_score: int = Field(default=10000, gt=0)
    enable_three_pairs: bool = True
    enable_two_triplets: bool = True
    enable_four_straight: bool = False
    enable_five_straight: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    def scoring_rules(self) -> ScoringRules:
        """Rule table for every match on this server."""
        return ScoringRules(
            win_score=self.win_score,
            enable_three_pairs=self.enable_three_pairs,
            enable_two_triplets=self.enable_two_triplets,
            enable_four_straight=self.enable_four_straight,
            enable_five_straight=self.enable_five_straight,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Set up root logging from settings."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
