"""
Farkle Duel Game Engine.

Pure Python game logic with zero transport/database dependencies.
Handles dice rolling, scoring, bust detection, hot dice and turn sequencing.
"""

from src.engine.base import (
    DEFAULT_RULES,
    TIE,
    DieSnapshot,
    MatchSnapshot,
    MatchStatus,
    PlayerSnapshot,
    RollResult,
    ScoringBreakdown,
    ScoringCategory,
    ScoringRules,
)
from src.engine.errors import GameError
from src.engine.match import Match
from src.engine.scoring import FarkleEngine

__all__ = [
    # Data Classes
    "DieSnapshot",
    "MatchSnapshot",
    "PlayerSnapshot",
    "RollResult",
    "ScoringBreakdown",
    "ScoringRules",
    # Enums & constants
    "DEFAULT_RULES",
    "MatchStatus",
    "ScoringCategory",
    "TIE",
    # Engine
    "FarkleEngine",
    "GameError",
    "Match",
]
