"""
Farkle Duel - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. Rule configuration and snapshots are frozen dataclasses so
they can be shared between matches and handed to other threads safely; dice
and players are the only mutable records and live inside a Match.
"""

from dataclasses import asdict, dataclass
from enum import Enum, auto


NUM_DICE = 6
NUM_SEATS = 2
TIE = "tie"


class MatchStatus(Enum):
    """Lifecycle of a match."""
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class ScoringCategory(Enum):
    """Categories of scoring combinations."""
    SINGLE_ONE = auto()
    SINGLE_FIVE = auto()
    THREE_OF_A_KIND = auto()
    FOUR_OF_A_KIND = auto()
    FIVE_OF_A_KIND = auto()
    SIX_OF_A_KIND = auto()
    SIX_ONES = auto()
    FULL_STRAIGHT = auto()     # 1-2-3-4-5-6
    FIVE_STRAIGHT = auto()     # 1-5 or 2-6
    FOUR_STRAIGHT = auto()     # 1-4, 2-5 or 3-6
    THREE_PAIRS = auto()
    TWO_TRIPLETS = auto()


@dataclass(frozen=True)
class ScoringBreakdown:
    """
    A single scoring component within a selection.

    Attributes:
        category: The type of scoring combination
        dice_values: The dice that contributed to this score
        points: Points awarded for this combination
        description: Human-readable description
    """
    category: ScoringCategory
    dice_values: tuple[int, ...]
    points: int
    description: str


@dataclass(frozen=True)
class ScoringRules:
    """
    Point values and feature toggles for a table.

    Supplied once per match and never mutated, so a single instance can be
    shared by every match in the process.
    """
    single_one: int = 100
    single_five: int = 50
    triple_one: int = 1000
    triple_two: int = 200
    triple_three: int = 300
    triple_four: int = 400
    triple_five: int = 500
    triple_six: int = 600
    straight: int = 1500
    three_pairs: int = 1500
    four_of_a_kind: int = 1000
    five_of_a_kind: int = 2000
    six_of_a_kind: int = 3000
    six_ones: int = 5000
    two_triplets: int = 2500
    four_straight: int = 500
    five_straight: int = 1200

    enable_three_pairs: bool = True
    enable_two_triplets: bool = True
    enable_four_straight: bool = False
    enable_five_straight: bool = False

    win_score: int = 10000

    def __post_init__(self) -> None:
        """Validate point values."""
        for name, value in asdict(self).items():
            if name.startswith("enable_"):
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {type(value).__name__}.")
            if value < 0:
                raise ValueError(f"{name} cannot be negative, got {value}.")
        if self.win_score <= 0:
            raise ValueError(f"win_score must be positive, got {self.win_score}.")

    def triple_value(self, face: int) -> int:
        """Points for three dice showing `face`."""
        return (
            self.triple_one,
            self.triple_two,
            self.triple_three,
            self.triple_four,
            self.triple_five,
            self.triple_six,
        )[face - 1]

    def single_value(self, face: int) -> int:
        """Points for a lone die; only 1s and 5s score on their own."""
        if face == 1:
            return self.single_one
        if face == 5:
            return self.single_five
        return 0

    def kind_value(self, face: int, count: int) -> int:
        """Points for `count` (3-6) dice of the same face."""
        if count == 3:
            return self.triple_value(face)
        if count == 4:
            return self.four_of_a_kind
        if count == 5:
            return self.five_of_a_kind
        if count == 6:
            return self.six_of_a_kind
        raise ValueError(f"N-of-a-kind needs 3 to 6 dice, got {count}.")


DEFAULT_RULES = ScoringRules()


@dataclass
class Die:
    """A rolled die. Only `selected` changes after the roll."""
    id: int
    face: int
    selected: bool = False


@dataclass
class Player:
    """Occupant of a seat."""
    identity: str
    display_name: str
    total_score: int = 0
    connected: bool = True


@dataclass(frozen=True)
class DieSnapshot:
    id: int
    face: int
    selected: bool


@dataclass(frozen=True)
class PlayerSnapshot:
    identity: str
    display_name: str
    total_score: int
    connected: bool


@dataclass(frozen=True)
class RollResult:
    """
    Outcome of a roll.

    Attributes:
        dice: The freshly rolled dice
        bust: No scoring move exists; the turn waits for resolve_bust
        hot_dice: The selection that preceded this roll used every die
        round_score: Points accumulated this turn after the selection
    """
    dice: tuple[DieSnapshot, ...]
    bust: bool
    hot_dice: bool
    round_score: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MatchSnapshot:
    """
    Full, serializable state of a match.

    `players` always has two entries; an empty seat is None. `winner` is
    a seat index, the TIE marker, or None while undecided.
    """
    room_id: str
    players: tuple[PlayerSnapshot | None, ...]
    current_seat: int
    round_score: int
    dice_to_roll: int
    current_dice: tuple[DieSnapshot, ...]
    status: MatchStatus
    winner: int | str | None = None
    final_round_active: bool = False
    final_round_trigger_seat: int | None = None
    bust_pending: bool = False
    win_score: int = 10000

    def to_dict(self) -> dict:
        """Convert to the wire dictionary format."""
        data = asdict(self)
        data["status"] = self.status.value
        return data
