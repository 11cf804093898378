"""
Farkle Duel - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

from typing import Iterable

import pytest

from src.engine.base import ScoringRules
from src.engine.match import Match


class ScriptedDice:
    """Stand-in for random.Random that deals predetermined faces.

    Faces are consumed in order; when the script runs out every further
    die shows 2 (which never scores alone).
    """

    def __init__(self, faces: Iterable[int] = ()) -> None:
        self.faces = list(faces)

    def load(self, *faces: int) -> None:
        self.faces.extend(faces)

    def randint(self, a: int, b: int) -> int:
        if self.faces:
            return self.faces.pop(0)
        return 2


# =============================================================================
# SCORING TEST DATA
# =============================================================================

@pytest.fixture
def d6_scoring_rolls() -> dict[str, tuple[tuple[int, ...], int]]:
    """
    Common selections with expected scores under the default rules.

    Returns:
        Dict mapping name to (dice_values, expected_points)
    """
    return {
        # Singles
        "single_one": ((1,), 100),
        "single_five": ((5,), 50),
        "two_ones": ((1, 1), 200),
        "one_and_five": ((1, 5), 150),

        # Non-scoring
        "single_two": ((2,), 0),
        "pair_of_twos": ((2, 2), 0),
        "empty": ((), 0),

        # Three of a kind
        "three_ones": ((1, 1, 1), 1000),
        "three_twos": ((2, 2, 2), 200),
        "three_sixes": ((6, 6, 6), 600),

        # N of a kind
        "four_twos": ((2, 2, 2, 2), 1000),
        "five_fours": ((4, 4, 4, 4, 4), 2000),
        "six_fours": ((4, 4, 4, 4, 4, 4), 3000),
        "six_ones": ((1, 1, 1, 1, 1, 1), 5000),

        # Whole-set combinations
        "full_straight": ((1, 2, 3, 4, 5, 6), 1500),
        "full_straight_shuffled": ((6, 4, 2, 5, 3, 1), 1500),
        "three_pairs": ((2, 2, 3, 3, 4, 4), 1500),
        "two_triplets": ((2, 2, 2, 3, 3, 3), 2500),

        # Mixed
        "three_ones_plus_five": ((1, 1, 1, 5), 1050),
        "three_fours_plus_one": ((4, 4, 4, 1), 500),
    }


@pytest.fixture
def d6_bust_rolls() -> list[tuple[int, ...]]:
    """Rolls with no scoring move under the default rules."""
    return [
        (2,),
        (3, 4),
        (2, 3, 6),
        (2, 3, 4, 6),
        (2, 2, 3, 4, 6),
        (2, 3, 4, 6, 6, 3),
    ]


# =============================================================================
# MATCH FIXTURES
# =============================================================================

@pytest.fixture
def dice() -> ScriptedDice:
    return ScriptedDice()


@pytest.fixture
def rules() -> ScoringRules:
    return ScoringRules()


@pytest.fixture
def match(dice: ScriptedDice, rules: ScoringRules) -> Match:
    """A match with both players seated and seat 0 to play."""
    m = Match("Table 1", rules=rules, rng=dice)
    m.join("sid-alice", "Alice")
    m.join("sid-bob", "Bob")
    return m


def _select(match: Match, *faces: int) -> None:
    """Select one die per listed face on the match's table."""
    wanted = list(faces)
    for die in match.current_dice:
        if die.face in wanted and not die.selected:
            match.toggle_selection(match.current_player.identity, die.id)
            wanted.remove(die.face)
    assert not wanted, f"faces {wanted} not on the table"


@pytest.fixture
def select():
    """Helper that selects dice by face for the current player."""
    return _select
