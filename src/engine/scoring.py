"""
Farkle Duel - Scoring Engine

Scores a selection of D6 dice under a ScoringRules table. All methods are
stateless class methods operating on immutable inputs; the same rules
instance may be shared across every match.

A selection is scored as a whole. The engine never searches for the best
way to split a selection into smaller combinations: the player picks the
dice meant to be scored together, and the engine tells whether that pick
is legal and what it is worth.

Precedence (first match wins):
    - Six distinct faces: straight
    - Six 1s: six ones
    - Six of any other face: six of a kind
    - 1-5 or 2-6 (five dice, if enabled): five straight
    - 1-4, 2-5 or 3-6 (four dice, if enabled): four straight
    - Three pairs (six dice, if enabled)
    - Two triplets (six dice, if enabled)
    - Otherwise every face scores on its own: 3+ of a kind, plus loose 1s and 5s
"""

from collections import Counter
from typing import Sequence
import random

from src.engine.base import (
    DEFAULT_RULES,
    NUM_DICE,
    ScoringBreakdown,
    ScoringCategory,
    ScoringRules,
)
from src.engine.validators import validate_dice_count, validate_faces


FIVE_STRAIGHTS = (frozenset({1, 2, 3, 4, 5}), frozenset({2, 3, 4, 5, 6}))
FOUR_STRAIGHTS = (
    frozenset({1, 2, 3, 4}),
    frozenset({2, 3, 4, 5}),
    frozenset({3, 4, 5, 6}),
)

_KIND_CATEGORIES = {
    3: ScoringCategory.THREE_OF_A_KIND,
    4: ScoringCategory.FOUR_OF_A_KIND,
    5: ScoringCategory.FIVE_OF_A_KIND,
    6: ScoringCategory.SIX_OF_A_KIND,
}

_SINGLE_CATEGORIES = {
    1: ScoringCategory.SINGLE_ONE,
    5: ScoringCategory.SINGLE_FIVE,
}


class FarkleEngine:
    """
    Stateless scoring engine for the two-player Farkle table.

    All methods are class methods operating on immutable data.
    """

    NUM_DICE = NUM_DICE

    @classmethod
    def roll_dice(
        cls,
        count: int = NUM_DICE,
        rng: random.Random | None = None
    ) -> tuple[int, ...]:
        """
        Roll the specified number of D6 dice.

        Args:
            count: Number of dice to roll (default: 6)
            rng: Source of randomness (default: the module-level generator)

        Returns:
            Tuple of face values
        """
        count = validate_dice_count(count)
        source = rng or random
        return tuple(source.randint(1, 6) for _ in range(count))

    @classmethod
    def score(
        cls,
        dice: Sequence[int],
        rules: ScoringRules = DEFAULT_RULES
    ) -> int:
        """
        Points for treating the whole selection as one scoring combination.

        Returns 0 for an empty or non-scoring selection. Dice that do not
        score simply add nothing; use is_complete_scoring_selection to
        reject them.
        """
        return sum(item.points for item in cls.score_breakdown(dice, rules))

    @classmethod
    def score_breakdown(
        cls,
        dice: Sequence[int],
        rules: ScoringRules = DEFAULT_RULES
    ) -> tuple[ScoringBreakdown, ...]:
        """
        Itemize how a selection scores.

        Args:
            dice: Face values of the selected dice, in any order
            rules: Point table to score against

        Returns:
            Scoring components whose points sum to score(dice, rules)
        """
        values = validate_faces(dice)
        if not values:
            return tuple()

        counts = Counter(values)
        whole_set = cls._check_whole_set(values, counts, rules)
        if whole_set is not None:
            return (whole_set,)

        return tuple(cls._check_faces(counts, rules))

    @classmethod
    def _check_whole_set(
        cls,
        values: tuple[int, ...],
        counts: Counter[int],
        rules: ScoringRules
    ) -> ScoringBreakdown | None:
        """
        Check for combinations that only exist as the entire selection.

        Returns:
            The breakdown for the combination, or None if there is none
        """
        total = len(values)
        distinct = len(counts)
        faces = frozenset(counts)
        ordered = tuple(sorted(values))

        if total == 6 and distinct == 6:
            return ScoringBreakdown(
                category=ScoringCategory.FULL_STRAIGHT,
                dice_values=ordered,
                points=rules.straight,
                description="Full Straight (1-2-3-4-5-6)"
            )

        if counts[1] == 6:
            return ScoringBreakdown(
                category=ScoringCategory.SIX_ONES,
                dice_values=ordered,
                points=rules.six_ones,
                description="Six 1s"
            )

        if total == 6 and distinct == 1:
            return ScoringBreakdown(
                category=ScoringCategory.SIX_OF_A_KIND,
                dice_values=ordered,
                points=rules.six_of_a_kind,
                description=f"6x {ordered[0]}s"
            )

        if rules.enable_five_straight and total == 5 and faces in FIVE_STRAIGHTS:
            return ScoringBreakdown(
                category=ScoringCategory.FIVE_STRAIGHT,
                dice_values=ordered,
                points=rules.five_straight,
                description=f"Five Straight ({ordered[0]}-{ordered[-1]})"
            )

        if rules.enable_four_straight and total == 4 and faces in FOUR_STRAIGHTS:
            return ScoringBreakdown(
                category=ScoringCategory.FOUR_STRAIGHT,
                dice_values=ordered,
                points=rules.four_straight,
                description=f"Four Straight ({ordered[0]}-{ordered[-1]})"
            )

        if (
            rules.enable_three_pairs
            and total == 6
            and distinct == 3
            and all(c == 2 for c in counts.values())
        ):
            return ScoringBreakdown(
                category=ScoringCategory.THREE_PAIRS,
                dice_values=ordered,
                points=rules.three_pairs,
                description="Three Pairs"
            )

        if (
            rules.enable_two_triplets
            and total == 6
            and distinct == 2
            and all(c == 3 for c in counts.values())
        ):
            return ScoringBreakdown(
                category=ScoringCategory.TWO_TRIPLETS,
                dice_values=ordered,
                points=rules.two_triplets,
                description="Two Triplets"
            )

        return None

    @classmethod
    def _check_faces(
        cls,
        counts: Counter[int],
        rules: ScoringRules
    ) -> list[ScoringBreakdown]:
        """
        Score each face independently.

        Three or more of a face scores as N-of-a-kind. For 1s and 5s, which
        also score as singles, four or more dice score whichever is higher:
        the N-of-a-kind value, or a triple plus the extra dice as singles.
        """
        breakdown: list[ScoringBreakdown] = []

        for face in range(1, 7):
            count = counts[face]
            if count == 0:
                continue

            single = rules.single_value(face)

            if count >= 3:
                kind_points = rules.kind_value(face, count)
                extra = count - 3
                stacked_points = rules.triple_value(face) + extra * single

                if single and extra and stacked_points > kind_points:
                    breakdown.append(ScoringBreakdown(
                        category=ScoringCategory.THREE_OF_A_KIND,
                        dice_values=(face,) * 3,
                        points=rules.triple_value(face),
                        description=f"3x {face}s"
                    ))
                    breakdown.append(ScoringBreakdown(
                        category=_SINGLE_CATEGORIES[face],
                        dice_values=(face,) * extra,
                        points=extra * single,
                        description=f"{extra}x Single {face}{'s' if extra > 1 else ''}"
                    ))
                else:
                    breakdown.append(ScoringBreakdown(
                        category=_KIND_CATEGORIES[count],
                        dice_values=(face,) * count,
                        points=kind_points,
                        description=f"{count}x {face}s"
                    ))
            elif single:
                breakdown.append(ScoringBreakdown(
                    category=_SINGLE_CATEGORIES[face],
                    dice_values=(face,) * count,
                    points=count * single,
                    description=f"{count}x Single {face}{'s' if count > 1 else ''}"
                ))

        return breakdown

    @classmethod
    def has_any_scoring_move(
        cls,
        dice: Sequence[int],
        rules: ScoringRules = DEFAULT_RULES
    ) -> bool:
        """
        Check whether a fresh roll offers at least one scoring selection.

        A roll with no scoring selection is a bust (Farkle).

        Args:
            dice: Face values of the freshly rolled dice

        Returns:
            True if some non-empty subset of the roll scores
        """
        values = validate_faces(dice)
        if not values:
            return False

        counts = Counter(values)
        faces = frozenset(counts)

        if counts[1] > 0 or counts[5] > 0:
            return True

        if any(c >= 3 for c in counts.values()):
            return True

        if len(faces) == 6:
            return True

        if (
            rules.enable_three_pairs
            and len(values) == 6
            and all(c == 2 for c in counts.values())
        ):
            return True

        if (
            rules.enable_two_triplets
            and len(values) == 6
            and all(c == 3 for c in counts.values())
        ):
            return True

        if rules.enable_five_straight and len(values) >= 5:
            if any(run <= faces for run in FIVE_STRAIGHTS):
                return True

        if rules.enable_four_straight and len(values) >= 4:
            if any(run <= faces for run in FOUR_STRAIGHTS):
                return True

        return False

    @classmethod
    def is_complete_scoring_selection(
        cls,
        dice: Sequence[int],
        rules: ScoringRules = DEFAULT_RULES
    ) -> bool:
        """
        Check that a selection scores and carries no dead dice.

        Whole-set combinations (straights, three pairs, two triplets, six of
        a kind) use every die by construction. Otherwise 1s and 5s always
        count, and any other face needs at least three of itself.

        Args:
            dice: Face values of the selected dice

        Returns:
            True if every selected die contributes to a positive score
        """
        values = validate_faces(dice)
        if cls.score(values, rules) <= 0:
            return False

        counts = Counter(values)
        if cls._check_whole_set(values, counts, rules) is not None:
            return True

        return all(
            face in (1, 5) or count >= 3
            for face, count in counts.items()
        )
