"""
Farkle Duel - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise descriptive ValueError exceptions.
"""

from typing import Iterable

from src.engine.base import NUM_DICE


def validate_faces(dice: Iterable[int]) -> tuple[int, ...]:
    """
    Check a group of faces taken from one table.

    An empty group is fine (nothing selected yet); more than six dice
    cannot have come from a single roll.

    Raises:
        ValueError: Too many dice, or a face that is not an integer 1-6
    """
    faces = tuple(dice)
    if len(faces) > NUM_DICE:
        raise ValueError(f"At most {NUM_DICE} dice on a table, got {len(faces)}.")

    for face in faces:
        if isinstance(face, bool) or not isinstance(face, int):
            raise ValueError(f"Die face must be an integer, got {face!r}.")
        if not 1 <= face <= 6:
            raise ValueError(f"Die face {face} must be between 1 and 6.")

    return faces


def validate_dice_count(count: int) -> int:
    """
    Validate the number of dice to roll.

    Raises:
        ValueError: If count is not 1-6
    """
    if not isinstance(count, int):
        raise ValueError(f"Dice count must be an integer, got {type(count).__name__}.")

    if not (1 <= count <= NUM_DICE):
        raise ValueError(f"Dice count must be 1-{NUM_DICE}, got {count}.")

    return count


def validate_display_name(name: str, max_length: int = 30) -> str:
    """
    Validate and normalize a player's display name.

    Args:
        name: Name as typed by the player
        max_length: Longest name accepted

    Returns:
        The name with surrounding whitespace removed

    Raises:
        ValueError: If the name is empty or too long
    """
    if not isinstance(name, str):
        raise ValueError(f"Display name must be a string, got {type(name).__name__}.")

    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Display name cannot be empty.")

    if len(cleaned) > max_length:
        raise ValueError(f"Display name must be at most {max_length} characters, got {len(cleaned)}.")

    return cleaned
