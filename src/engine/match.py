"""
Farkle Duel - Match State Machine

One Match owns the mutable state of a single table: two seats, whose turn
it is, the dice on the table and the points riding on the current turn.
Player intents (join, roll, toggle, bank) are the only way in; each one is
applied completely or, on a rule violation, raises a GameError and leaves
the match exactly as it was.

The Match holds no lock. Callers must apply one operation at a time per
match (see src.session.service.MatchService).

Turn flow:
    - A turn starts with no dice on the table and 6 dice to roll
    - After the first roll, every roll must set aside a complete scoring
      selection; its points join the round score
    - Setting aside every die ("hot dice") refills the next roll to 6
    - A roll with no scoring move is a bust: the match flags it and waits
      for resolve_bust() so the table can show the dice first
    - Banking adds the round score to the player's total and ends the turn

End game:
    The first bank that reaches the win score starts the final round. The
    other player gets one more turn; when play comes back to the seat that
    triggered it the match is over and the higher total wins.
"""

import itertools
import random

from src.engine.base import (
    DEFAULT_RULES,
    NUM_DICE,
    NUM_SEATS,
    TIE,
    Die,
    DieSnapshot,
    MatchSnapshot,
    MatchStatus,
    Player,
    PlayerSnapshot,
    RollResult,
    ScoringRules,
)
from src.engine.errors import (
    BustPendingError,
    CannotBankZeroError,
    GameNotActiveError,
    InvalidSelectionError,
    MustSelectToRerollError,
    NameInUseError,
    NotFinishedError,
    NotYourTurnError,
    RoomFullError,
)
from src.engine.scoring import FarkleEngine
from src.engine.validators import validate_display_name


class Match:
    """
    Aggregate root for a single two-player table.

    Args:
        room_id: Identifier of the table
        rules: Point table (shared, read-only)
        rng: Source of die faces; anything with randint(a, b)
    """

    def __init__(
        self,
        room_id: str,
        rules: ScoringRules = DEFAULT_RULES,
        rng: random.Random | None = None,
    ) -> None:
        self.room_id = room_id
        self.rules = rules
        self._rng = rng or random.Random()
        self._die_ids = itertools.count(1)

        self.seats: list[Player | None] = [None] * NUM_SEATS
        self.status = MatchStatus.WAITING
        self.current_seat = 0
        self.winner: int | str | None = None
        self.final_round_active = False
        self.final_round_trigger_seat: int | None = None

        self.round_score = 0
        self.dice_to_roll = NUM_DICE
        self.current_dice: list[Die] = []
        self.bust_pending = False

    # -- Seats ------------------------------------------------------------

    @property
    def current_player(self) -> Player | None:
        return self.seats[self.current_seat]

    @property
    def connected_count(self) -> int:
        return sum(1 for p in self.seats if p is not None and p.connected)

    def seat_of(self, identity: str) -> int | None:
        """Seat held by `identity`, or None."""
        for seat, player in enumerate(self.seats):
            if player is not None and player.identity == identity:
                return seat
        return None

    def seat_by_name(self, display_name: str) -> int | None:
        """Seat held under `display_name`, or None."""
        for seat, player in enumerate(self.seats):
            if player is not None and player.display_name == display_name:
                return seat
        return None

    def join(self, identity: str, display_name: str) -> MatchSnapshot:
        """
        Seat a player, or hand a seat back to a returning one.

        A display name already seated reclaims that seat (see reclaim).
        Otherwise the first empty seat is taken. When the second seat fills
        while waiting, the match starts with seat 0 to play.

        Raises:
            NameInUseError: The name's seat is held by another live connection
            RoomFullError: No seat is free and the name is not seated
        """
        display_name = validate_display_name(display_name)

        if self.seat_of(identity) is None:
            seat = self.seat_by_name(display_name)
            if seat is not None:
                self.reclaim(seat, identity)
            else:
                self.attach(identity, display_name)

        if self.status is MatchStatus.WAITING and all(self.seats):
            self._start()

        return self.snapshot()

    def attach(self, identity: str, display_name: str) -> int:
        """Put a new player in the first empty seat and return it."""
        for seat, player in enumerate(self.seats):
            if player is None:
                self.seats[seat] = Player(identity=identity, display_name=display_name)
                return seat
        raise RoomFullError()

    def reclaim(self, seat: int, identity: str) -> None:
        """
        Reassign a seat to a new connection, keeping its score.

        Only a disconnected seat (or the same connection) can be reclaimed,
        so a second tab using someone else's name cannot steal a live seat.
        """
        player = self.seats[seat]
        if player is None:
            raise ValueError(f"Seat {seat} is empty.")
        if player.connected and player.identity != identity:
            raise NameInUseError()
        player.identity = identity
        player.connected = True

    def leave(self, identity: str) -> bool:
        """
        Mark a player as gone.

        While waiting the seat is freed outright; once play has started the
        seat is kept (disconnected) so the player can come back. When the
        last connected player goes, the game is abandoned and the table is
        cleared for new players.

        Returns:
            True if `identity` held a seat
        """
        seat = self.seat_of(identity)
        if seat is None:
            return False

        if self.status is MatchStatus.WAITING:
            self.seats[seat] = None
        else:
            self.seats[seat].connected = False
            if self.connected_count == 0:
                self._clear_table()
        return True

    # -- Turn actions -----------------------------------------------------

    def roll(self, identity: str) -> RollResult:
        """
        Set aside the selected dice and roll the rest.

        On the first roll of a turn nothing needs to be selected. After
        that the selection must be a complete scoring selection; its score
        joins the round and the unselected dice are rolled again (all six
        if the selection used every die).

        Raises:
            GameNotActiveError, NotYourTurnError, BustPendingError
            MustSelectToRerollError: Dice are on the table but none selected
            InvalidSelectionError: The selection has dead dice or scores 0
        """
        self._require_turn(identity)

        selection_score = 0
        dice_to_roll = self.dice_to_roll
        if self.current_dice:
            selected = self.selected_faces()
            if not selected:
                raise MustSelectToRerollError()
            if not FarkleEngine.is_complete_scoring_selection(selected, self.rules):
                raise InvalidSelectionError()

            selection_score = FarkleEngine.score(selected, self.rules)
            remaining = len(self.current_dice) - len(selected)
            dice_to_roll = remaining or NUM_DICE

        faces = FarkleEngine.roll_dice(dice_to_roll, self._rng)

        self.round_score += selection_score
        self.dice_to_roll = dice_to_roll
        self.current_dice = [Die(id=next(self._die_ids), face=face) for face in faces]
        self.bust_pending = not FarkleEngine.has_any_scoring_move(faces, self.rules)

        return RollResult(
            dice=tuple(self._die_snapshot(d) for d in self.current_dice),
            bust=self.bust_pending,
            hot_dice=selection_score > 0 and dice_to_roll == NUM_DICE,
            round_score=self.round_score,
        )

    def toggle_selection(self, identity: str, die_id: int) -> bool:
        """
        Flip the selected flag on one die.

        Anything that is not the current player toggling a die on the table
        is ignored.

        Returns:
            True if a die was toggled
        """
        if self.status is not MatchStatus.PLAYING or self.bust_pending:
            return False
        player = self.current_player
        if player is None or player.identity != identity:
            return False

        for die in self.current_dice:
            if die.id == die_id:
                die.selected = not die.selected
                return True
        return False

    def bank(self, identity: str) -> MatchSnapshot:
        """
        Score any selected dice and commit the round to the player's total.

        Raises:
            GameNotActiveError, NotYourTurnError, BustPendingError
            InvalidSelectionError: The selection has dead dice or scores 0
            CannotBankZeroError: Nothing selected and nothing scored this turn
        """
        self._require_turn(identity)

        selected = self.selected_faces()
        selection_score = 0
        if selected:
            if not FarkleEngine.is_complete_scoring_selection(selected, self.rules):
                raise InvalidSelectionError()
            selection_score = FarkleEngine.score(selected, self.rules)
        elif self.round_score == 0:
            raise CannotBankZeroError()

        self.round_score += selection_score
        self.current_player.total_score += self.round_score

        self._check_final_round()
        if self.status is not MatchStatus.FINISHED:
            self._next_turn()

        return self.snapshot()

    def resolve_bust(self) -> MatchSnapshot:
        """
        Finish a bust: the round's points are lost and the turn passes.

        Does nothing unless the last roll was a bust, so a late timer cannot
        end a turn that has already moved on.
        """
        if self.bust_pending:
            self.round_score = 0
            self._next_turn()
        return self.snapshot()

    def restart(self) -> MatchSnapshot:
        """
        Start a new game at the same table with the same players.

        Raises:
            NotFinishedError: The current game is still running
        """
        if self.status is not MatchStatus.FINISHED:
            raise NotFinishedError()

        for player in self.seats:
            if player is not None:
                player.total_score = 0
        self.winner = None
        self.final_round_active = False
        self.final_round_trigger_seat = None
        self._start()
        return self.snapshot()

    # -- Queries ----------------------------------------------------------

    def selected_faces(self) -> tuple[int, ...]:
        """Face values of the dice currently selected."""
        return tuple(d.face for d in self.current_dice if d.selected)

    def snapshot(self) -> MatchSnapshot:
        """Full state, safe to serialize and broadcast."""
        return MatchSnapshot(
            room_id=self.room_id,
            players=tuple(
                PlayerSnapshot(
                    identity=p.identity,
                    display_name=p.display_name,
                    total_score=p.total_score,
                    connected=p.connected,
                ) if p is not None else None
                for p in self.seats
            ),
            current_seat=self.current_seat,
            round_score=self.round_score,
            dice_to_roll=self.dice_to_roll,
            current_dice=tuple(self._die_snapshot(d) for d in self.current_dice),
            status=self.status,
            winner=self.winner,
            final_round_active=self.final_round_active,
            final_round_trigger_seat=self.final_round_trigger_seat,
            bust_pending=self.bust_pending,
            win_score=self.rules.win_score,
        )

    # -- Transitions ------------------------------------------------------

    def _require_turn(self, identity: str) -> None:
        if self.status is not MatchStatus.PLAYING:
            raise GameNotActiveError()
        player = self.current_player
        if player is None or player.identity != identity:
            raise NotYourTurnError()
        if self.bust_pending:
            raise BustPendingError()

    def _start(self) -> None:
        self.status = MatchStatus.PLAYING
        self.current_seat = 0
        self._reset_round()

    def _clear_table(self) -> None:
        self.seats = [None] * NUM_SEATS
        self.status = MatchStatus.WAITING
        self.current_seat = 0
        self.winner = None
        self.final_round_active = False
        self.final_round_trigger_seat = None
        self._reset_round()

    def _reset_round(self) -> None:
        self.round_score = 0
        self.dice_to_roll = NUM_DICE
        self.current_dice = []
        self.bust_pending = False

    def _check_final_round(self) -> None:
        if self.final_round_active:
            return
        if self.current_player.total_score >= self.rules.win_score:
            self.final_round_active = True
            self.final_round_trigger_seat = self.current_seat

    def _next_turn(self) -> None:
        self.current_seat = (self.current_seat + 1) % NUM_SEATS
        self._reset_round()

        if self.final_round_active and self.current_seat == self.final_round_trigger_seat:
            self._end_game()

    def _end_game(self) -> None:
        self.status = MatchStatus.FINISHED
        first, second = (p.total_score if p else 0 for p in self.seats)
        if first > second:
            self.winner = 0
        elif second > first:
            self.winner = 1
        else:
            self.winner = TIE

    @staticmethod
    def _die_snapshot(die: Die) -> DieSnapshot:
        return DieSnapshot(id=die.id, face=die.face, selected=die.selected)
