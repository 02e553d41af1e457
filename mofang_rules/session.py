"""Interactive selection on a board, driven by a compiled game definition."""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from mofang_core.board import Coordinate, HexBoard, deal_board
from mofang_core.errors import IllegalSelectionError
from mofang_core.random_control import spawn_generator

from .data import DataNode
from .evaluation import EvalValue
from .loader import GameDefinition
from .matcher import MatchStatus

logger = logging.getLogger(__name__)

SELF_BINDING = "self"
SELECTED_BINDING = "selected"


class SelectionSession:
    """Tracks the pieces a player has selected and applies rules as they click.

    The session owns the board it plays on; the definition's compiled rules
    are shared and never mutated.
    """

    def __init__(self, definition: GameDefinition, board: Optional[HexBoard] = None) -> None:
        if board is None:
            board = HexBoard(definition.radius)
        self.board = board
        self.definition = definition.with_board(board)
        self.selected: List[Coordinate] = []

    @classmethod
    def new_game(
        cls,
        definition: GameDefinition,
        *,
        seed: Optional[int] = None,
        generator: Optional[np.random.Generator] = None,
    ) -> "SelectionSession":
        """Start a session on a freshly dealt board."""

        rng = generator if generator is not None else spawn_generator(seed)
        board = deal_board(definition.bank(), definition.radius, center=definition.center, generator=rng)
        return cls(definition, board)

    def candidates(self) -> List[DataNode]:
        return [node for node in (self.board.get_node(coord) for coord in self.selected) if node is not None]

    def is_selectable(self, coord: Coordinate) -> bool:
        """Evaluate the game's ``select`` condition at ``coord``.

        ``@self`` is bound to the piece there and ``@selected`` to the array of
        pieces already selected.
        """

        node = self.board.get_node(coord)
        if node is None:
            return False
        ctx = self.definition.context(coord)
        ctx.scope.add(SELF_BINDING, EvalValue.node(node))
        selected = EvalValue.array(EvalValue.node(piece) for piece in self.candidates())
        ctx.scope.add(SELECTED_BINDING, selected)
        return self.definition.select.evaluate(ctx).as_bool()

    def selectable(self) -> List[Coordinate]:
        """Cells that could be clicked next without the rule set rejecting them."""

        found = []
        for coord in self.board.occupied():
            if coord in self.selected or not self.is_selectable(coord):
                continue
            outcome = self.definition.changes.test(
                self.definition.context(coord), self.candidates() + [self.board.get_node(coord)]
            )
            if outcome.is_valid():
                found.append(coord)
        return found

    def click(self, coord: Coordinate) -> MatchStatus:
        """Handle a click on ``coord``.

        Returns FAILURE when the click was rejected, SUCCESS when a rule fired
        and its replacements were applied, and CONTINUE otherwise.  The
        selection only grows once the rule set has accepted the new piece.
        """

        if not self.board.in_bounds(coord):
            raise IllegalSelectionError(f"Coordinate {coord} is outside the board")
        if coord in self.selected:
            if coord == self.selected[-1]:
                self.selected.pop()
            else:
                self.selected.clear()
            return MatchStatus.CONTINUE
        node = self.board.get_node(coord)
        if node is None:
            # Clicking off a piece clears the selection.
            self.selected.clear()
            return MatchStatus.CONTINUE
        if not self.is_selectable(coord):
            return MatchStatus.FAILURE

        outcome = self.definition.changes.test(self.definition.context(coord), self.candidates() + [node])
        if outcome.is_success:
            slots = self.selected + [coord]
            for slot, replacement in zip(slots, outcome.value or []):
                self.board.set_node(slot, replacement)
            logger.debug("Applied rule to %s", slots)
            self.selected.clear()
        elif outcome.status is MatchStatus.CONTINUE:
            self.selected.append(coord)
        return outcome.status

    def is_won(self) -> bool:
        return self.board.is_empty()


__all__ = ["SELECTED_BINDING", "SELF_BINDING", "SelectionSession"]
