"""Hexagonal board storage and the seeded random dealer.

The board uses axial ``(q, r)`` coordinates with pointy-topped hexes: ``q``
grows to the right and ``r`` to the down-right.  Only what the rule engine and
the selection session need is implemented here: neighbourhoods, rings, and a
coordinate to piece mapping.
"""

from __future__ import annotations

import logging
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .errors import BoardDealError, IllegalSelectionError
from .random_control import global_rng

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]
NodeT = TypeVar("NodeT")

ORIGIN: Coordinate = (0, 0)
DEFAULT_RADIUS = 5

# Cyclic order: consecutive entries are themselves neighbours.
DIRECTIONS: Tuple[Coordinate, ...] = ((1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1))


def neighbors(coord: Coordinate) -> List[Coordinate]:
    q, r = coord
    return [(q + dq, r + dr) for dq, dr in DIRECTIONS]


def distance(a: Coordinate, b: Coordinate) -> int:
    dq = a[0] - b[0]
    dr = a[1] - b[1]
    return (abs(dq) + abs(dr) + abs(dq + dr)) // 2


def ring(radius: int, center: Coordinate = ORIGIN) -> List[Coordinate]:
    """Return the cells exactly ``radius`` steps away from ``center``."""

    if radius == 0:
        return [center]
    q = center[0] + DIRECTIONS[4][0] * radius
    r = center[1] + DIRECTIONS[4][1] * radius
    cells = []
    for dq, dr in DIRECTIONS:
        for _ in range(radius):
            cells.append((q, r))
            q += dq
            r += dr
    return cells


def hex_range(radius: int, center: Coordinate = ORIGIN) -> List[Coordinate]:
    cells: List[Coordinate] = []
    for step in range(radius + 1):
        cells.extend(ring(step, center))
    return cells


class HexBoard(Generic[NodeT]):
    """Coordinate to optional piece mapping over a hexagon of ``radius``."""

    def __init__(self, radius: int = DEFAULT_RADIUS) -> None:
        if radius < 0:
            raise ValueError("Board radius must be non-negative")
        self.radius = radius
        self._nodes: Dict[Coordinate, Optional[NodeT]] = {coord: None for coord in hex_range(radius)}

    def in_bounds(self, coord: Coordinate) -> bool:
        return coord in self._nodes

    def get_node(self, coord: Coordinate) -> Optional[NodeT]:
        """Piece at ``coord``; None when the cell is empty or off the board."""

        return self._nodes.get(coord)

    def set_node(self, coord: Coordinate, node: Optional[NodeT]) -> Optional[NodeT]:
        """Place ``node`` at ``coord`` and return whatever was there before."""

        if coord not in self._nodes:
            raise IllegalSelectionError(f"Coordinate {coord} is outside the board")
        previous = self._nodes[coord]
        self._nodes[coord] = node
        return previous

    def neighbors_of(self, coord: Coordinate) -> Sequence[Coordinate]:
        return neighbors(coord)

    def has_neighbor(self, coord: Coordinate) -> bool:
        return any(self.get_node(c) is not None for c in neighbors(coord))

    def nodes_iter(self) -> Iterator[Tuple[Coordinate, Optional[NodeT]]]:
        return iter(self._nodes.items())

    def occupied(self) -> List[Coordinate]:
        return [coord for coord, node in self._nodes.items() if node is not None]

    def counts(self) -> Dict[NodeT, int]:
        totals: Dict[NodeT, int] = {}
        for node in self._nodes.values():
            if node is not None:
                totals[node] = totals.get(node, 0) + 1
        return totals

    def is_empty(self) -> bool:
        return all(node is None for node in self._nodes.values())


def _ring_probability(radius: int) -> float:
    if radius == 1:
        return 1.0
    if radius % 2 == 1:
        return 0.8
    return 0.2


def _try_insert(board: HexBoard, coord: Coordinate, node: object, require_neighbor: bool) -> bool:
    if not board.in_bounds(coord) or board.get_node(coord) is not None:
        return False
    if require_neighbor and not board.has_neighbor(coord):
        return False
    board.set_node(coord, node)
    return True


def _deal_once(
    bank: List[NodeT],
    radius: int,
    center: Optional[NodeT],
    generator: np.random.Generator,
    max_attempts: int,
) -> Optional[HexBoard]:
    board: HexBoard = HexBoard(radius)
    pending = list(bank)
    generator.shuffle(pending)
    if center is not None:
        board.set_node(ORIGIN, center)

    for step in range(1, radius + 1):
        probability = _ring_probability(step)
        cells = ring(step)
        generator.shuffle(cells)
        for coord in cells:
            if not pending:
                break
            if generator.random() > probability:
                continue
            node = pending.pop()
            require_neighbor = bool(generator.random() < step / radius)
            if not _try_insert(board, coord, node, require_neighbor):
                pending.append(node)

    cells = hex_range(radius)
    while pending:
        node = pending.pop()
        for _ in range(max_attempts):
            coord = cells[int(generator.integers(len(cells)))]
            if _try_insert(board, coord, node, True):
                break
        else:
            return None
    return board


def deal_board(
    bank: Iterable[NodeT],
    radius: int = DEFAULT_RADIUS,
    *,
    center: Optional[NodeT] = None,
    generator: Optional[np.random.Generator] = None,
    max_attempts: int = 1000,
) -> HexBoard[NodeT]:
    """Randomly lay out ``bank`` on a fresh board, optionally with a fixed centre piece."""

    pieces = list(bank)
    capacity = len(hex_range(radius)) - (1 if center is not None else 0)
    if len(pieces) > capacity:
        raise BoardDealError(f"Cannot deal {len(pieces)} pieces onto {capacity} free cells")
    rng = generator if generator is not None else global_rng()
    for attempt in range(1, max_attempts + 1):
        board = _deal_once(pieces, radius, center, rng, max_attempts)
        if board is not None:
            logger.debug("Dealt %d pieces on radius %d after %d attempt(s)", len(pieces), radius, attempt)
            return board
    raise BoardDealError(f"Gave up dealing {len(pieces)} pieces after {max_attempts} attempts")


__all__ = [
    "Coordinate",
    "DEFAULT_RADIUS",
    "DIRECTIONS",
    "HexBoard",
    "ORIGIN",
    "deal_board",
    "distance",
    "hex_range",
    "neighbors",
    "ring",
]
