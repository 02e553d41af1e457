"""Core helpers shared by the Mofang rule engine: board, errors, logging and randomness."""

from .board import (
    DEFAULT_RADIUS,
    DIRECTIONS,
    ORIGIN,
    Coordinate,
    HexBoard,
    deal_board,
    distance,
    hex_range,
    neighbors,
    ring,
)
from .errors import BoardDealError, ErrorDetails, IllegalSelectionError, MofangError

__all__ = [
    "BoardDealError",
    "Coordinate",
    "DEFAULT_RADIUS",
    "DIRECTIONS",
    "ErrorDetails",
    "HexBoard",
    "IllegalSelectionError",
    "MofangError",
    "ORIGIN",
    "deal_board",
    "distance",
    "hex_range",
    "neighbors",
    "ring",
]
