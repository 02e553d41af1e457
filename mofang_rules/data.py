"""Identifiers, piece types and the per-game registry they resolve against."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Protocol, Sequence, Tuple

from mofang_core.board import Coordinate, HexBoard

from .errors import IdentifierFormatError, UnknownIdentifierError

SEPARATOR = ":"


@dataclass(frozen=True, order=True)
class Identifier:
    """A ``namespace:name`` symbol."""

    namespace: str
    name: str

    @classmethod
    def parse(cls, text: str, namespace: str) -> "Identifier":
        """Parse ``name`` (placed in ``namespace``) or an explicit ``namespace:name``."""

        parts = text.split(SEPARATOR)
        if len(parts) == 1:
            return cls(namespace, parts[0])
        if len(parts) == 2:
            return cls(parts[0], parts[1])
        raise IdentifierFormatError(text)

    def __str__(self) -> str:
        return f"{self.namespace}{SEPARATOR}{self.name}"


@dataclass(frozen=True, order=True)
class DataNode:
    """A piece type. Board cells reference these, they never own a copy."""

    name: Identifier

    def __str__(self) -> str:
        return str(self.name)


class BoardView(Protocol):
    """Read access to the board the rules are evaluated against."""

    def get_node(self, coord: Coordinate) -> Optional[DataNode]:  # pragma: no cover - protocol
        ...

    def neighbors_of(self, coord: Coordinate) -> Sequence[Coordinate]:  # pragma: no cover - protocol
        ...

    def nodes_iter(self) -> Iterator[Tuple[Coordinate, Optional[DataNode]]]:  # pragma: no cover - protocol
        ...


@dataclass
class DataGame:
    """Registry of the piece types, tags and mappings a game defines."""

    id: str
    nodes: Dict[Identifier, DataNode] = field(default_factory=dict)
    tags: Dict[str, FrozenSet[DataNode]] = field(default_factory=dict)
    mappings: Dict[str, Dict[DataNode, DataNode]] = field(default_factory=dict)
    board: BoardView = field(default_factory=HexBoard)

    @classmethod
    def build(
        cls,
        game_id: str,
        node_names: Iterable[str],
        tags: Optional[Mapping[str, Iterable[str]]] = None,
        mappings: Optional[Mapping[str, Mapping[str, str]]] = None,
        board: Optional[BoardView] = None,
    ) -> "DataGame":
        """Create a registry from plain names, resolving tag and mapping members."""

        game = cls(id=game_id, board=board if board is not None else HexBoard())
        for name in node_names:
            identifier = Identifier.parse(name, game_id)
            game.nodes[identifier] = DataNode(identifier)
        for tag, members in (tags or {}).items():
            game.tags[tag] = frozenset(game.resolve(member) for member in members)
        for mapping, table in (mappings or {}).items():
            game.mappings[mapping] = {game.resolve(key): game.resolve(val) for key, val in table.items()}
        return game

    # ------------------------------------------------------------------- lookups
    def node(self, identifier: Identifier) -> DataNode:
        try:
            return self.nodes[identifier]
        except KeyError as exc:
            raise UnknownIdentifierError("node", identifier) from exc

    def resolve(self, text: str) -> DataNode:
        """Parse ``text`` in this game's namespace and return the piece type it names."""

        return self.node(Identifier.parse(text, self.id))

    def tag(self, name: str) -> FrozenSet[DataNode]:
        try:
            return self.tags[name]
        except KeyError as exc:
            raise UnknownIdentifierError("tag", name) from exc

    def mapping(self, name: str) -> Dict[DataNode, DataNode]:
        try:
            return self.mappings[name]
        except KeyError as exc:
            raise UnknownIdentifierError("mapping", name) from exc

    # --------------------------------------------------------------------- board
    def get_node(self, coord: Coordinate) -> Optional[DataNode]:
        return self.board.get_node(coord)

    def neighbors_of(self, coord: Coordinate) -> Sequence[Coordinate]:
        return self.board.neighbors_of(coord)

    def on_board(self, node: DataNode) -> bool:
        """Is some cell of the board holding ``node``?"""

        return any(found == node for _coord, found in self.board.nodes_iter())


__all__ = ["BoardView", "DataGame", "DataNode", "Identifier", "SEPARATOR"]
