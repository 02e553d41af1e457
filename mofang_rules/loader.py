"""Helpers for compiling game definitions and caching them by game id."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from mofang_core.board import DEFAULT_RADIUS, Coordinate, HexBoard

from .change import ChangeParser, ChangeTree
from .conditions import ConditionParser, ConditionRegistry
from .conditions import conditions as default_conditions
from .data import BoardView, DataGame, DataNode
from .errors import GameNotFoundError
from .evaluation import TRUE, Constant, EvalContext, Expression, Scope
from .predicates import PredicateRegistry
from .predicates import predicates as default_predicates
from .schema import GameDocument, validate_game

logger = logging.getLogger(__name__)

BUNDLED_GAMES_DIR = Path(__file__).resolve().parent / "games"


@dataclass
class GameDefinition:
    """A compiled game: its registry, rule set, selectability condition and deal setup."""

    game: DataGame
    changes: ChangeTree
    select: Expression = field(default_factory=lambda: Constant(TRUE))
    radius: int = DEFAULT_RADIUS
    center: Optional[DataNode] = None
    bank_counts: Dict[DataNode, int] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.game.id

    def bank(self) -> List[DataNode]:
        """Every piece dealt around the centre, in a stable order."""

        pieces: List[DataNode] = []
        for node in sorted(self.bank_counts):
            pieces.extend([node] * self.bank_counts[node])
        return pieces

    def with_board(self, board: BoardView) -> "GameDefinition":
        """Same compiled rules, evaluated against ``board``."""

        return replace(self, game=replace(self.game, board=board))

    def context(self, pos: Coordinate) -> EvalContext:
        return EvalContext(game=self.game, pos=pos, scope=Scope())


class GameParser:
    """Builds :class:`GameDefinition` objects from game JSON documents."""

    def __init__(
        self,
        conditions: Optional[ConditionRegistry] = None,
        predicates: Optional[PredicateRegistry] = None,
    ) -> None:
        self.conditions = conditions if conditions is not None else default_conditions
        self.predicates = predicates if predicates is not None else default_predicates

    def parse(
        self, payload: Union[GameDocument, Mapping[str, Any]], board: Optional[BoardView] = None
    ) -> GameDefinition:
        document = validate_game(payload)
        game = DataGame.build(
            document.id,
            document.nodes,
            document.tags,
            document.mappings,
            board if board is not None else HexBoard(document.radius),
        )
        cond_parser = ConditionParser(game, self.conditions)
        changes = ChangeParser(game, cond_parser, self.predicates).parse_all(document.changes)
        definition = GameDefinition(
            game=game,
            changes=changes,
            select=cond_parser.parse(document.select),
            radius=document.radius,
            center=None if document.center is None else game.resolve(document.center),
            bank_counts={game.resolve(name): count for name, count in document.bank.items()},
        )
        logger.debug(
            "Loaded game %s: %d piece type(s), %d rule(s)", game.id, len(game.nodes), len(changes)
        )
        return definition


class GameRepository:
    """In-memory registry of compiled games with simple file caching."""

    def __init__(self, parser: Optional[GameParser] = None) -> None:
        self._parser = parser or GameParser()
        self._games: Dict[str, GameDefinition] = {}
        self._json_cache: Dict[Path, int] = {}
        self._path_ids: Dict[Path, str] = {}

    # ------------------------------------------------------------------ loading
    def load_from_json(self, path: Path, *, force: bool = False) -> GameDefinition:
        """Load a game definition from a JSON file, skipping unchanged files."""

        path = Path(path)
        current_timestamp = path.stat().st_mtime_ns
        if not force and path in self._json_cache and self._json_cache[path] >= current_timestamp:
            return self._games[self._path_ids[path]]
        definition = self.load_from_payload(json.loads(path.read_text()))
        self._json_cache[path] = current_timestamp
        self._path_ids[path] = definition.id
        return definition

    def load_from_payload(self, payload: Mapping[str, Any]) -> GameDefinition:
        definition = self._parser.parse(payload)
        self._games[definition.id] = definition
        return definition

    def load_bundled(self, name: str) -> GameDefinition:
        """Load one of the definitions shipped in the package's ``games`` directory."""

        return self.load_from_json(BUNDLED_GAMES_DIR / f"{name}.json")

    # ------------------------------------------------------------------- access
    def get(self, game_id: str) -> GameDefinition:
        try:
            return self._games[game_id]
        except KeyError as exc:
            raise GameNotFoundError(game_id) from exc

    def __contains__(self, game_id: object) -> bool:
        return game_id in self._games


__all__ = ["BUNDLED_GAMES_DIR", "GameDefinition", "GameParser", "GameRepository"]
