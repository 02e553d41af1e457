import itertools
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from mofang_core.logging_config import setup_logging
from mofang_rules.loader import GameRepository
from mofang_rules.matcher import MatchStatus
from mofang_rules.session import SelectionSession


def find_move(session):
    """Return the first single or pair of selectable cells some rule accepts."""
    selectable = session.selectable()
    for size in (1, 2):
        for combo in itertools.combinations(selectable, size):
            nodes = [session.board.get_node(coord) for coord in combo]
            outcome = session.definition.changes.test(session.definition.context(combo[-1]), nodes)
            if outcome.is_success:
                return list(combo)
    return None


def main(game: str = "sigmar", seed: int = 42):
    logger = setup_logging()
    definition = GameRepository().load_bundled(game)
    session = SelectionSession.new_game(definition, seed=seed)
    logger.info("Dealt %s with %d pieces", game, len(session.board.occupied()))

    moves = 0
    while not session.is_won():
        move = find_move(session)
        if move is None:
            break
        for coord in move:
            status = session.click(coord)
        moves += 1
        logger.info("Move %d: %s -> %s", moves, move, status.value)
        if status is not MatchStatus.SUCCESS:
            break
    logger.info("Finished after %d moves; %d pieces left, won=%s", moves, len(session.board.occupied()), session.is_won())


if __name__ == "__main__":
    main(*sys.argv[1:2])
