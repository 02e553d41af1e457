import pytest

from mofang_core.board import DIRECTIONS, HexBoard
from mofang_core.errors import IllegalSelectionError
from mofang_rules.errors import UnboundVariableError
from mofang_rules.loader import GameParser, GameRepository
from mofang_rules.matcher import MatchStatus
from mofang_rules.session import SelectionSession


@pytest.fixture(scope="module")
def repository() -> GameRepository:
    return GameRepository()


@pytest.fixture
def sigmar(repository) -> SelectionSession:
    return SelectionSession(repository.load_bundled("sigmar"))


@pytest.fixture
def mofang(repository) -> SelectionSession:
    return SelectionSession(repository.load_bundled("mofang"))


def put(session: SelectionSession, coord, name: str) -> None:
    session.board.set_node(coord, session.definition.game.resolve(name))


def name_at(session: SelectionSession, coord):
    node = session.board.get_node(coord)
    return None if node is None else node.name.name


LEFT, MIDDLE, RIGHT = (-3, 0), (0, 0), (3, 0)


def test_session_owns_its_board(sigmar) -> None:
    assert sigmar.definition.game.board is sigmar.board
    assert sigmar.board.radius == 5
    assert sigmar.is_won()


def test_matching_pair_is_removed(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    put(sigmar, RIGHT, "water")

    assert set(sigmar.selectable()) == {MIDDLE, RIGHT}
    assert sigmar.click(MIDDLE) is MatchStatus.CONTINUE
    assert sigmar.selected == [MIDDLE]
    assert sigmar.click(RIGHT) is MatchStatus.SUCCESS
    assert sigmar.selected == []
    assert sigmar.is_won()


def test_failed_click_is_rejected(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    put(sigmar, RIGHT, "vitae")

    sigmar.click(MIDDLE)
    assert sigmar.click(RIGHT) is MatchStatus.FAILURE
    assert sigmar.selected == [MIDDLE]
    assert name_at(sigmar, RIGHT) == "vitae"


def test_guarded_pair_needs_equal_elements(sigmar) -> None:
    put(sigmar, MIDDLE, "water")
    put(sigmar, RIGHT, "fire")
    put(sigmar, LEFT, "water")

    assert sigmar.click(MIDDLE) is MatchStatus.CONTINUE
    assert sigmar.click(RIGHT) is MatchStatus.FAILURE
    assert sigmar.click(LEFT) is MatchStatus.SUCCESS
    assert sigmar.board.occupied() == [RIGHT]


def test_metal_upgrade_with_quicksilver(sigmar) -> None:
    put(sigmar, MIDDLE, "iron")
    put(sigmar, RIGHT, "quicksilver")

    sigmar.click(MIDDLE)
    assert sigmar.click(RIGHT) is MatchStatus.SUCCESS
    assert sigmar.is_won()


def test_single_gold_is_removed(sigmar) -> None:
    put(sigmar, MIDDLE, "gold")
    assert sigmar.click(MIDDLE) is MatchStatus.SUCCESS
    assert sigmar.is_won()


def test_surrounded_piece_cannot_be_selected(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    for index in (0, 2, 4):
        put(sigmar, DIRECTIONS[index], "lead")

    assert not sigmar.is_selectable(MIDDLE)
    assert sigmar.click(MIDDLE) is MatchStatus.FAILURE
    assert sigmar.selected == []
    assert sigmar.is_selectable(DIRECTIONS[0])


def test_clicking_the_last_selection_deselects_it(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    sigmar.click(MIDDLE)
    assert sigmar.click(MIDDLE) is MatchStatus.CONTINUE
    assert sigmar.selected == []
    assert name_at(sigmar, MIDDLE) == "salt"


def test_clicking_an_empty_cell_clears_the_selection(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    sigmar.click(MIDDLE)
    assert sigmar.click((1, 0)) is MatchStatus.CONTINUE
    assert sigmar.selected == []


def test_clicking_outside_the_board_raises(sigmar) -> None:
    with pytest.raises(IllegalSelectionError) as excinfo:
        sigmar.click((9, 9))
    assert excinfo.value.code == "ERR_ILLEGAL_SELECTION"


def test_opposites_create(mofang) -> None:
    put(mofang, MIDDLE, "yin")
    put(mofang, RIGHT, "yang")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.SUCCESS
    assert name_at(mofang, MIDDLE) == "creation"
    assert name_at(mofang, RIGHT) == "creation"


def test_human_takes_the_element(mofang) -> None:
    put(mofang, MIDDLE, "human")
    put(mofang, RIGHT, "wood")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.SUCCESS
    assert name_at(mofang, MIDDLE) == "wood"
    assert name_at(mofang, RIGHT) is None


def test_creation_advances_a_piece(mofang) -> None:
    put(mofang, MIDDLE, "earthly")
    put(mofang, RIGHT, "creation")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.SUCCESS
    assert name_at(mofang, MIDDLE) == "human"
    assert name_at(mofang, RIGHT) is None


@pytest.mark.parametrize("first, second", [("fire", "metal"), ("metal", "fire")])
def test_destruction_in_either_order(mofang, first, second) -> None:
    put(mofang, MIDDLE, first)
    put(mofang, RIGHT, second)

    assert mofang.click(MIDDLE) is MatchStatus.CONTINUE
    assert mofang.click(RIGHT) is MatchStatus.SUCCESS
    assert mofang.is_won()


def test_unrelated_pieces_are_rejected(mofang) -> None:
    put(mofang, MIDDLE, "fire")
    put(mofang, RIGHT, "yin")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.FAILURE
    assert mofang.selected == [MIDDLE]


def test_elements_can_grow_into_destruction(mofang) -> None:
    put(mofang, MIDDLE, "fire")
    put(mofang, RIGHT, "wood")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.CONTINUE
    assert mofang.selected == [MIDDLE, RIGHT]


def test_qi_needs_more_open_neighbours(mofang) -> None:
    put(mofang, MIDDLE, "qi")
    put(mofang, DIRECTIONS[0], "wood")
    assert mofang.is_selectable(MIDDLE)

    put(mofang, DIRECTIONS[2], "wood")
    assert not mofang.is_selectable(MIDDLE)

    put(mofang, RIGHT, "earth")
    put(mofang, (4, 0), "wood")
    put(mofang, (3, -1), "wood")
    assert mofang.is_selectable(RIGHT)


def test_three_powers_and_reselecting_an_earlier_piece(mofang) -> None:
    put(mofang, MIDDLE, "heavenly")
    put(mofang, RIGHT, "earthly")
    put(mofang, LEFT, "human")

    mofang.click(MIDDLE)
    assert mofang.click(RIGHT) is MatchStatus.CONTINUE
    assert mofang.click(MIDDLE) is MatchStatus.CONTINUE
    assert mofang.selected == []

    mofang.click(MIDDLE)
    mofang.click(RIGHT)
    assert mofang.click(LEFT) is MatchStatus.SUCCESS
    assert mofang.is_won()


def test_new_game_is_reproducible(repository) -> None:
    definition = repository.load_bundled("mofang")
    first = SelectionSession.new_game(definition, seed=7)
    second = SelectionSession.new_game(definition, seed=7)

    assert dict(first.board.nodes_iter()) == dict(second.board.nodes_iter())
    expected = dict(definition.bank_counts)
    expected[definition.center] = expected.get(definition.center, 0) + 1
    assert first.board.counts() == expected
    assert first.board.get_node((0, 0)) == definition.center
    assert first.selectable()
    assert not first.is_won()


def test_session_accepts_an_existing_board(repository) -> None:
    board = HexBoard(2)
    session = SelectionSession(repository.load_bundled("sigmar"), board)
    assert session.board is board
    assert session.definition.game.board is board


def test_salt_does_not_pair_with_salt(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    put(sigmar, RIGHT, "salt")

    sigmar.click(MIDDLE)
    assert sigmar.click(RIGHT) is MatchStatus.FAILURE
    assert sigmar.selected == [MIDDLE]


def test_metals_unlock_in_order(sigmar) -> None:
    put(sigmar, MIDDLE, "lead")
    put(sigmar, RIGHT, "tin")
    put(sigmar, LEFT, "quicksilver")

    assert sigmar.is_selectable(MIDDLE)
    assert not sigmar.is_selectable(RIGHT)
    assert sigmar.click(RIGHT) is MatchStatus.FAILURE

    assert sigmar.click(LEFT) is MatchStatus.CONTINUE
    assert sigmar.click(MIDDLE) is MatchStatus.SUCCESS
    assert sigmar.is_selectable(RIGHT)


def test_selectable_skips_pieces_the_rules_reject(sigmar) -> None:
    put(sigmar, MIDDLE, "salt")
    put(sigmar, RIGHT, "vitae")
    put(sigmar, LEFT, "water")

    assert set(sigmar.selectable()) == {MIDDLE, RIGHT, LEFT}
    sigmar.click(MIDDLE)
    assert sigmar.selectable() == [LEFT]


def test_human_lets_elements_out_with_two_open_neighbours(mofang) -> None:
    put(mofang, MIDDLE, "human")
    put(mofang, RIGHT, "fire")
    put(mofang, (4, 0), "yin")
    put(mofang, (2, 0), "yin")
    put(mofang, LEFT, "yang")
    put(mofang, (-2, 0), "yin")
    put(mofang, (-4, 0), "yin")

    assert not mofang.is_selectable(RIGHT)
    assert mofang.click(MIDDLE) is MatchStatus.CONTINUE
    assert mofang.is_selectable(RIGHT)
    assert not mofang.is_selectable(LEFT)

    assert mofang.click(RIGHT) is MatchStatus.SUCCESS
    assert name_at(mofang, MIDDLE) == "fire"
    assert name_at(mofang, RIGHT) is None


def test_evaluation_error_leaves_the_selection_alone() -> None:
    definition = GameParser().parse(
        {
            "id": "broken",
            "nodes": ["a", "b"],
            "changes": [{"input": ["a", "b"], "result": ["@nowhere", None]}],
            "radius": 2,
        }
    )
    session = SelectionSession(definition)
    put(session, (-2, 0), "a")
    put(session, (2, 0), "b")

    assert session.click((-2, 0)) is MatchStatus.CONTINUE
    with pytest.raises(UnboundVariableError):
        session.click((2, 0))
    assert session.selected == [(-2, 0)]
    assert name_at(session, (2, 0)) == "b"
