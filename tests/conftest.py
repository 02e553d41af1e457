import sys
import warnings
from pathlib import Path

import pytest
from pydantic.json_schema import PydanticJsonSchemaWarning

# Ensure the project root is available on the Python path when running the tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

warnings.filterwarnings("ignore", category=PydanticJsonSchemaWarning)

from mofang_core.board import HexBoard  # noqa: E402
from mofang_rules.data import DataGame, DataNode  # noqa: E402
from mofang_rules.evaluation import EvalContext  # noqa: E402

ELEMENTS = ["wood", "fire", "earth", "metal", "water"]


@pytest.fixture
def game() -> DataGame:
    return DataGame.build(
        "game",
        ELEMENTS + ["gold", "iron"],
        tags={"metal": ["gold", "iron"], "elemental": ELEMENTS},
        mappings={"upgrade": {"iron": "gold"}},
        board=HexBoard(3),
    )


@pytest.fixture
def node(game: DataGame):
    def resolve(name: str) -> DataNode:
        return game.resolve(name)

    return resolve


@pytest.fixture
def ctx(game: DataGame) -> EvalContext:
    return EvalContext(game=game)
