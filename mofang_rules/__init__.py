"""Public package interface for the data-driven rule engine."""

from .change import ChangeParser, ChangeTree, Checker
from .conditions import ConditionParser, ConditionRegistry, conditions
from .data import DataGame, DataNode, Identifier
from .errors import (
    EvaluationError,
    GameNotFoundError,
    IdentifierFormatError,
    ResultLengthError,
    RuleParseError,
    UnboundVariableError,
    UnknownBuiltinError,
    UnknownIdentifierError,
    ValueTypeError,
)
from .evaluation import EvalContext, EvalValue, Scope, ValueKind
from .loader import GameDefinition, GameParser, GameRepository
from .matcher import ComplexMatcher, MatchStatus, PartialResult, SimpleMatcher
from .predicates import PredicateRegistry, predicates
from .registry import BUILTIN_NAMESPACE, BuiltinRegistry
from .schema import ChangeDocument, GameDocument, get_change_json_schema, get_game_json_schema
from .session import SelectionSession

__all__ = [
    "BUILTIN_NAMESPACE",
    "BuiltinRegistry",
    "ChangeDocument",
    "ChangeParser",
    "ChangeTree",
    "Checker",
    "ComplexMatcher",
    "ConditionParser",
    "ConditionRegistry",
    "DataGame",
    "DataNode",
    "EvalContext",
    "EvalValue",
    "EvaluationError",
    "GameDefinition",
    "GameDocument",
    "GameNotFoundError",
    "GameParser",
    "GameRepository",
    "Identifier",
    "IdentifierFormatError",
    "MatchStatus",
    "PartialResult",
    "PredicateRegistry",
    "ResultLengthError",
    "RuleParseError",
    "Scope",
    "SelectionSession",
    "SimpleMatcher",
    "UnboundVariableError",
    "UnknownBuiltinError",
    "UnknownIdentifierError",
    "ValueKind",
    "ValueTypeError",
    "conditions",
    "get_change_json_schema",
    "get_game_json_schema",
    "predicates",
]
