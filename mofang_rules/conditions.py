"""Compiler from JSON-shaped condition trees to executable expressions.

Literals compile to constants, ``"@name"`` strings to scope lookups, other
strings to piece types resolved at compile time, arrays element-wise, and
objects through a registry of builtin functions keyed by their ``type``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .data import DataGame, DataNode
from .errors import RuleParseError, UnboundVariableError
from .evaluation import EMPTY, FALSE, TRUE, Constant, EvalContext, EvalValue, Expression
from .registry import BuiltinRegistry

VARIABLE_PREFIX = "@"

ConditionBuilder = Callable[["ConditionParser", Mapping[str, Any]], Expression]
ConditionRegistry = BuiltinRegistry[ConditionBuilder]


@dataclass(frozen=True)
class Variable:
    name: str

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        value = ctx.scope.get(self.name)
        if value is None:
            raise UnboundVariableError(self.name)
        return value


@dataclass(frozen=True)
class ArrayExpression:
    items: Sequence[Expression]

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        return EvalValue.array([item.evaluate(ctx) for item in self.items])


class ConditionParser:
    """Compiles condition JSON against one game's registry."""

    def __init__(self, game: DataGame, functions: Optional[ConditionRegistry] = None) -> None:
        self.game = game
        self.functions = functions if functions is not None else conditions

    def parse(self, value: Any) -> Expression:
        if value is None:
            return Constant(EMPTY)
        if isinstance(value, bool):
            return Constant(TRUE if value else FALSE)
        if isinstance(value, (int, float)):
            return Constant(EvalValue.number(value))
        if isinstance(value, str):
            return self._parse_string(value)
        if isinstance(value, list):
            return ArrayExpression(tuple(self.parse_list(value)))
        if isinstance(value, Mapping):
            return self._parse_object(value)
        raise RuleParseError(f"Cannot compile condition value {value!r}")

    def parse_key(self, mapping: Mapping[str, Any], key: str) -> Expression:
        """Compile ``mapping[key]``, which must be present."""

        if key not in mapping:
            raise RuleParseError(f"Missing {key} in condition object")
        return self.parse(mapping[key])

    def parse_list(self, values: Sequence[Any]) -> List[Expression]:
        return [self.parse(value) for value in values]

    def parse_values(self, mapping: Mapping[str, Any]) -> List[Expression]:
        """Compile the ``values`` array shared by the folding builtins."""

        values = mapping.get("values")
        if values is None:
            raise RuleParseError(f"{mapping.get('type')} needs a values array")
        if not isinstance(values, list):
            raise RuleParseError("values must be an array")
        return self.parse_list(values)

    # ------------------------------------------------------------------ helpers
    def _parse_string(self, text: str) -> Expression:
        if text.startswith(VARIABLE_PREFIX):
            return Variable(text[len(VARIABLE_PREFIX):])
        return Constant(EvalValue.node(self.game.resolve(text)))

    def _parse_object(self, mapping: Mapping[str, Any]) -> Expression:
        if "type" not in mapping:
            raise RuleParseError("Missing type in condition object")
        type_name = mapping["type"]
        if not isinstance(type_name, str):
            raise RuleParseError(f"Type of condition object {type_name!r} isn't a string")
        builder = self.functions.resolve(type_name)
        return builder(self, mapping)


conditions: ConditionRegistry = BuiltinRegistry("condition")


@dataclass(frozen=True)
class IfExpression:
    cond: Expression
    then: Expression
    otherwise: Expression

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        if self.cond.evaluate(ctx).as_bool():
            return self.then.evaluate(ctx)
        return self.otherwise.evaluate(ctx)


@dataclass(frozen=True)
class AndExpression:
    values: Sequence[Expression]

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        for value in self.values:
            if not value.evaluate(ctx).as_bool():
                return FALSE
        return TRUE


@dataclass(frozen=True)
class OrExpression:
    values: Sequence[Expression]

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        for value in self.values:
            if value.evaluate(ctx).as_bool():
                return TRUE
        return FALSE


@dataclass(frozen=True)
class EqualsExpression:
    values: Sequence[Expression]

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        if not self.values:
            return TRUE
        head = self.values[0].evaluate(ctx)
        for value in self.values[1:]:
            if value.evaluate(ctx) != head:
                return FALSE
        return TRUE


@dataclass(frozen=True)
class ContiguousNeighbors:
    """True when the longest run of empty neighbours is at least ``value``."""

    value: Expression

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        target = self.value.evaluate(ctx).as_int()
        return EvalValue.boolean(target <= open_run_length(ctx))


@dataclass(frozen=True)
class Lookup:
    """Value ``table`` maps the evaluated piece to; empty when it has no entry."""

    table: Mapping[DataNode, DataNode]
    value: Expression

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        node = self.value.evaluate(ctx).as_node()
        return EvalValue.node(None if node is None else self.table.get(node))


@dataclass(frozen=True)
class BoardContains:
    value: Expression

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        node = self.value.evaluate(ctx).as_node()
        return EvalValue.boolean(node is not None and ctx.game.on_board(node))


def open_run_length(ctx: EvalContext) -> int:
    """Longest cyclic run of empty cells around ``ctx.pos``; 6 when all are empty."""

    around = list(ctx.game.neighbors_of(ctx.pos))
    occupied = [ctx.game.get_node(coord) is not None for coord in around]
    if not any(occupied):
        return len(around)
    first = occupied.index(True)
    longest = run = 0
    # Walk once around, starting just after the first occupied neighbour so
    # the walk ends on it and every run is closed.
    for offset in range(1, len(around) + 1):
        if occupied[(first + offset) % len(around)]:
            longest = max(longest, run)
            run = 0
        else:
            run += 1
    return longest


@conditions.register("if")
def build_if(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return IfExpression(
        parser.parse_key(mapping, "cond"),
        parser.parse_key(mapping, "then"),
        parser.parse_key(mapping, "else"),
    )


@conditions.register("and")
def build_and(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return AndExpression(tuple(parser.parse_values(mapping)))


@conditions.register("or")
def build_or(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return OrExpression(tuple(parser.parse_values(mapping)))


@conditions.register("equals")
def build_equals(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return EqualsExpression(tuple(parser.parse_values(mapping)))


@conditions.register("contiguous-neighbors")
def build_contiguous_neighbors(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return ContiguousNeighbors(parser.parse_key(mapping, "value"))


@conditions.register("lookup")
def build_lookup(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    name = mapping.get("mapping")
    if not isinstance(name, str):
        raise RuleParseError(f"lookup needs a mapping name, got {name!r}")
    return Lookup(dict(parser.game.mapping(name)), parser.parse_key(mapping, "value"))


@conditions.register("board-contains")
def build_board_contains(parser: ConditionParser, mapping: Mapping[str, Any]) -> Expression:
    return BoardContains(parser.parse_key(mapping, "value"))


__all__ = [
    "AndExpression",
    "ArrayExpression",
    "BoardContains",
    "ConditionParser",
    "ConditionRegistry",
    "ContiguousNeighbors",
    "EqualsExpression",
    "IfExpression",
    "Lookup",
    "OrExpression",
    "Variable",
    "conditions",
    "open_run_length",
]
