"""Single-piece predicates used by complex input patterns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, FrozenSet, Mapping, Optional

from .data import DataNode
from .errors import RuleParseError
from .evaluation import EvalContext, EvalValue, Predicate
from .registry import BuiltinRegistry

if TYPE_CHECKING:
    from .change import ChangeParser

PredicateBuilder = Callable[["ChangeParser", Mapping[str, Any]], Predicate]
PredicateRegistry = BuiltinRegistry[PredicateBuilder]


@dataclass(frozen=True)
class NodeEquals:
    """Literal slot inside a complex pattern."""

    node: DataNode

    def test(self, node: DataNode, ctx: EvalContext) -> bool:
        return node == self.node


@dataclass(frozen=True)
class TagMember:
    """Accepts members of a tag, optionally binding the accepted piece."""

    members: FrozenSet[DataNode]
    bind: Optional[str] = None

    def test(self, node: DataNode, ctx: EvalContext) -> bool:
        if node not in self.members:
            return False
        if self.bind is not None:
            ctx.scope.add(self.bind, EvalValue.node(node))
        return True


@dataclass(frozen=True)
class MappingKey:
    """Accepts keys of a value mapping, optionally binding the key and its value."""

    table: Mapping[DataNode, DataNode]
    bind_key: Optional[str] = None
    bind_val: Optional[str] = None

    def test(self, node: DataNode, ctx: EvalContext) -> bool:
        mapped = self.table.get(node)
        if mapped is None:
            return False
        if self.bind_key is not None:
            ctx.scope.add(self.bind_key, EvalValue.node(node))
        if self.bind_val is not None:
            ctx.scope.add(self.bind_val, EvalValue.node(mapped))
        return True


def _string_field(mapping: Mapping[str, Any], key: str, *, required: bool = False) -> Optional[str]:
    value = mapping.get(key)
    if value is None:
        if required:
            raise RuleParseError(f"{mapping.get('type')} needs a '{key}' field")
        return None
    if not isinstance(value, str):
        raise RuleParseError(f"Field '{key}' must be a string, got {value!r}")
    return value


predicates: PredicateRegistry = BuiltinRegistry("predicate")


@predicates.register("mapping-key")
def build_tag_member(parser: "ChangeParser", mapping: Mapping[str, Any]) -> Predicate:
    tag = _string_field(mapping, "tag", required=True)
    return TagMember(parser.game.tag(tag), _string_field(mapping, "bind"))


@predicates.register("tag")
def build_mapping_key(parser: "ChangeParser", mapping: Mapping[str, Any]) -> Predicate:
    name = _string_field(mapping, "mapping", required=True)
    return MappingKey(
        dict(parser.game.mapping(name)),
        _string_field(mapping, "bind-key"),
        _string_field(mapping, "bind-val"),
    )


__all__ = [
    "MappingKey",
    "NodeEquals",
    "PredicateRegistry",
    "TagMember",
    "predicates",
]
