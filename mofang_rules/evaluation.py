"""Runtime values, the binding scope and the context compiled rules run in."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Tuple, Union

from mofang_core.board import Coordinate, ORIGIN

from .data import DataGame, DataNode
from .errors import ValueTypeError


class ValueKind(Enum):
    """Tags of :class:`EvalValue`, in the order values of different kinds sort."""

    BOOL = 0
    NUMBER = 1
    NODE = 2
    ARRAY = 3


Payload = Union[bool, int, float, Optional[DataNode], Tuple["EvalValue", ...]]


@total_ordering
@dataclass(frozen=True, eq=True)
class EvalValue:
    """Closed tagged union of boolean, number, optional piece type and array."""

    kind: ValueKind
    payload: Payload

    @classmethod
    def boolean(cls, value: bool) -> "EvalValue":
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def number(cls, value: Union[int, float]) -> "EvalValue":
        return cls(ValueKind.NUMBER, value)

    @classmethod
    def node(cls, value: Optional[DataNode]) -> "EvalValue":
        return cls(ValueKind.NODE, value)

    @classmethod
    def array(cls, values: Iterable["EvalValue"]) -> "EvalValue":
        return cls(ValueKind.ARRAY, tuple(values))

    def _sort_key(self) -> Tuple[Any, ...]:
        if self.kind is ValueKind.NODE:
            # The empty piece sorts before every concrete piece.
            return (self.kind.value, self.payload is not None, self.payload)
        return (self.kind.value, self.payload)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, EvalValue):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    # ------------------------------------------------------------------ coercion
    def as_bool(self) -> bool:
        if self.kind is not ValueKind.BOOL:
            raise ValueTypeError("boolean", self)
        return bool(self.payload)

    def as_int(self) -> int:
        if self.kind is not ValueKind.NUMBER:
            raise ValueTypeError("number", self)
        value = self.payload
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueTypeError("integer", self)
            return int(value)
        return int(value)  # type: ignore[arg-type]

    def as_node(self) -> Optional[DataNode]:
        if self.kind is not ValueKind.NODE:
            raise ValueTypeError("node", self)
        return self.payload  # type: ignore[return-value]

    def as_array(self) -> Tuple["EvalValue", ...]:
        if self.kind is not ValueKind.ARRAY:
            raise ValueTypeError("array", self)
        return self.payload  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"EvalValue.{self.kind.name.lower()}({self.payload!r})"


TRUE = EvalValue.boolean(True)
FALSE = EvalValue.boolean(False)
EMPTY = EvalValue.node(None)


class Scope:
    """Stack of name -> value frames; inner frames shadow outer ones.

    ``push`` does not allocate: it bumps a pending-frame counter on the top
    frame, and ``add`` only creates a real frame when that counter is non-zero.
    The base frame is never discarded.
    """

    def __init__(self, base: Optional[Mapping[str, EvalValue]] = None) -> None:
        self._frames: List[List[Any]] = [[dict(base or {}), 0]]

    def get(self, name: str) -> Optional[EvalValue]:
        for bindings, _pending in reversed(self._frames):
            if name in bindings:
                return bindings[name]
        return None

    def push(self) -> "Scope":
        self._frames[-1][1] += 1
        return self

    def add(self, name: str, value: EvalValue) -> "Scope":
        top = self._frames[-1]
        if top[1] == 0:
            top[0][name] = value
        else:
            top[1] -= 1
            self._frames.append([{name: value}, 0])
        return self

    def pop(self) -> "Scope":
        top = self._frames[-1]
        if top[1] > 0:
            top[1] -= 1
        elif len(self._frames) > 1:
            self._frames.pop()
        return self

    @property
    def depth(self) -> int:
        """Number of frames pushed above the base frame, allocated or not."""

        return len(self._frames) - 1 + sum(pending for _bindings, pending in self._frames)

    def unwind(self, depth: int) -> None:
        while self.depth > depth:
            self.pop()

    @contextmanager
    def frame(self) -> Iterator["Scope"]:
        """Push a frame and drop it, plus anything pushed inside, on exit."""

        depth = self.depth
        self.push()
        try:
            yield self
        finally:
            self.unwind(depth)

    def snapshot(self) -> Tuple[Tuple[Dict[str, EvalValue], int], ...]:
        return tuple((dict(bindings), pending) for bindings, pending in self._frames)


@dataclass
class EvalContext:
    """Everything a compiled expression may read while a selection is tested."""

    game: DataGame
    pos: Coordinate = ORIGIN
    scope: Scope = field(default_factory=Scope)


class Expression(Protocol):
    """A compiled condition or result expression."""

    def evaluate(self, ctx: EvalContext) -> EvalValue:  # pragma: no cover - protocol
        ...


class Predicate(Protocol):
    """A compiled single-piece test; may bind names into the current scope."""

    def test(self, node: DataNode, ctx: EvalContext) -> bool:  # pragma: no cover - protocol
        ...


@dataclass(frozen=True)
class Constant:
    value: EvalValue

    def evaluate(self, ctx: EvalContext) -> EvalValue:
        return self.value


__all__ = [
    "Constant",
    "EMPTY",
    "EvalContext",
    "EvalValue",
    "Expression",
    "FALSE",
    "Predicate",
    "Scope",
    "TRUE",
    "ValueKind",
]
