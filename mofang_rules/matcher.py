"""Pattern matchers and the three-valued match protocol.

A matcher compares a compiled input pattern against the pieces currently
selected and answers with a :class:`PartialResult`: ``SUCCESS`` with the
candidate index chosen for every pattern slot, ``CONTINUE`` when the selection
could still grow into a match, or ``FAILURE``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from .data import DataNode
from .evaluation import EvalContext, Predicate, Scope

T = TypeVar("T")


class MatchStatus(str, Enum):
    SUCCESS = "success"
    CONTINUE = "continue"
    FAILURE = "failure"


@dataclass(frozen=True)
class PartialResult(Generic[T]):
    """Represents a success, a failure, or a needs-more-pieces."""

    status: MatchStatus
    value: Optional[T] = None

    @classmethod
    def success(cls, value: T) -> "PartialResult[T]":
        return cls(MatchStatus.SUCCESS, value)

    @property
    def is_success(self) -> bool:
        return self.status is MatchStatus.SUCCESS

    def is_valid(self) -> bool:
        """Is this a success or a needs-more-pieces?"""

        return self.status is not MatchStatus.FAILURE


CONTINUE: PartialResult = PartialResult(MatchStatus.CONTINUE)
FAILURE: PartialResult = PartialResult(MatchStatus.FAILURE)


def assign(rows: int, columns: int, accepts: Callable[[int, int], bool], scope: Scope) -> Optional[List[int]]:
    """Give every row a distinct column it accepts, depth first.

    Rows are tried in order against the lowest unused column; on a dead end the
    last choice is undone and the next column tried.  Each attempt runs in its
    own scope frame, so bindings made by rejected attempts are dropped while the
    frames of the winning assignment stay pushed for the caller to unwind.
    Returns the chosen column per row, or None when no assignment exists.
    """

    chosen: List[int] = []
    used = 0
    start = 0
    while len(chosen) < rows:
        row = len(chosen)
        for column in range(start, columns):
            if used >> column & 1:
                continue
            scope.push()
            if accepts(row, column):
                chosen.append(column)
                used |= 1 << column
                start = 0
                break
            scope.pop()
        else:
            if not chosen:
                return None
            column = chosen.pop()
            used &= ~(1 << column)
            scope.pop()
            start = column + 1
    return chosen


class SimpleMatcher:
    """Fixed multiset of concrete piece types."""

    def __init__(self, nodes: Sequence[DataNode]) -> None:
        # Sorted canonically; each entry remembers the slot it was written in.
        self.pattern: List[Tuple[DataNode, int]] = sorted(
            ((node, slot) for slot, node in enumerate(nodes)), key=lambda entry: entry[0]
        )

    def __len__(self) -> int:
        return len(self.pattern)

    @property
    def nodes(self) -> List[DataNode]:
        return [node for node, _slot in self.pattern]

    def test(self, candidates: Sequence[DataNode], ctx: Optional[EvalContext] = None) -> PartialResult[List[int]]:
        order = sorted(range(len(candidates)), key=lambda index: candidates[index])
        positions: List[int] = [0] * len(self.pattern)
        matched = 0
        cursor = 0
        while matched < len(self.pattern) and cursor < len(order):
            wanted, slot = self.pattern[matched]
            found = candidates[order[cursor]]
            if found == wanted:
                positions[slot] = order[cursor]
                matched += 1
                cursor += 1
            elif found < wanted:
                cursor += 1
            else:
                break
        if matched == len(self.pattern):
            return PartialResult.success(positions)
        if len(self.pattern) >= len(candidates) and self._extends([candidates[index] for index in order]):
            return CONTINUE
        return FAILURE

    def _extends(self, ordered: Sequence[DataNode]) -> bool:
        """Is every (sorted) candidate matched by a distinct pattern element?"""

        cursor = 0
        for wanted, _slot in self.pattern:
            if cursor == len(ordered):
                break
            if ordered[cursor] == wanted:
                cursor += 1
            elif ordered[cursor] < wanted:
                return False
        return cursor == len(ordered)


class ComplexMatcher:
    """Ordered list of predicates, matched by backtracking search."""

    def __init__(self, predicates: Sequence[Predicate]) -> None:
        self.predicates: List[Predicate] = list(predicates)

    def __len__(self) -> int:
        return len(self.predicates)

    def test(self, candidates: Sequence[DataNode], ctx: EvalContext) -> PartialResult[List[int]]:
        tests = self.predicates
        if len(tests) <= len(candidates):
            chosen = assign(
                len(tests),
                len(candidates),
                lambda row, column: tests[row].test(candidates[column], ctx),
                ctx.scope,
            )
            if chosen is not None:
                return PartialResult.success(chosen)
        if len(tests) >= len(candidates):
            with ctx.scope.frame():
                placed = assign(
                    len(candidates),
                    len(tests),
                    lambda row, column: tests[column].test(candidates[row], ctx),
                    ctx.scope,
                )
            if placed is not None:
                return CONTINUE
        return FAILURE


Matcher = Union[SimpleMatcher, ComplexMatcher]


__all__ = [
    "CONTINUE",
    "ComplexMatcher",
    "FAILURE",
    "MatchStatus",
    "Matcher",
    "PartialResult",
    "SimpleMatcher",
    "assign",
]
