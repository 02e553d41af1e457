"""Rule chains ("changes"), rule sets and the parser that builds them from JSON."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .conditions import ConditionParser
from .data import DataGame, DataNode
from .errors import ResultLengthError, RuleParseError
from .evaluation import EMPTY, Constant, EvalContext, Expression
from .matcher import CONTINUE, FAILURE, ComplexMatcher, Matcher, MatchStatus, PartialResult, SimpleMatcher
from .predicates import NodeEquals, PredicateRegistry, predicates
from .schema import ChangeDocument, validate_change

logger = logging.getLogger(__name__)

COMPLEX_PATTERN_WARN_LENGTH = 3

Replacements = Dict[int, Optional[DataNode]]
Indexed = List[Tuple[int, DataNode]]


@dataclass
class Checker:
    """One link of a rule: a pattern, its guard, per-slot results and an optional child."""

    matcher: Matcher
    guard: Optional[Expression] = None
    results: Sequence[Expression] = field(default_factory=tuple)
    child: Optional["Checker"] = None

    def __post_init__(self) -> None:
        if len(self.results) != len(self.matcher):
            raise ResultLengthError(len(self.matcher), len(self.results))

    def test(self, ctx: EvalContext, candidates: Sequence[DataNode]) -> PartialResult[Replacements]:
        """Match the whole chain against ``candidates``.

        On success the value maps every candidate index to its replacement.
        Bindings made by any link are visible to every link's results; all of
        them are dropped before this returns, whatever the outcome.
        """

        with ctx.scope.frame():
            matched: List[Tuple[Checker, Indexed, List[int]]] = []
            status = self._match(ctx, list(enumerate(candidates)), matched)
            if status is not MatchStatus.SUCCESS:
                return CONTINUE if status is MatchStatus.CONTINUE else FAILURE
            replacements: Replacements = {}
            for link, indexed, slots in reversed(matched):
                for slot, expression in zip(slots, link.results):
                    replacements[indexed[slot][0]] = expression.evaluate(ctx).as_node()
            return PartialResult.success(replacements)

    def _match(
        self,
        ctx: EvalContext,
        indexed: Indexed,
        matched: List[Tuple["Checker", Indexed, List[int]]],
    ) -> MatchStatus:
        ctx.scope.push()
        outcome = self.matcher.test([node for _index, node in indexed], ctx)
        if not outcome.is_success:
            return outcome.status
        slots = outcome.value or []
        if self.guard is not None and not self.guard.evaluate(ctx).as_bool():
            return MatchStatus.FAILURE
        matched.append((self, indexed, slots))
        taken = set(slots)
        remaining = [entry for position, entry in enumerate(indexed) if position not in taken]
        if self.child is not None:
            return self.child._match(ctx, remaining, matched)
        # Nothing further down can consume leftover pieces.
        return MatchStatus.FAILURE if remaining else MatchStatus.SUCCESS

    def __len__(self) -> int:
        return len(self.matcher)


class ChangeTree:
    """Ordered alternatives; the first rule to succeed wins."""

    def __init__(self, checkers: Iterable[Checker] = ()) -> None:
        self.checkers: List[Checker] = list(checkers)

    def __len__(self) -> int:
        return len(self.checkers)

    def add(self, checker: Checker) -> None:
        self.checkers.append(checker)

    def test(self, ctx: EvalContext, candidates: Sequence[DataNode]) -> PartialResult[List[Optional[DataNode]]]:
        """Return the replacement for every candidate, in candidate order."""

        extensible = False
        for number, checker in enumerate(self.checkers):
            outcome = checker.test(ctx, candidates)
            if outcome.is_success:
                replacements = outcome.value or {}
                logger.debug("Rule %d matched %d piece(s)", number, len(candidates))
                return PartialResult.success([replacements.get(index) for index in range(len(candidates))])
            if outcome.status is MatchStatus.CONTINUE:
                extensible = True
        return CONTINUE if extensible else FAILURE


class ChangeParser:
    """Compiles rule JSON objects into :class:`Checker` chains for one game."""

    def __init__(
        self,
        game: DataGame,
        cond_parser: Optional[ConditionParser] = None,
        functions: Optional[PredicateRegistry] = None,
    ) -> None:
        self.game = game
        self.cond_parser = cond_parser if cond_parser is not None else ConditionParser(game)
        self.functions = functions if functions is not None else predicates

    def parse(self, value: Union[ChangeDocument, Mapping[str, Any]]) -> Checker:
        return self._compile(validate_change(value))

    def parse_all(self, values: Iterable[Union[ChangeDocument, Mapping[str, Any]]]) -> ChangeTree:
        return ChangeTree(self.parse(value) for value in values)

    def parse_inputs(self, inputs: Sequence[Union[str, Mapping[str, Any]]]) -> Matcher:
        if all(isinstance(value, str) for value in inputs):
            return SimpleMatcher([self.game.resolve(value) for value in inputs])  # type: ignore[arg-type]
        tests = [
            NodeEquals(self.game.resolve(value)) if isinstance(value, str) else self.parse_predicate(value)
            for value in inputs
        ]
        if len(tests) > COMPLEX_PATTERN_WARN_LENGTH:
            logger.warning(
                "Complex pattern with %d inputs; matching is exponential in pattern length",
                len(tests),
            )
        return ComplexMatcher(tests)

    def parse_predicate(self, mapping: Mapping[str, Any]):
        type_name = mapping.get("type")
        if not isinstance(type_name, str):
            raise RuleParseError(f"Input object needs a string type, got {type_name!r}")
        builder = self.functions.resolve(type_name)
        return builder(self, mapping)

    # ------------------------------------------------------------------ helpers
    def _compile(self, document: ChangeDocument) -> Checker:
        matcher = self.parse_inputs(document.input)
        guard = None if document.guard is None else self.cond_parser.parse(document.guard)
        if document.result is None:
            results: List[Expression] = [Constant(EMPTY)] * len(document.input)
        else:
            if len(document.result) != len(document.input):
                raise ResultLengthError(len(document.input), len(document.result))
            results = self.cond_parser.parse_list(document.result)
        child = None if document.next is None else self._compile(document.next)
        return Checker(matcher, guard, tuple(results), child)


__all__ = ["COMPLEX_PATTERN_WARN_LENGTH", "ChangeParser", "ChangeTree", "Checker", "Replacements"]
