"""Custom exceptions raised by the rule compiler and evaluator."""

from __future__ import annotations


class RuleParseError(ValueError):
    """Raised when a rule or game document cannot be compiled."""


class IdentifierFormatError(RuleParseError):
    """Raised when an identifier has more than one namespace separator."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Bad identifier '{text}'")
        self.text = text


class UnknownIdentifierError(RuleParseError):
    """Raised when a node, tag or mapping name is not defined by the game."""

    def __init__(self, kind: str, name: object) -> None:
        super().__init__(f"No such {kind} as '{name}' exists")
        self.kind = kind
        self.name = name


class UnknownBuiltinError(RuleParseError):
    """Raised when an object's ``type`` is not registered as a builtin."""

    def __init__(self, identifier: object) -> None:
        super().__init__(f"No such function with identifier '{identifier}'")
        self.identifier = identifier


class ResultLengthError(RuleParseError):
    """Raised when a rule's ``result`` does not have one entry per input slot."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Rule has {expected} input slot(s) but {actual} result expression(s)")
        self.expected = expected
        self.actual = actual


class EvaluationError(RuntimeError):
    """Raised when a compiled expression fails while a selection is being tested."""


class UnboundVariableError(EvaluationError):
    """Raised when an ``@name`` reference is not bound in the current scope."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Binding '{name}' doesn't exist in the current context")
        self.name = name


class ValueTypeError(EvaluationError):
    """Raised when a value of the wrong kind is coerced."""

    def __init__(self, expected: str, actual: object) -> None:
        super().__init__(f"Expected {expected}, got {actual!r}")
        self.expected = expected
        self.actual = actual


class GameNotFoundError(KeyError):
    """Raised when a requested game identifier has not been loaded."""

    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game '{game_id}' not found")
        self.game_id = game_id


__all__ = [
    "EvaluationError",
    "GameNotFoundError",
    "IdentifierFormatError",
    "ResultLengthError",
    "RuleParseError",
    "UnboundVariableError",
    "UnknownBuiltinError",
    "UnknownIdentifierError",
    "ValueTypeError",
]
