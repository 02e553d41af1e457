"""Pydantic models describing the JSON documents rules and games are written in."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, StrictStr, ValidationError, model_validator

from .errors import RuleParseError


class ChangeDocument(BaseModel):
    """One link of a rule; ``next`` nests the following link."""

    model_config = ConfigDict(extra="forbid")
    input: List[Union[StrictStr, Dict[str, Any]]] = Field(
        ..., min_length=1, description="Literal piece names and/or predicate objects"
    )
    guard: Optional[Any] = Field(default=None, description="Boolean condition; absent means always true")
    result: Optional[List[Any]] = Field(
        default=None, description="One replacement expression per input slot; absent clears every slot"
    )
    next: Optional["ChangeDocument"] = None


ChangeDocument.model_rebuild()


class GameDocument(BaseModel):
    """A complete game definition: registry contents, rules and deal parameters."""

    model_config = ConfigDict(extra="forbid")
    id: str = Field(..., min_length=1, description="Namespace for bare piece names")
    nodes: List[str] = Field(..., min_length=1)
    tags: Dict[str, List[str]] = Field(default_factory=dict)
    mappings: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    select: Any = Field(default=True, description="Condition a cell must satisfy to be selectable")
    changes: List[ChangeDocument] = Field(default_factory=list)
    radius: NonNegativeInt = 5
    center: Optional[str] = None
    bank: Dict[str, NonNegativeInt] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_names(self) -> "GameDocument":
        if ":" in self.id:
            raise ValueError("game id must not contain ':'")
        if len(set(self.nodes)) != len(self.nodes):
            raise ValueError("node names must be unique")
        return self


def validate_change(payload: Union[ChangeDocument, Mapping[str, Any]]) -> ChangeDocument:
    if isinstance(payload, ChangeDocument):
        return payload
    try:
        return ChangeDocument.model_validate(payload)
    except ValidationError as exc:
        raise RuleParseError(f"Invalid change document: {exc}") from exc


def validate_game(payload: Union[GameDocument, Mapping[str, Any]]) -> GameDocument:
    if isinstance(payload, GameDocument):
        return payload
    try:
        return GameDocument.model_validate(payload)
    except ValidationError as exc:
        raise RuleParseError(f"Invalid game document: {exc}") from exc


def get_change_json_schema() -> Dict[str, Any]:
    """Return the JSON schema used to validate rule payloads."""

    return ChangeDocument.model_json_schema()


def get_game_json_schema() -> Dict[str, Any]:
    return GameDocument.model_json_schema()


__all__ = [
    "ChangeDocument",
    "GameDocument",
    "get_change_json_schema",
    "get_game_json_schema",
    "validate_change",
    "validate_game",
]
