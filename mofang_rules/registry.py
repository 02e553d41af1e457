"""Registry keeping the mapping between builtin identifiers and their compilers."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Optional, TypeVar

from .data import Identifier
from .errors import UnknownBuiltinError

BUILTIN_NAMESPACE = "engine"

BuilderT = TypeVar("BuilderT", bound=Callable[..., object])


class BuiltinRegistry(Generic[BuilderT]):
    """Builders keyed by :class:`Identifier`; bare names land in ``namespace``.

    Registering the same identifier twice is an error, so embedders extending
    a registry cannot silently replace a builtin.
    """

    def __init__(self, kind: str, namespace: str = BUILTIN_NAMESPACE) -> None:
        self.kind = kind
        self.namespace = namespace
        self._builders: Dict[Identifier, BuilderT] = {}

    def register(self, name: str, builder: Optional[BuilderT] = None):  # type: ignore[override]
        if builder is None:
            def decorator(func: BuilderT) -> BuilderT:
                self.register(name, func)
                return func

            return decorator
        identifier = Identifier.parse(name, self.namespace)
        if identifier in self._builders:
            raise ValueError(f"Builder already registered for {self.kind} '{identifier}'")
        self._builders[identifier] = builder
        return builder

    def get(self, identifier: Identifier) -> BuilderT:
        try:
            return self._builders[identifier]
        except KeyError as exc:
            raise UnknownBuiltinError(identifier) from exc

    def resolve(self, type_name: str) -> BuilderT:
        """Look up the builder named by an object's ``type`` field."""

        return self.get(Identifier.parse(type_name, self.namespace))

    def copy(self) -> "BuiltinRegistry[BuilderT]":
        clone: BuiltinRegistry[BuilderT] = BuiltinRegistry(self.kind, self.namespace)
        clone._builders = dict(self._builders)
        return clone

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._builders

    def __len__(self) -> int:
        return len(self._builders)


__all__ = ["BUILTIN_NAMESPACE", "BuiltinRegistry"]
