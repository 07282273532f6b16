"""Request-scoped registries of value holders and context providers.

Both registries store providers by identifier with last-write-wins
semantics, so request setup code can deliberately override a value
registered earlier in the same scope. They are owned by a single unit of
work and are not safe for concurrent writers.
"""

from __future__ import annotations

from collections.abc import Callable, ItemsView
from dataclasses import dataclass
from typing import Generic, TypeVar

from filtering.ports.exceptions import (
    UnknownContextProviderError,
    UnknownIdentifierError,
    UnknownValueHolderError,
)
from filtering.ports.protocols import ContextProvider, ValueHolder

P = TypeVar("P", ValueHolder, ContextProvider)


class _Registry(Generic[P]):
    """Insertion-ordered identifier -> provider store."""

    _missing_error: type[UnknownIdentifierError] = UnknownIdentifierError

    def __init__(self) -> None:
        self._providers: dict[str, P] = {}

    def register(self, identifier: str, provider: P) -> None:
        """Store a provider, replacing any earlier one with the same identifier."""
        # Overwrites keep the identifier's original position in list_all()
        self._providers[identifier] = provider

    def add(self, provider: P) -> None:
        """Store a provider under its own identifier."""
        self.register(provider.identifier, provider)

    def lookup(self, identifier: str) -> P:
        """Return the provider registered under ``identifier``.

        Raises:
            UnknownIdentifierError: If nothing is registered under it.
        """
        try:
            return self._providers[identifier]
        except KeyError:
            raise self._missing_error(identifier) from None

    def list_all(self) -> ItemsView[str, P]:
        """Return a restartable, insertion-ordered view of (identifier, provider)."""
        return self._providers.items()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._providers

    def __len__(self) -> int:
        return len(self._providers)


class ValueRegistry(_Registry[ValueHolder]):
    """Named runtime values usable inside filter templates."""

    _missing_error = UnknownValueHolderError

    def set_value(self, identifier: str, value: str | None) -> None:
        """Register a static value under ``identifier``."""
        self.register(identifier, StaticValueHolder(identifier, value))


class ContextRegistry(_Registry[ContextProvider]):
    """Named boolean context evaluators."""

    _missing_error = UnknownContextProviderError

    def set_context(self, identifier: str, contextual: bool | Callable[[], bool]) -> None:
        """Register a fixed flag or a zero-argument callable under ``identifier``."""
        if callable(contextual):
            self.register(identifier, CallableContextProvider(identifier, contextual))
        else:
            self.register(identifier, StaticContextProvider(identifier, contextual))


@dataclass(frozen=True)
class StaticValueHolder:
    """A value holder with a fixed value."""

    identifier: str
    value: str | None


@dataclass(frozen=True)
class StaticContextProvider:
    """A context provider with a fixed answer."""

    identifier: str
    contextual: bool

    def is_contextual(self) -> bool:
        return self.contextual


@dataclass(frozen=True)
class CallableContextProvider:
    """A context provider backed by a zero-argument callable."""

    identifier: str
    evaluator: Callable[[], bool]

    def is_contextual(self) -> bool:
        return bool(self.evaluator())
