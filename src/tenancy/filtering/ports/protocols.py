"""Protocols for collaborators of the predicate compiler.

Value holders and context providers are supplied by request-scoped setup
code. Declaration resolution is supplied by whatever discovers the tenancy
rules of resource types at load time.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from filtering.domain.value_objects import TenancyDeclaration


@runtime_checkable
class ValueHolder(Protocol):
    """A named runtime value injectable into filter templates.

    The value is inserted into SQL verbatim, so implementations are
    responsible for only exposing trusted, already-validated values.
    """

    @property
    def identifier(self) -> str:
        """Key under which the value is referenced as ``{identifier}``."""
        ...

    @property
    def value(self) -> str | None:
        """The value, or None when the request has no value for it."""
        ...


@runtime_checkable
class ContextProvider(Protocol):
    """A named boolean evaluator gating whether a rule applies.

    ``is_contextual`` may be called several times per compile and must be
    cheap and free of side effects.
    """

    @property
    def identifier(self) -> str:
        """Context tag this provider answers for."""
        ...

    def is_contextual(self) -> bool:
        """Whether the current request is in this context."""
        ...


class DeclarationResolver(Protocol):
    """Looks up the tenancy declaration of a resource type."""

    def resolve(self, resource_type: str) -> TenancyDeclaration | None:
        """Return the declaration, or None if the type never declared one.

        None is not the same as disabled: callers treat it as an error.
        """
        ...
