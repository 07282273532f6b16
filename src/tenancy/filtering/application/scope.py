"""Request-scoped tenancy state.

A TenancyScope carries the value and context registries of one unit of
work. It can be passed to the compiler explicitly or bound to the current
execution context with :func:`bind_scope`, which uses a ContextVar so that
concurrent requests (threads or asyncio tasks) each see their own scope.

Usage:
    scope = TenancyScope()
    scope.values.set_value("tenant_id", "'01ARZ3NDEKTSV4RRFFQ69G5FAV'")
    with bind_scope(scope):
        predicate = compiler.compile("Invoice", "i0")
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field

from filtering.application.registries import ContextRegistry, ValueRegistry
from filtering.ports.exceptions import UnregisteredRegistryError
from shared_kernel.observability_context import ObservationContext


@dataclass
class TenancyScope:
    """Registries for one request or unit of work.

    Attributes:
        values: Value holders available to templates.
        contexts: Context providers available to rules.
        observation: Metadata attached to compiler log events.
    """

    values: ValueRegistry = field(default_factory=ValueRegistry)
    contexts: ContextRegistry = field(default_factory=ContextRegistry)
    observation: ObservationContext = field(default_factory=ObservationContext)


_current_scope: ContextVar[TenancyScope | None] = ContextVar(
    "tenancy_scope", default=None
)


def current_scope() -> TenancyScope:
    """Return the scope bound to the current execution context.

    Raises:
        UnregisteredRegistryError: If no scope has been bound.
    """
    scope = _current_scope.get()
    if scope is None:
        raise UnregisteredRegistryError(
            "No tenancy scope is bound to the current unit of work; "
            "value and context registries must be attached before compiling"
        )
    return scope


@contextmanager
def bind_scope(scope: TenancyScope) -> Iterator[TenancyScope]:
    """Bind ``scope`` for the duration of the block, restoring the previous one after."""
    token = _current_scope.set(scope)
    try:
        yield scope
    finally:
        _current_scope.reset(token)
