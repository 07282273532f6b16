"""Application layer for the Filtering bounded context."""

from filtering.application.registries import (
    CallableContextProvider,
    ContextRegistry,
    StaticContextProvider,
    StaticValueHolder,
    ValueRegistry,
)
from filtering.application.scope import TenancyScope, bind_scope, current_scope
from filtering.application.services import PredicateCompiler

__all__ = [
    "CallableContextProvider",
    "ContextRegistry",
    "PredicateCompiler",
    "StaticContextProvider",
    "StaticValueHolder",
    "TenancyScope",
    "ValueRegistry",
    "bind_scope",
    "current_scope",
]
