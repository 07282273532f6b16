"""Ports for the Filtering bounded context.

Protocols for collaborators and the exception taxonomy shared by the
application and infrastructure layers.
"""

from filtering.ports.exceptions import (
    DeclarationMissingError,
    InvalidDeclarationError,
    NoRulesConfiguredError,
    TenancyFilterError,
    UnknownContextProviderError,
    UnknownIdentifierError,
    UnknownValueHolderError,
    UnregisteredRegistryError,
)
from filtering.ports.protocols import (
    ContextProvider,
    DeclarationResolver,
    ValueHolder,
)

__all__ = [
    "ContextProvider",
    "DeclarationMissingError",
    "DeclarationResolver",
    "InvalidDeclarationError",
    "NoRulesConfiguredError",
    "TenancyFilterError",
    "UnknownContextProviderError",
    "UnknownIdentifierError",
    "UnknownValueHolderError",
    "UnregisteredRegistryError",
    "ValueHolder",
]
