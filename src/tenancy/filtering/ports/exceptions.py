"""Exceptions for the Filtering bounded context.

Every error here signals a configuration or programming defect on a
security-relevant path. None are transient: they propagate to the query
engine so the triggering query fails instead of running unfiltered.
"""


class TenancyFilterError(Exception):
    """Base exception for tenancy predicate compilation."""

    pass


class DeclarationMissingError(TenancyFilterError):
    """Raised when a resource type has no tenancy declaration at all.

    Resource types must opt in or out explicitly. A missing declaration
    usually means a new tenant-scoped type was added without isolation
    rules, so the query is stopped rather than run unfiltered.
    """

    def __init__(self, resource_type: str):
        super().__init__(
            f"{resource_type} must declare its tenancy rules "
            "(use TenancyDeclaration.disabled() to opt out)"
        )
        self.resource_type = resource_type


class NoRulesConfiguredError(TenancyFilterError):
    """Raised when a declaration is enabled but supplies zero rules."""

    def __init__(self, resource_type: str):
        super().__init__(
            f"{resource_type} is enabled for multi-tenancy, but no filter rules were declared"
        )
        self.resource_type = resource_type


class UnknownIdentifierError(TenancyFilterError, KeyError):
    """Raised when a registry lookup finds nothing under an identifier."""

    kind = "provider"

    def __init__(self, identifier: str):
        super().__init__(f'Unable to find a {self.kind} for "{identifier}"')
        self.identifier = identifier

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class UnknownContextProviderError(UnknownIdentifierError):
    """Raised when a rule references a context tag with no registered evaluator."""

    kind = "ContextProvider"


class UnknownValueHolderError(UnknownIdentifierError):
    """Raised when a template placeholder has no registered value in scope."""

    kind = "ValueHolder"


class UnregisteredRegistryError(TenancyFilterError):
    """Raised when compiling before registries were attached to the current scope."""

    pass


class InvalidDeclarationError(TenancyFilterError):
    """Raised when declaration data cannot be turned into a TenancyDeclaration."""

    def __init__(self, message: str, resource_type: str | None = None):
        super().__init__(message)
        self.resource_type = resource_type
