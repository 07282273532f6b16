"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events emitted while resolving tenants and compiling
    tenancy predicates.

    Attributes:
        request_id: X-Request-ID of the current request, or a generated ULID.
        tenant_id: Tenant the request was resolved to.
        resource_type: Resource type whose predicate is being compiled.

    Example:
        context = ObservationContext(request_id="req-123", tenant_id="acme")
        probe = DefaultPredicateCompilerProbe().with_context(context)
    """

    request_id: str | None = None
    tenant_id: str | None = None
    resource_type: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.resource_type is not None:
            result["resource_type"] = self.resource_type
        return result

    def with_resource_type(self, resource_type: str) -> ObservationContext:
        """Create a new context with the resource type set."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_id=self.tenant_id,
            resource_type=resource_type,
        )
