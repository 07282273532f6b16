"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to tenant context resolution from
the X-Tenant-ID request header.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved_from_header(self, tenant_id: str) -> None:
        """Record that tenant context was resolved from X-Tenant-ID header."""
        ...

    def tenant_resolved_from_default(self, tenant_id: str) -> None:
        """Record that tenant context fell back to the configured default tenant."""
        ...

    def tenant_header_missing(self) -> None:
        """Record that the X-Tenant-ID header was missing with no default tenant."""
        ...

    def invalid_tenant_id_format(self, raw_value: str) -> None:
        """Record that the X-Tenant-ID header contained an invalid ULID."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved_from_header(self, tenant_id: str) -> None:
        """Record that tenant context was resolved from X-Tenant-ID header."""
        self._logger.debug(
            "tenant_context_resolved_from_header",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_resolved_from_default(self, tenant_id: str) -> None:
        """Record that tenant context fell back to the configured default tenant."""
        self._logger.debug(
            "tenant_context_resolved_from_default",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_header_missing(self) -> None:
        """Record that the X-Tenant-ID header was missing with no default tenant."""
        self._logger.warning(
            "tenant_context_header_missing",
            message="X-Tenant-ID header is required when no default tenant is configured",
            **self._get_context_kwargs(),
        )

    def invalid_tenant_id_format(self, raw_value: str) -> None:
        """Record that the X-Tenant-ID header contained an invalid ULID."""
        self._logger.warning(
            "tenant_context_invalid_format",
            raw_value=raw_value,
            **self._get_context_kwargs(),
        )
