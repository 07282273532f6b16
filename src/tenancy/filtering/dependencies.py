"""Dependency injection for Filtering bounded context.

Composes the declaration catalog, compiler and query filter as
application-scoped singletons, and builds a request-scoped TenancyScope
from the X-Tenant-ID header.

Usage in FastAPI routes:
    @router.get("/invoices")
    async def list_invoices(
        scope: Annotated[TenancyScope, Depends(get_tenancy_scope)],
        query_filter: Annotated[TenancyQueryFilter, Depends(get_tenancy_query_filter)],
    ):
        statement = query_filter.apply(select(invoices), "invoices", "invoices")
        ...
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, status
from ulid import ULID

from filtering.application.scope import TenancyScope, bind_scope
from filtering.application.services import PredicateCompiler
from filtering.infrastructure.declaration_catalog import DeclarationCatalog, load_catalog
from filtering.infrastructure.sqlalchemy_filter import TenancyQueryFilter
from infrastructure.logging import configure_logging
from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.middleware.observability.tenant_context_probe import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.observability_context import ObservationContext


def canonical_tenant_id(raw_value: str) -> str:
    """Validate a raw tenant ID as a ULID and return its canonical form.

    Accepts case-insensitive input (per Crockford's Base32 spec) and
    returns the canonical uppercase form. The result only contains
    Base32 characters, which makes it safe to place inside a quoted SQL
    literal in a filter template.

    Raises:
        ValueError: If the value is not a valid ULID.
    """
    return str(ULID.from_str(raw_value.strip().upper()))


def resolve_tenant_context(
    x_tenant_id: str | None,
    default_tenant_id: str | None,
    probe: TenantContextProbe,
) -> TenantContext:
    """Resolve the tenant for a request.

    Args:
        x_tenant_id: The X-Tenant-ID header value, or None if missing.
        default_tenant_id: Configured fallback tenant, or None.
        probe: Domain probe for observability.

    Returns:
        TenantContext with the resolved tenant ID and source.

    Raises:
        HTTPException 400: If the header is missing with no default tenant,
            or contains an invalid ULID.
    """
    if x_tenant_id is None:
        if default_tenant_id is None:
            probe.tenant_header_missing()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-Tenant-ID header is required",
            )
        probe.tenant_resolved_from_default(tenant_id=default_tenant_id)
        return TenantContext(tenant_id=default_tenant_id, source="default")

    try:
        tenant_id = canonical_tenant_id(x_tenant_id)
    except (ValueError, TypeError):
        probe.invalid_tenant_id_format(raw_value=x_tenant_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"X-Tenant-ID must be a valid ULID format, got: '{x_tenant_id}'",
        )

    probe.tenant_resolved_from_header(tenant_id=tenant_id)
    return TenantContext(tenant_id=tenant_id, source="header")


@lru_cache
def get_declaration_catalog() -> DeclarationCatalog:
    """Get the application-wide declaration catalog.

    Loaded once from TENANCY_DECLARATIONS_PATH. Without a path the catalog
    is empty, so every compile fails with DeclarationMissingError until
    declarations are provided.
    """
    settings = get_tenancy_settings()
    if settings.declarations_path is None:
        return DeclarationCatalog()
    return load_catalog(settings.declarations_path)


@lru_cache
def get_predicate_compiler() -> PredicateCompiler:
    """Get the application-wide predicate compiler."""
    return PredicateCompiler(resolver=get_declaration_catalog())


def get_tenancy_query_filter(
    compiler: Annotated[PredicateCompiler, Depends(get_predicate_compiler)],
    settings: Annotated[TenancySettings, Depends(get_tenancy_settings)],
) -> TenancyQueryFilter:
    """Get the SQLAlchemy query filter."""
    return TenancyQueryFilter(compiler=compiler, settings=settings)


def get_tenant_context_probe() -> TenantContextProbe:
    """Get the tenant context probe."""
    return DefaultTenantContextProbe()


async def get_tenancy_scope(
    settings: Annotated[TenancySettings, Depends(get_tenancy_settings)],
    probe: Annotated[TenantContextProbe, Depends(get_tenant_context_probe)],
    x_tenant_id: Annotated[str | None, Header()] = None,
    x_request_id: Annotated[str | None, Header()] = None,
) -> AsyncGenerator[TenancyScope, None]:
    """Build the request's TenancyScope and bind it for the request.

    The resolved tenant ID is registered as a value holder under
    ``settings.tenant_value_identifier``. Routes can add further values and
    context providers to the yielded scope before compiling. Tenant resolution
    and compilation events carry the X-Request-ID header value, or a fresh
    ULID when the client sent none.

    Yields:
        The TenancyScope bound to the current request.
    """
    request_id = x_request_id or str(ULID())
    tenant = resolve_tenant_context(
        x_tenant_id=x_tenant_id,
        default_tenant_id=settings.default_tenant_id,
        probe=probe.with_context(ObservationContext(request_id=request_id)),
    )

    scope = TenancyScope(
        observation=ObservationContext(request_id=request_id, tenant_id=tenant.tenant_id)
    )
    scope.values.set_value(settings.tenant_value_identifier, tenant.tenant_id)

    with bind_scope(scope):
        yield scope


@asynccontextmanager
async def tenancy_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan hook for hosts embedding the tenancy filter.

    Configures logging and loads the declaration catalog at startup, so an
    invalid declarations file stops the application from starting instead
    of failing the first query that needs it.
    """
    settings = get_tenancy_settings()
    configure_logging(settings.log_level)
    get_predicate_compiler()
    yield
