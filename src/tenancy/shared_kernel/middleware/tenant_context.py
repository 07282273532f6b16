"""Tenant context value object for resolved tenant identification.

This module contains the pure value object that represents a resolved
tenant context. It is framework-agnostic and contains no business logic,
making it safe for the shared kernel.

The resolution logic (header extraction, ULID validation) lives in the
filtering bounded context's dependency layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for the current request.

    Attributes:
        tenant_id: The validated tenant identifier as a string.
        source: How the tenant was resolved: 'header' when taken from
            X-Tenant-ID, 'default' when the header was absent and the
            configured default tenant was used.
    """

    tenant_id: str
    source: Literal["header", "default"]
