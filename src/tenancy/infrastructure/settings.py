"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from ulid import ULID


class TenancySettings(BaseSettings):
    """Multi-tenancy filter settings.

    Environment variables:
        TENANCY_ENABLED: Global multi-tenancy switch. When false the
            predicate compiler is never invoked (default: true)
        TENANCY_FILTER_NAME: Name the query engine registers the filter
            under (default: multi-tenancy)
        TENANCY_DECLARATIONS_PATH: YAML file of tenancy declarations keyed
            by resource type (default: unset)
        TENANCY_TENANT_VALUE_IDENTIFIER: Value holder identifier the
            resolved tenant ID is registered under (default: tenant_id)
        TENANCY_DEFAULT_TENANT_ID: Tenant used when a request carries no
            X-Tenant-ID header. Unset means the header is required.
        TENANCY_LOG_LEVEL: Minimum structlog level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Global multi-tenancy switch")
    filter_name: str = Field(
        default="multi-tenancy",
        description="Name of the tenancy filter in the query pipeline",
    )
    declarations_path: Path | None = Field(
        default=None,
        description="YAML file of tenancy declarations",
    )
    tenant_value_identifier: str = Field(
        default="tenant_id",
        description="Value holder identifier for the resolved tenant ID",
    )
    default_tenant_id: str | None = Field(
        default=None,
        description="Tenant used when no X-Tenant-ID header is sent",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")

    @field_validator("filter_name", "tenant_value_identifier")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        """Reject blank identifiers."""
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("default_tenant_id")
    @classmethod
    def validate_default_tenant_id(cls, value: str | None) -> str | None:
        """Require the default tenant to be a ULID, stored in canonical form."""
        if value is None or not value.strip():
            return None
        return str(ULID.from_str(value.strip().upper()))


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return TenancySettings()
