"""Infrastructure for the Filtering bounded context.

The declaration catalog resolves tenancy declarations; the SQLAlchemy
adapter applies compiled predicates to SELECT statements.
"""

from filtering.infrastructure.declaration_catalog import (
    DeclarationCatalog,
    DeclarationCatalogBuilder,
    declaration_from_mapping,
    load_catalog,
)
from filtering.infrastructure.sqlalchemy_filter import TenancyQueryFilter

__all__ = [
    "DeclarationCatalog",
    "DeclarationCatalogBuilder",
    "TenancyQueryFilter",
    "declaration_from_mapping",
    "load_catalog",
]
