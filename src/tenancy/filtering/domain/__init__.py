"""Domain layer for the Filtering bounded context.

Pure value objects and template handling with no framework or
infrastructure dependencies.
"""

from filtering.domain.value_objects import (
    FilterRule,
    FilterStrategy,
    TenancyDeclaration,
)

__all__ = [
    "FilterRule",
    "FilterStrategy",
    "TenancyDeclaration",
]
