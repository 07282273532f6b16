"""SQLAlchemy adapter applying tenancy predicates to SELECT statements.

The adapter is the query-engine side of the compiler: it checks the global
multi-tenancy switch, asks the compiler for the predicate of a resource
type under a table alias, and ANDs it into the statement's WHERE clause.
"""

from __future__ import annotations

from sqlalchemy import Select, text
from sqlalchemy.sql.expression import Alias, TableClause

from filtering.application.scope import TenancyScope
from filtering.application.services import PredicateCompiler
from infrastructure.settings import TenancySettings


class TenancyQueryFilter:
    """Adds tenant-isolation predicates to SQLAlchemy Select statements."""

    def __init__(self, compiler: PredicateCompiler, settings: TenancySettings):
        self._compiler = compiler
        self._settings = settings

    @property
    def name(self) -> str:
        """Name the filter is registered under in the query pipeline."""
        return self._settings.filter_name

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def predicate_for(
        self,
        resource_type: str,
        table_alias: str,
        scope: TenancyScope | None = None,
    ) -> str:
        """Return the predicate text, or an empty string when filtering is off."""
        if not self._settings.enabled:
            return ""
        return self._compiler.compile(resource_type, table_alias, scope=scope)

    def apply(
        self,
        statement: Select,
        resource_type: str,
        table_alias: str,
        scope: TenancyScope | None = None,
    ) -> Select:
        """AND the predicate of ``resource_type`` into ``statement``.

        The statement is returned unchanged when filtering is switched off or
        the predicate is empty. Compiler errors propagate so the query is
        never executed unfiltered.
        """
        predicate = self.predicate_for(resource_type, table_alias, scope=scope)
        if not predicate:
            return statement
        # Grouped so an OR inside a template cannot bind to sibling criteria.
        # Colons are escaped so text() never reads ":name" as a bind parameter.
        escaped = predicate.replace(":", r"\:")
        return statement.where(text(f"({escaped})"))

    def apply_to(
        self,
        statement: Select,
        selectable: TableClause | Alias,
        scope: TenancyScope | None = None,
    ) -> Select:
        """Apply the predicate for a table or aliased table in ``statement``.

        The resource type is the underlying table name; the alias is the
        alias name, or the table name itself when not aliased.
        """
        if isinstance(selectable, Alias):
            resource_type = selectable.element.name
        else:
            resource_type = selectable.name
        return self.apply(statement, resource_type, selectable.name, scope=scope)
