"""Domain probe for tenancy predicate compilation.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events of predicate compilation: which rules applied,
which were skipped, and every fail-closed error raised to the query engine.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PredicateCompilerProbe(Protocol):
    """Domain probe for predicate compilation operations."""

    def predicate_compiled(
        self,
        resource_type: str,
        table_alias: str,
        strategy: str,
        clause_count: int,
    ) -> None:
        """Record that a predicate was compiled for a resource type."""
        ...

    def tenancy_disabled(self, resource_type: str) -> None:
        """Record that a resource type opted out of tenancy filtering."""
        ...

    def rule_skipped(
        self,
        resource_type: str,
        rule_index: int,
        reason: str,
    ) -> None:
        """Record that a rule contributed no clause."""
        ...

    def declaration_missing(self, resource_type: str) -> None:
        """Record that a resource type has no tenancy declaration."""
        ...

    def no_rules_configured(self, resource_type: str) -> None:
        """Record that an enabled declaration has no rules."""
        ...

    def unknown_context_provider(self, resource_type: str, identifier: str) -> None:
        """Record that a rule referenced an unregistered context tag."""
        ...

    def unknown_value_holder(self, resource_type: str, identifier: str) -> None:
        """Record that a template referenced an unregistered value."""
        ...

    def scope_unbound(self, resource_type: str) -> None:
        """Record that compilation was attempted without a bound scope."""
        ...

    def with_context(self, context: ObservationContext) -> PredicateCompilerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPredicateCompilerProbe:
    """Default implementation of PredicateCompilerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self, **fields: Any) -> dict[str, Any]:
        """Get context metadata merged with event fields as kwargs for logging.

        Event fields take precedence, so a resource type bound into the
        context never collides with the one passed to the event.
        """
        context = {} if self._context is None else self._context.as_dict()
        return {**context, **fields}

    def with_context(self, context: ObservationContext) -> DefaultPredicateCompilerProbe:
        """Create a new probe with observation context bound."""
        return DefaultPredicateCompilerProbe(logger=self._logger, context=context)

    def predicate_compiled(
        self,
        resource_type: str,
        table_alias: str,
        strategy: str,
        clause_count: int,
    ) -> None:
        """Record that a predicate was compiled for a resource type."""
        self._logger.debug(
            "tenancy_predicate_compiled",
            **self._get_context_kwargs(
                resource_type=resource_type,
                table_alias=table_alias,
                strategy=strategy,
                clause_count=clause_count,
            ),
        )

    def tenancy_disabled(self, resource_type: str) -> None:
        """Record that a resource type opted out of tenancy filtering."""
        self._logger.debug(
            "tenancy_filter_disabled",
            **self._get_context_kwargs(resource_type=resource_type),
        )

    def rule_skipped(
        self,
        resource_type: str,
        rule_index: int,
        reason: str,
    ) -> None:
        """Record that a rule contributed no clause."""
        self._logger.debug(
            "tenancy_rule_skipped",
            **self._get_context_kwargs(
                resource_type=resource_type,
                rule_index=rule_index,
                reason=reason,
            ),
        )

    def declaration_missing(self, resource_type: str) -> None:
        """Record that a resource type has no tenancy declaration."""
        self._logger.error(
            "tenancy_declaration_missing",
            **self._get_context_kwargs(
                resource_type=resource_type,
                message="Resource types must explicitly enable or disable multi-tenancy",
            ),
        )

    def no_rules_configured(self, resource_type: str) -> None:
        """Record that an enabled declaration has no rules."""
        self._logger.error(
            "tenancy_no_rules_configured",
            **self._get_context_kwargs(resource_type=resource_type),
        )

    def unknown_context_provider(self, resource_type: str, identifier: str) -> None:
        """Record that a rule referenced an unregistered context tag."""
        self._logger.error(
            "tenancy_unknown_context_provider",
            **self._get_context_kwargs(
                resource_type=resource_type,
                identifier=identifier,
            ),
        )

    def unknown_value_holder(self, resource_type: str, identifier: str) -> None:
        """Record that a template referenced an unregistered value."""
        self._logger.error(
            "tenancy_unknown_value_holder",
            **self._get_context_kwargs(
                resource_type=resource_type,
                identifier=identifier,
            ),
        )

    def scope_unbound(self, resource_type: str) -> None:
        """Record that compilation was attempted without a bound scope."""
        self._logger.error(
            "tenancy_scope_unbound",
            **self._get_context_kwargs(resource_type=resource_type),
        )
