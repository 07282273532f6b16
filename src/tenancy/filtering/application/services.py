"""Application services for the Filtering bounded context."""

from __future__ import annotations

from filtering.application.observability import (
    DefaultPredicateCompilerProbe,
    PredicateCompilerProbe,
)
from filtering.application.registries import ContextRegistry, ValueRegistry
from filtering.application.scope import TenancyScope, current_scope
from filtering.domain import template
from filtering.domain.value_objects import FilterRule, FilterStrategy
from filtering.ports.exceptions import (
    DeclarationMissingError,
    NoRulesConfiguredError,
    UnknownContextProviderError,
    UnknownValueHolderError,
    UnregisteredRegistryError,
)
from filtering.ports.protocols import ContextProvider, DeclarationResolver

CLAUSE_SEPARATOR = " AND "


class PredicateCompiler:
    """Compiles tenant-isolation predicates for resource types.

    For each compile call the compiler resolves the resource type's
    declaration, selects the rules whose contexts apply to the current
    scope, substitutes their placeholders and joins the resulting clauses
    with AND. It holds no per-request state, so one instance can serve
    every request as long as each request brings its own scope.
    """

    def __init__(
        self,
        resolver: DeclarationResolver,
        probe: PredicateCompilerProbe | None = None,
    ):
        """Initialize the compiler.

        Args:
            resolver: Lookup of tenancy declarations by resource type.
            probe: Optional domain probe for observability.
        """
        self._resolver = resolver
        self._probe = probe or DefaultPredicateCompilerProbe()

    def compile(
        self,
        resource_type: str,
        table_alias: str,
        scope: TenancyScope | None = None,
    ) -> str:
        """Compile the predicate for one resource type.

        Args:
            resource_type: Identifier of the resource type being queried.
            table_alias: Alias the query engine assigned to its table;
                replaces ``$this`` in templates.
            scope: Registries to evaluate against. Defaults to the scope
                bound to the current unit of work.

        Returns:
            A SQL boolean expression to AND into the query's WHERE clause,
            or an empty string when no constraint applies.

        Raises:
            DeclarationMissingError: If the resource type never declared tenancy.
            NoRulesConfiguredError: If the declaration is enabled without rules.
            UnregisteredRegistryError: If no scope was given or bound.
            UnknownContextProviderError: If a rule's context tag is unregistered.
            UnknownValueHolderError: If a placeholder has no registered value.
        """
        declaration = self._resolver.resolve(resource_type)
        if declaration is None:
            self._probe.declaration_missing(resource_type)
            raise DeclarationMissingError(resource_type)

        if not declaration.enabled:
            self._probe.tenancy_disabled(resource_type)
            return ""

        if not declaration.rules:
            self._probe.no_rules_configured(resource_type)
            raise NoRulesConfiguredError(resource_type)

        if scope is None:
            try:
                scope = current_scope()
            except UnregisteredRegistryError:
                self._probe.scope_unbound(resource_type)
                raise

        probe = self._probe.with_context(
            scope.observation.with_resource_type(resource_type)
        )

        clauses: list[str] = []
        for index, rule in enumerate(declaration.rules):
            if rule.ignored:
                probe.rule_skipped(resource_type, index, reason="ignored")
                continue

            if not self._is_contextual(rule, scope.contexts, resource_type, probe):
                probe.rule_skipped(resource_type, index, reason="not_contextual")
                continue

            clauses.append(
                self._render(rule, table_alias, scope.values, resource_type, probe)
            )

            # First match wins: later rules are never evaluated
            if declaration.strategy is FilterStrategy.FIRST_MATCH:
                break

        probe.predicate_compiled(
            resource_type=resource_type,
            table_alias=table_alias,
            strategy=declaration.strategy.value,
            clause_count=len(clauses),
        )
        return CLAUSE_SEPARATOR.join(clauses)

    def _is_contextual(
        self,
        rule: FilterRule,
        contexts: ContextRegistry,
        resource_type: str,
        probe: PredicateCompilerProbe,
    ) -> bool:
        """Check whether a rule applies in the current scope.

        Every tag is looked up before any provider is evaluated, so an
        unregistered tag raises even when another tag already decides the
        outcome.
        """
        if rule.is_unconditional:
            return True

        providers: list[ContextProvider] = []
        for tag in rule.context_tags:
            try:
                providers.append(contexts.lookup(tag))
            except UnknownContextProviderError:
                probe.unknown_context_provider(resource_type, tag)
                raise

        results = (provider.is_contextual() for provider in providers)
        if rule.require_all_contexts:
            return all(results)
        return any(results)

    def _render(
        self,
        rule: FilterRule,
        table_alias: str,
        values: ValueRegistry,
        resource_type: str,
        probe: PredicateCompilerProbe,
    ) -> str:
        """Substitute the alias marker and placeholders of one rule."""
        text = template.normalize(rule.template)

        # Only placeholders present in this template are resolved
        resolved: dict[str, str | None] = {}
        for identifier in template.placeholders(text):
            try:
                resolved[identifier] = values.lookup(identifier).value
            except UnknownValueHolderError:
                probe.unknown_value_holder(resource_type, identifier)
                raise

        return template.substitute(text, table_alias, resolved)
