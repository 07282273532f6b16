"""Unit test fixtures with in-memory collaborators."""

from unittest.mock import MagicMock

import pytest

from filtering.application.observability import PredicateCompilerProbe
from filtering.application.scope import TenancyScope
from filtering.application.services import PredicateCompiler
from filtering.domain.value_objects import FilterRule, FilterStrategy, TenancyDeclaration
from filtering.infrastructure.declaration_catalog import DeclarationCatalog


@pytest.fixture
def mock_probe() -> MagicMock:
    """Provide a mocked compiler probe that returns itself from with_context."""
    probe = MagicMock(spec=PredicateCompilerProbe)
    probe.with_context.return_value = probe
    return probe


@pytest.fixture
def scope() -> TenancyScope:
    """Provide a scope with a tenant ID and an inactive admin context."""
    scope = TenancyScope()
    scope.values.set_value("tid", "42")
    scope.contexts.set_context("admin", False)
    return scope


@pytest.fixture
def declarations() -> dict[str, TenancyDeclaration]:
    """Provide a small set of declarations keyed by resource type."""
    return {
        "Invoice": TenancyDeclaration(
            rules=(FilterRule(template="$this.tenant_id = {tid}"),),
        ),
        "AuditLog": TenancyDeclaration.disabled(),
        "Report": TenancyDeclaration(
            strategy=FilterStrategy.FIRST_MATCH,
            rules=(
                FilterRule(context_tags=("admin",), template="1 = 1"),
                FilterRule(template="$this.tenant_id = {tid}"),
            ),
        ),
    }


@pytest.fixture
def compiler(declarations, mock_probe) -> PredicateCompiler:
    """Provide a compiler over the fixture declarations."""
    return PredicateCompiler(
        resolver=DeclarationCatalog(declarations),
        probe=mock_probe,
    )
