"""Unit tests for the declaration catalog and its loaders."""

from __future__ import annotations

from pathlib import Path

import pytest

from filtering.domain.value_objects import FilterRule, FilterStrategy, TenancyDeclaration
from filtering.infrastructure.declaration_catalog import (
    DeclarationCatalog,
    DeclarationCatalogBuilder,
    declaration_from_mapping,
    load_catalog,
    resource_type_key,
)
from filtering.ports.exceptions import InvalidDeclarationError


class TestResourceTypeKey:
    """Tests for deriving catalog keys from resource types."""

    def test_string_is_used_as_is(self) -> None:
        assert resource_type_key("invoices") == "invoices"

    def test_class_name_is_the_fallback(self) -> None:
        class Invoice:
            pass

        assert resource_type_key(Invoice) == "Invoice"

    def test_tablename_is_preferred_over_class_name(self) -> None:
        """Declarative models are keyed by table, matching the query adapter."""

        class Invoice:
            __tablename__ = "invoices"

        assert resource_type_key(Invoice) == "invoices"

    def test_explicit_resource_attribute_wins(self) -> None:
        class Invoice:
            __tablename__ = "invoices"
            __tenancy_resource__ = "billing.invoice"

        assert resource_type_key(Invoice) == "billing.invoice"


class TestDeclarationCatalog:
    """Tests for the immutable catalog."""

    def test_resolve_known_and_unknown(self) -> None:
        """Unknown types resolve to None, never to a default declaration."""
        declaration = TenancyDeclaration.disabled()
        catalog = DeclarationCatalog({"AuditLog": declaration})
        assert catalog.resolve("AuditLog") is declaration
        assert catalog.resolve("Invoice") is None

    def test_is_read_only(self) -> None:
        """The exposed mapping cannot be mutated."""
        catalog = DeclarationCatalog({"AuditLog": TenancyDeclaration.disabled()})
        with pytest.raises(TypeError):
            catalog.declarations["Invoice"] = TenancyDeclaration.disabled()  # type: ignore[index]

    def test_is_isolated_from_source_mapping(self) -> None:
        """Mutating the source dict after construction changes nothing."""
        source = {"AuditLog": TenancyDeclaration.disabled()}
        catalog = DeclarationCatalog(source)
        source["Invoice"] = TenancyDeclaration.disabled()
        assert "Invoice" not in catalog
        assert len(catalog) == 1

    def test_iterates_resource_types(self) -> None:
        catalog = DeclarationCatalog(
            {"A": TenancyDeclaration.disabled(), "B": TenancyDeclaration.disabled()}
        )
        assert list(catalog) == ["A", "B"]


class TestDeclarationCatalogBuilder:
    """Tests for load-time catalog construction."""

    def test_declare_decorator_registers_class(self) -> None:
        """The decorator records the declaration and returns the class unchanged."""
        builder = DeclarationCatalogBuilder()

        @builder.declare(
            rules=[FilterRule(template="$this.tenant_id = {tid}")],
            strategy=FilterStrategy.FIRST_MATCH,
        )
        class Invoice:
            __tablename__ = "invoices"

        catalog = builder.build()
        declaration = catalog.resolve(Invoice)

        assert Invoice.__tablename__ == "invoices"
        assert declaration is not None
        assert declaration.strategy is FilterStrategy.FIRST_MATCH
        assert catalog.resolve("invoices") is declaration

    def test_declare_disabled(self) -> None:
        """Classes can opt out explicitly."""
        builder = DeclarationCatalogBuilder()

        @builder.declare(enabled=False)
        class AuditLog:
            pass

        declaration = builder.build().resolve(AuditLog)
        assert declaration is not None
        assert declaration.enabled is False

    def test_duplicate_declaration_raises(self) -> None:
        """A resource type is declared exactly once."""
        builder = DeclarationCatalogBuilder()
        builder.add("Invoice", TenancyDeclaration.disabled())
        with pytest.raises(InvalidDeclarationError, match="already has a tenancy declaration"):
            builder.add("Invoice", TenancyDeclaration.disabled())

    def test_build_snapshots_declarations(self) -> None:
        """Catalogs built earlier are not affected by later additions."""
        builder = DeclarationCatalogBuilder()
        builder.add("A", TenancyDeclaration.disabled())
        catalog = builder.build()
        builder.add("B", TenancyDeclaration.disabled())
        assert "B" not in catalog


class TestDeclarationFromMapping:
    """Tests for building declarations from plain data."""

    def test_unified_keys(self) -> None:
        declaration = declaration_from_mapping(
            {
                "enabled": True,
                "strategy": "first_match",
                "rules": [
                    {"context_tags": ["admin"], "template": "1 = 1"},
                    {"template": "$this.tenant_id = {tid}", "ignored": True},
                ],
            }
        )
        assert declaration.strategy is FilterStrategy.FIRST_MATCH
        assert declaration.rules[0].context_tags == ("admin",)
        assert declaration.rules[1].ignored is True

    def test_legacy_keys_map_with_defaults(self) -> None:
        """Older formats get ignored=False, require_all=False and ANY_MATCH."""
        declaration = declaration_from_mapping(
            {
                "enable": True,
                "filters": [{"context": ["admin"], "where": "$this.id > 0"}],
            }
        )
        rule = declaration.rules[0]
        assert declaration.strategy is FilterStrategy.ANY_MATCH
        assert rule.ignored is False
        assert rule.require_all_contexts is False
        assert rule.template == "$this.id > 0"

    def test_invalid_data_raises_invalid_declaration(self) -> None:
        with pytest.raises(InvalidDeclarationError) as exc_info:
            declaration_from_mapping({"strategy": "best_match"}, resource_type="Invoice")

        assert exc_info.value.resource_type == "Invoice"
        assert "Invoice" in str(exc_info.value)

    def test_non_mapping_raises_invalid_declaration(self) -> None:
        with pytest.raises(InvalidDeclarationError, match="must be a mapping"):
            declaration_from_mapping(None, resource_type="Invoice")  # type: ignore[arg-type]


class TestLoadCatalog:
    """Tests for loading catalogs from YAML."""

    def test_loads_declarations(self, tmp_path: Path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text(
            """
invoices:
  strategy: FirstMatch
  rules:
    - context_tags: [admin]
      template: "1 = 1"
    - template: "$this.tenant_id = '{tenant_id}'"
audit_log:
  enabled: false
legacy:
  enable: true
  filters:
    - context: [support]
      requireAllContexts: true
      where: "$this.visible"
""",
            encoding="utf-8",
        )

        catalog = load_catalog(path)

        invoices = catalog.resolve("invoices")
        assert invoices is not None
        assert invoices.strategy is FilterStrategy.FIRST_MATCH
        assert invoices.rules[1].template == "$this.tenant_id = '{tenant_id}'"
        assert catalog.resolve("audit_log") == TenancyDeclaration.disabled()
        legacy = catalog.resolve("legacy")
        assert legacy is not None
        assert legacy.rules[0].require_all_contexts is True

    def test_empty_file_gives_empty_catalog(self, tmp_path: Path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text("", encoding="utf-8")
        assert len(load_catalog(path)) == 0

    def test_non_mapping_document_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text("- invoices\n", encoding="utf-8")
        with pytest.raises(InvalidDeclarationError):
            load_catalog(path)

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text("invoices: [unclosed\n", encoding="utf-8")
        with pytest.raises(InvalidDeclarationError, match="Unable to parse"):
            load_catalog(path)

    def test_invalid_declaration_names_resource_type(self, tmp_path: Path) -> None:
        path = tmp_path / "tenancy.yaml"
        path.write_text("invoices:\n  rules:\n    - template: ''\n", encoding="utf-8")
        with pytest.raises(InvalidDeclarationError) as exc_info:
            load_catalog(path)
        assert exc_info.value.resource_type == "invoices"
