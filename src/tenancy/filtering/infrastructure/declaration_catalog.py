"""In-memory catalog of tenancy declarations.

Declarations are collected once at load time, either programmatically,
with the ``declare`` class decorator, or from a YAML document, and frozen
into a read-only DeclarationCatalog that every request shares.

YAML format (legacy keys ``enable``, ``filters``, ``context``, ``where``
and ``requireAllContexts`` are accepted too):

    Invoice:
      strategy: first_match
      rules:
        - context_tags: [admin]
          template: "1 = 1"
        - template: "$this.tenant_id = '{tenant_id}'"
    AuditLog:
      enabled: false
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from filtering.domain.value_objects import FilterRule, FilterStrategy, TenancyDeclaration
from filtering.ports.exceptions import InvalidDeclarationError

T = TypeVar("T", bound=type)


def resource_type_key(resource_type: str | type) -> str:
    """Identifier under which a resource type is catalogued.

    Classes are keyed by their ``__tenancy_resource__`` attribute when set,
    then by ``__tablename__`` (declarative models), then by class name.
    """
    if isinstance(resource_type, str):
        return resource_type
    for attribute in ("__tenancy_resource__", "__tablename__"):
        key = getattr(resource_type, attribute, None)
        if isinstance(key, str):
            return key
    return resource_type.__name__


def declaration_from_mapping(
    data: Mapping[str, Any],
    resource_type: str | None = None,
) -> TenancyDeclaration:
    """Build a declaration from plain data, accepting legacy key sets.

    Raises:
        InvalidDeclarationError: If the data does not describe a valid declaration.
    """
    if not isinstance(data, Mapping):
        raise InvalidDeclarationError(
            f"Tenancy declaration for {resource_type or 'resource'} must be a mapping, "
            f"got {type(data).__name__}",
            resource_type=resource_type,
        )
    try:
        return TenancyDeclaration.model_validate(dict(data))
    except ValidationError as e:
        raise InvalidDeclarationError(
            f"Invalid tenancy declaration for {resource_type or 'resource'}: {e}",
            resource_type=resource_type,
        ) from e


class DeclarationCatalog:
    """Immutable mapping of resource type identifier to TenancyDeclaration."""

    def __init__(self, declarations: Mapping[str, TenancyDeclaration] | None = None):
        self._declarations: Mapping[str, TenancyDeclaration] = MappingProxyType(
            dict(declarations or {})
        )

    def resolve(self, resource_type: str | type) -> TenancyDeclaration | None:
        """Return the declaration of a resource type, or None if it has none."""
        return self._declarations.get(resource_type_key(resource_type))

    @property
    def declarations(self) -> Mapping[str, TenancyDeclaration]:
        """Read-only view of every catalogued declaration."""
        return self._declarations

    def __contains__(self, resource_type: object) -> bool:
        if not isinstance(resource_type, (str, type)):
            return False
        return resource_type_key(resource_type) in self._declarations

    def __iter__(self) -> Iterator[str]:
        return iter(self._declarations)

    def __len__(self) -> int:
        return len(self._declarations)


class DeclarationCatalogBuilder:
    """Collects declarations at load time and builds a DeclarationCatalog.

    Usage:
        builder = DeclarationCatalogBuilder()

        @builder.declare(rules=[FilterRule(template="$this.tenant_id = {tenant_id}")])
        class Invoice(Base):
            ...

        catalog = builder.build()
    """

    def __init__(self) -> None:
        self._declarations: dict[str, TenancyDeclaration] = {}

    def add(self, resource_type: str | type, declaration: TenancyDeclaration) -> None:
        """Add a declaration.

        Raises:
            InvalidDeclarationError: If the resource type was already declared.
        """
        key = resource_type_key(resource_type)
        if key in self._declarations:
            raise InvalidDeclarationError(
                f"{key} already has a tenancy declaration",
                resource_type=key,
            )
        self._declarations[key] = declaration

    def add_mapping(self, resource_type: str, data: Mapping[str, Any]) -> None:
        """Add a declaration given as plain data."""
        self.add(resource_type, declaration_from_mapping(data, resource_type))

    def declare(
        self,
        rules: Iterable[FilterRule] = (),
        enabled: bool = True,
        strategy: FilterStrategy = FilterStrategy.ANY_MATCH,
    ) -> Callable[[T], T]:
        """Class decorator declaring the tenancy rules of the decorated class."""
        declaration = TenancyDeclaration(
            enabled=enabled,
            rules=tuple(rules),
            strategy=strategy,
        )

        def _decorator(cls: T) -> T:
            self.add(cls, declaration)
            return cls

        return _decorator

    def build(self) -> DeclarationCatalog:
        """Freeze the collected declarations into a catalog."""
        return DeclarationCatalog(self._declarations)


def load_catalog(path: Path | str) -> DeclarationCatalog:
    """Load a catalog from a YAML document keyed by resource type.

    Raises:
        InvalidDeclarationError: If the document or any declaration is invalid.
    """
    with open(path, encoding="utf-8") as f:
        try:
            document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidDeclarationError(
                f"Unable to parse tenancy declarations from {path}: {e}"
            ) from e

    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise InvalidDeclarationError(
            f"Tenancy declarations in {path} must be a mapping of resource type to declaration"
        )

    builder = DeclarationCatalogBuilder()
    for resource_type, data in document.items():
        builder.add_mapping(str(resource_type), data)
    return builder.build()
