"""Unit tests for value and context registries."""

from __future__ import annotations

import pytest

from filtering.application.registries import (
    CallableContextProvider,
    ContextRegistry,
    StaticContextProvider,
    StaticValueHolder,
    ValueRegistry,
)
from filtering.ports.exceptions import (
    TenancyFilterError,
    UnknownContextProviderError,
    UnknownIdentifierError,
    UnknownValueHolderError,
)
from filtering.ports.protocols import ContextProvider, ValueHolder


class TestValueRegistry:
    """Tests for ValueRegistry."""

    def test_register_and_lookup(self) -> None:
        """A registered holder is returned by identifier."""
        registry = ValueRegistry()
        holder = StaticValueHolder("tid", "42")
        registry.register("tid", holder)
        assert registry.lookup("tid") is holder

    def test_add_uses_holder_identifier(self) -> None:
        """add() registers under the holder's own identifier."""
        registry = ValueRegistry()
        registry.add(StaticValueHolder("tid", "42"))
        assert registry.lookup("tid").value == "42"

    def test_last_write_wins(self) -> None:
        """Re-registering an identifier overrides the earlier holder."""
        registry = ValueRegistry()
        registry.set_value("tid", "1")
        registry.set_value("tid", "2")
        assert registry.lookup("tid").value == "2"
        assert len(registry) == 1

    def test_lookup_unknown_raises(self) -> None:
        """Unknown identifiers raise a value-holder specific error."""
        registry = ValueRegistry()
        with pytest.raises(UnknownValueHolderError) as exc_info:
            registry.lookup("tid")

        assert exc_info.value.identifier == "tid"
        assert str(exc_info.value) == 'Unable to find a ValueHolder for "tid"'

    def test_unknown_error_is_catchable_as_key_error(self) -> None:
        """Lookup errors belong to both the tenancy and KeyError hierarchies."""
        registry = ValueRegistry()
        with pytest.raises(KeyError):
            registry.lookup("tid")
        with pytest.raises(UnknownIdentifierError):
            registry.lookup("tid")
        with pytest.raises(TenancyFilterError):
            registry.lookup("tid")

    def test_list_all_is_insertion_ordered_and_restartable(self) -> None:
        """list_all() can be iterated repeatedly in registration order."""
        registry = ValueRegistry()
        registry.set_value("b", "2")
        registry.set_value("a", "1")
        registry.set_value("b", "3")

        listing = registry.list_all()
        first = [(identifier, holder.value) for identifier, holder in listing]
        second = [(identifier, holder.value) for identifier, holder in listing]

        assert first == [("b", "3"), ("a", "1")]
        assert first == second

    def test_contains(self) -> None:
        """Membership reflects registered identifiers."""
        registry = ValueRegistry()
        registry.set_value("tid", None)
        assert "tid" in registry
        assert "other" not in registry

    def test_static_holder_satisfies_protocol(self) -> None:
        """StaticValueHolder is a ValueHolder."""
        assert isinstance(StaticValueHolder("tid", "1"), ValueHolder)


class TestContextRegistry:
    """Tests for ContextRegistry."""

    def test_set_context_with_flag(self) -> None:
        """A boolean registers a static provider."""
        registry = ContextRegistry()
        registry.set_context("admin", True)
        provider = registry.lookup("admin")
        assert isinstance(provider, StaticContextProvider)
        assert provider.is_contextual() is True

    def test_set_context_with_callable_is_evaluated_lazily(self) -> None:
        """A callable is only invoked when the provider is asked."""
        calls: list[int] = []

        def evaluator() -> bool:
            calls.append(1)
            return True

        registry = ContextRegistry()
        registry.set_context("admin", evaluator)
        assert calls == []

        provider = registry.lookup("admin")
        assert isinstance(provider, CallableContextProvider)
        assert provider.is_contextual() is True
        assert provider.is_contextual() is True
        assert len(calls) == 2

    def test_lookup_unknown_raises(self) -> None:
        """Unknown tags raise a context-provider specific error."""
        registry = ContextRegistry()
        with pytest.raises(UnknownContextProviderError, match='ContextProvider for "admin"'):
            registry.lookup("admin")

    def test_providers_satisfy_protocol(self) -> None:
        """Both bundled providers are ContextProviders."""
        assert isinstance(StaticContextProvider("a", True), ContextProvider)
        assert isinstance(CallableContextProvider("a", lambda: True), ContextProvider)
