"""Domain value objects for tenancy filter declarations.

A resource type declares *what* isolates it as an ordered set of templated
filter rules. Declarations are built once at load time and shared
read-only across requests, so every value object here is frozen.

Legacy declaration key sets are accepted through validation aliases:
``enable``/``enabled``, ``filters``, ``context``, ``where`` and
``requireAllContexts`` all map onto the unified shape.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class FilterStrategy(StrEnum):
    """How contextual rules of one declaration are combined.

    FIRST_MATCH stops at the first contextual rule (declaration order);
    ANY_MATCH ANDs together every contextual rule.
    """

    FIRST_MATCH = "first_match"
    ANY_MATCH = "any_match"

    @classmethod
    def _missing_(cls, value: object) -> FilterStrategy | None:
        # Accept "FirstMatch", "FIRST_MATCH" and "first-match" spellings
        if not isinstance(value, str):
            return None
        key = value.replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        return None


class FilterRule(BaseModel):
    """A single templated isolation clause scoped to zero or more contexts.

    Attributes:
        context_tags: Context identifiers gating the rule. Empty means the
            rule always applies. Kept as an ordered, de-duplicated tuple so
            evaluation is deterministic.
        require_all_contexts: When True every tag must be contextual,
            otherwise any single tag suffices.
        template: SQL boolean expression containing ``{identifier}``
            placeholders and the ``$this`` table-alias marker.
        ignored: When True the rule never contributes a clause.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    context_tags: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("context_tags", "context", "contextTags"),
    )
    require_all_contexts: bool = Field(
        default=False,
        validation_alias=AliasChoices("require_all_contexts", "requireAllContexts"),
    )
    template: str = Field(
        default="",
        validation_alias=AliasChoices("template", "where"),
    )
    ignored: bool = Field(
        default=False,
        validation_alias=AliasChoices("ignored", "ignore"),
    )

    @field_validator("context_tags", mode="before")
    @classmethod
    def _normalize_context_tags(cls, value: Any) -> tuple[str, ...]:
        """Accept a single tag or any iterable of tags, dropping duplicates."""
        if value is None:
            return ()
        if isinstance(value, str):
            value = (value,)
        if not isinstance(value, Iterable):
            raise ValueError("context_tags must be a string or an iterable of strings")
        return tuple(dict.fromkeys(value))

    @model_validator(mode="after")
    def _require_template(self) -> FilterRule:
        """A rule that can contribute must carry a non-blank template."""
        if not self.ignored and not self.template.strip():
            raise ValueError("template must not be blank unless the rule is ignored")
        return self

    @property
    def is_unconditional(self) -> bool:
        """Whether the rule applies without consulting any context."""
        return not self.context_tags


class TenancyDeclaration(BaseModel):
    """Tenancy rules of one resource type.

    Attributes:
        enabled: Master switch; a disabled declaration yields no predicate.
        rules: Ordered rules. Order is the tie-break for FIRST_MATCH.
        strategy: Rule combination policy.

    An enabled declaration without rules is accepted here and rejected at
    compile time, so a half-written declaration fails the query that hits it
    rather than the whole catalog load.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("enabled", "enable"),
    )
    rules: tuple[FilterRule, ...] = Field(
        default=(),
        validation_alias=AliasChoices("rules", "filters"),
    )
    strategy: FilterStrategy = FilterStrategy.ANY_MATCH

    @field_validator("strategy", mode="before")
    @classmethod
    def _coerce_strategy(cls, value: Any) -> Any:
        """Route string input through the enum so legacy spellings resolve."""
        if isinstance(value, str):
            return FilterStrategy(value)
        return value

    @classmethod
    def disabled(cls) -> TenancyDeclaration:
        """Explicitly opt a resource type out of tenancy filtering."""
        return cls(enabled=False)
