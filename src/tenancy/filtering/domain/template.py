"""Placeholder scanning and substitution for filter rule templates.

Templates are opaque SQL strings with two kinds of tokens:

- ``$this``: replaced by the table alias the query engine assigned.
- ``{identifier}``: replaced by the value of a registered value holder.

Substitution happens in a single left-to-right pass over the template, so a
substituted value is never scanned again. A value containing ``{other}`` or
``$this`` is inserted verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

ALIAS_MARKER = "$this"

# Substituted for a value holder that currently holds no value. Comparing
# against NULL matches no rows, so an unset value narrows rather than widens.
NULL_LITERAL = "NULL"

# Continuation artifacts left behind when a template is authored inside a
# doc comment ("\n     * AND ...").
_CONTINUATION_ARTIFACT = re.compile(r"\n\s+\*")

_TOKEN = re.compile(
    r"(?P<alias>\$this)(?![A-Za-z0-9_])"
    r"|\{(?P<identifier>[A-Za-z_][A-Za-z0-9_.\-]*)\}"
)


def normalize(template: str) -> str:
    """Strip doc-comment continuation artifacts from a template."""
    return _CONTINUATION_ARTIFACT.sub("", template)


def placeholders(template: str) -> tuple[str, ...]:
    """Return the ``{identifier}`` names present in a template.

    Names are returned once each, in order of first appearance. The alias
    marker is not included.
    """
    found = (
        match.group("identifier")
        for match in _TOKEN.finditer(template)
        if match.group("identifier") is not None
    )
    return tuple(dict.fromkeys(found))


def substitute(
    template: str,
    table_alias: str,
    values: Mapping[str, str | None],
) -> str:
    """Replace every token of a template in a single pass.

    Args:
        template: The template text, already normalized.
        table_alias: Replacement for ``$this``.
        values: Replacement for each ``{identifier}``. Must cover every
            name returned by :func:`placeholders`.

    Returns:
        The template with all tokens replaced.

    Raises:
        KeyError: If ``values`` is missing a placeholder present in the template.
    """

    def _replace(match: re.Match[str]) -> str:
        if match.group("alias") is not None:
            return table_alias
        value = values[match.group("identifier")]
        return NULL_LITERAL if value is None else value

    return _TOKEN.sub(_replace, template)


def render(
    template: str,
    table_alias: str,
    values: Mapping[str, str | None],
) -> str:
    """Normalize a template then substitute its tokens."""
    return substitute(normalize(template), table_alias, values)
