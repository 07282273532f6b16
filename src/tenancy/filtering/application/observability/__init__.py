"""Domain probes for Filtering application layer."""

from filtering.application.observability.compiler_probe import (
    DefaultPredicateCompilerProbe,
    PredicateCompilerProbe,
)

__all__ = [
    "DefaultPredicateCompilerProbe",
    "PredicateCompilerProbe",
]
