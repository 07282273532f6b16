"""Filtering bounded context.

Compiles tenant-isolation predicates for shared-schema storage. Resource
types declare templated filter rules; the compiler evaluates them against
request-scoped values and contexts and returns a SQL boolean expression for
the query engine to AND into its WHERE clause.
"""
