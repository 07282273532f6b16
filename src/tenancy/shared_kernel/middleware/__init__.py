"""Shared middleware for cross-cutting concerns.

This module contains the framework-agnostic tenant context value object
and its domain probe. The FastAPI dependency that resolves the tenant from
request headers lives in the filtering bounded context.
"""
