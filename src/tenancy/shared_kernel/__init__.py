"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
bounded contexts: the resolved tenant context and observability metadata.
Changes to this module affect every context and should be carefully coordinated.
"""
