"""
Core app for the Format Converter.

Provides shared errors, permissions, request tracing, observability,
and the persisted converter settings.
"""
