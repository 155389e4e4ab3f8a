"""
Unit tests package.

Domain rules, event schemas, handlers, the reconciler and the unit of work
tested against mock repositories and an in-memory transport, without a
database or HTTP client.
"""
