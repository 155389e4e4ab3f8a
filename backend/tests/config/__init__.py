"""Shared test configuration: pytest marker registration."""
