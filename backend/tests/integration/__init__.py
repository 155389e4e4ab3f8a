"""
Integration tests package.

Runs barber and reservation events through the consumer and the admin API
through the Flask test client, all against an in-memory SQLite database
and the in-memory message transport.
"""
