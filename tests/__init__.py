"""
Vidly Test Suite.

This package contains:
- unit/: Unit tests (pricing, auth, SQLite repositories)
- integration/: Rental lifecycle against SQLite and the HTTP API via TestClient
"""
