"""
Vidly Server - Movie rental store backend.

This package implements the backend of a movie rental store:
- Genres, movies, customers and user accounts behind a REST API
- Token-based authentication with role-based authorization
- The rental lifecycle (checkout and return) as the stateful core

Architecture:
    ┌─────────────┐     ┌─────────────┐     ┌──────────────────────┐
    │   Client    │────▶│  FastAPI    │────▶│ RentalLifecycle      │
    │   (HTTP)    │     │  routes     │     │ Manager              │
    └─────────────┘     └──────┬──────┘     └──────────┬───────────┘
                               │                       │
                               ▼                       ▼
                        ┌─────────────────────────────────────────┐
                        │        UnitOfWork (one SQLite tx)       │
                        └─────────────────────────────────────────┘
                               │              │              │
                               ▼              ▼              ▼
                          ┌─────────┐   ┌──────────┐   ┌──────────┐
                          │ Catalog │   │ Customers│   │  Rental  │
                          │ (stock) │   │ Identity │   │  Ledger  │
                          └─────────┘   └──────────┘   └──────────┘

Invariants:
    - A movie's number_in_stock is never negative
    - At most one open rental exists per (customer, movie) pair
    - Ledger insert/update and the stock adjustment commit together or not at all
    - Rentals embed snapshots of customer and movie, never live references

How to change safely:
    - Keep every multi-table write inside a single UnitOfWork
    - Schema changes must keep the CHECK constraints on stock
    - Add new error codes to errors.py and the HTTP status map together

Version: see _version.py.
"""

from ._version import __version__

__all__ = ["__version__"]
