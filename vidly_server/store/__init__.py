"""
Storage layer for the Vidly server.

This module provides:
- Database: SQLite file, schema and transaction scoping
- UnitOfWork: repositories bound to one connection
- Repositories for genres, movies, customers, users and rentals
"""

from .catalog import GenreRepository, MovieRepository
from .customers import CustomerRepository
from .database import Database
from .identity import UserRepository
from .ledger import RentalLedger
from .unit_of_work import UnitOfWork

__all__ = [
    "Database",
    "UnitOfWork",
    "GenreRepository",
    "MovieRepository",
    "CustomerRepository",
    "UserRepository",
    "RentalLedger",
]
