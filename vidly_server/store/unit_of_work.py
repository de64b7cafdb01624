"""
Unit of work over a single SQLite connection.

Bundles the repositories so that a caller can read and write across
catalog, customers, users and the rental ledger inside one transaction.
Opening and closing the transaction is Database.transaction()'s job;
this class only issues the BEGIN/COMMIT/ROLLBACK statements.
"""

from __future__ import annotations

import logging
import sqlite3

from .catalog import GenreRepository, MovieRepository
from .customers import CustomerRepository
from .identity import UserRepository
from .ledger import RentalLedger

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Repositories sharing one connection.

    Attributes:
        conn: The underlying connection
        genres: Genre repository
        movies: Movie repository (including stock adjustment)
        customers: Customer repository
        users: User repository
        rentals: Rental ledger
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.genres = GenreRepository(conn)
        self.movies = MovieRepository(conn)
        self.customers = CustomerRepository(conn)
        self.users = UserRepository(conn)
        self.rentals = RentalLedger(conn)

    @property
    def in_transaction(self) -> bool:
        return self.conn.in_transaction

    def begin(self) -> None:
        """Start a write transaction, taking the database write lock."""
        self.conn.execute("BEGIN IMMEDIATE")

    def commit(self) -> None:
        self.conn.execute("COMMIT")

    def rollback(self) -> None:
        """Roll back if a transaction is still open.

        SQLite may already have rolled back on its own (e.g. a failed
        COMMIT), in which case there is nothing to do.
        """
        if not self.conn.in_transaction:
            return
        try:
            self.conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.error(f"Rollback failed: {e}", exc_info=True)
