"""
SQLite database for the Vidly server.

This module manages the single SQLite file that stores:
- Genres and movies (the catalog, including stock levels)
- Customers
- Users (identity)
- Rentals (the ledger)

All multi-table writes go through Database.transaction(), which yields a
UnitOfWork bound to one connection inside BEGIN IMMEDIATE. Reads that need
no isolation use Database.session().

Invariants:
    - movies.number_in_stock >= 0 (CHECK constraint)
    - At most one open rental per (customer_id, movie_id) (partial unique index)
    - Every transaction commits or rolls back before the connection closes
    - A transaction never outlives its deadline

How to change safely:
    - Schema migrations must be backward compatible
    - Bump SCHEMA_VERSION and add an idempotent migration step
    - Use transaction() for every write that touches more than one row

Table schema:
    movies:
        - id TEXT PRIMARY KEY (UUID)
        - title TEXT
        - genre_id TEXT, genre_name TEXT (denormalized)
        - number_in_stock INTEGER CHECK >= 0
        - daily_rental_rate REAL

    rentals:
        - id TEXT PRIMARY KEY (UUID)
        - customer_id, customer_name, customer_phone (snapshot)
        - movie_id, movie_title, movie_daily_rental_rate (snapshot)
        - date_out INTEGER (Unix ms)
        - date_returned INTEGER NULL (Unix ms)
        - rental_fee REAL NULL
        - UNIQUE (customer_id, movie_id) WHERE date_returned IS NULL
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import TransactionFailedError
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

# SQLite progress handler granularity (VM instructions between deadline checks)
_PROGRESS_STEPS = 1000


class Database:
    """SQLite-backed storage for catalog, customers, users and rentals.

    Thread safety:
        Each session/transaction opens its own connection.
        Writers are serialized by BEGIN IMMEDIATE; readers run
        concurrently under WAL mode.

    Example:
        >>> db = Database("/var/lib/vidly/vidly.db")
        >>> await db.initialize()
        >>> with db.transaction() as uow:
        ...     genre = uow.genres.create("Comedy")
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        cache_size_pages: int = -64000,
        transaction_timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the database.

        Args:
            path: SQLite database file
            wal_mode: Enable SQLite WAL mode
            busy_timeout_ms: SQLite busy timeout
            cache_size_pages: SQLite cache size (negative = KB)
            transaction_timeout_seconds: Default deadline for transaction()
        """
        self.path = Path(path)
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self.cache_size_pages = cache_size_pages
        self.transaction_timeout_seconds = transaction_timeout_seconds
        self._lock = asyncio.Lock()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Open a configured connection.

        Yields:
            SQLite connection in autocommit mode
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(
            str(self.path),
            timeout=self.busy_timeout_ms / 1000.0,
            isolation_level=None,  # Autocommit by default, explicit transactions
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row

        try:
            conn.execute(f"PRAGMA busy_timeout = {self.busy_timeout_ms}")
            conn.execute(f"PRAGMA cache_size = {self.cache_size_pages}")
            conn.execute("PRAGMA synchronous = NORMAL")

            yield conn
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        """Create database schema."""
        # Journal mode is persistent in the file, so it is set once here
        if self.wal_mode:
            conn.execute("PRAGMA journal_mode = WAL")

        conn.executescript("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS genres (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_genres_name ON genres(name);

            CREATE TABLE IF NOT EXISTS movies (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                genre_id TEXT NOT NULL,
                genre_name TEXT NOT NULL,
                number_in_stock INTEGER NOT NULL CHECK (number_in_stock >= 0),
                daily_rental_rate REAL NOT NULL CHECK (daily_rental_rate >= 0)
            );

            CREATE INDEX IF NOT EXISTS idx_movies_title ON movies(title);
            CREATE INDEX IF NOT EXISTS idx_movies_genre ON movies(genre_id);

            CREATE TABLE IF NOT EXISTS customers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                phone TEXT NOT NULL,
                is_gold INTEGER NOT NULL DEFAULT 0
            );

            CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                is_admin INTEGER NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS rentals (
                id TEXT PRIMARY KEY,
                customer_id TEXT NOT NULL,
                customer_name TEXT NOT NULL,
                customer_phone TEXT NOT NULL,
                movie_id TEXT NOT NULL,
                movie_title TEXT NOT NULL,
                movie_daily_rental_rate REAL NOT NULL,
                date_out INTEGER NOT NULL,
                date_returned INTEGER,
                rental_fee REAL
            );

            CREATE INDEX IF NOT EXISTS idx_rentals_pair
                ON rentals(customer_id, movie_id, date_out DESC);
            CREATE INDEX IF NOT EXISTS idx_rentals_date_out ON rentals(date_out DESC);

            -- Single open rental per (customer, movie)
            CREATE UNIQUE INDEX IF NOT EXISTS idx_rentals_open_pair
                ON rentals(customer_id, movie_id) WHERE date_returned IS NULL;

            INSERT OR IGNORE INTO schema_version (version, applied_at)
            VALUES (1, strftime('%s', 'now') * 1000);
        """)

    async def initialize(self) -> None:
        """Create the database file and schema if they don't exist."""
        async with self._lock:
            with self._get_connection() as conn:
                self._create_schema(conn)
                logger.info(f"Initialized database: {self.path}")

    @contextmanager
    def session(self) -> Iterator[UnitOfWork]:
        """Open a non-transactional unit of work for reads.

        Each statement runs in its own implicit transaction.
        """
        with self._get_connection() as conn:
            yield UnitOfWork(conn)

    @contextmanager
    def transaction(self, timeout_seconds: float | None = None) -> Iterator[UnitOfWork]:
        """Open a scoped write transaction.

        Commits when the block exits normally and rolls back on every
        other exit path (exceptions, cancellation, deadline). SQLite
        errors are re-raised as TransactionFailedError; any other
        exception propagates unchanged after the rollback.

        Args:
            timeout_seconds: Deadline for the whole transaction
                (defaults to transaction_timeout_seconds)

        Yields:
            UnitOfWork bound to the transaction

        Raises:
            TransactionFailedError: If the transaction could not be applied
        """
        timeout = timeout_seconds if timeout_seconds is not None else self.transaction_timeout_seconds
        deadline = time.monotonic() + timeout

        with self._get_connection() as conn:
            # Aborts the running statement with "interrupted" once the deadline passes
            conn.set_progress_handler(lambda: int(time.monotonic() > deadline), _PROGRESS_STEPS)
            uow = UnitOfWork(conn)

            try:
                uow.begin()
            except sqlite3.Error as e:
                logger.warning(f"Could not begin transaction: {e}")
                raise TransactionFailedError(cause=str(e)) from e

            try:
                yield uow
                if time.monotonic() > deadline:
                    raise TransactionFailedError(
                        "Transaction deadline exceeded",
                        cause=f"timeout after {timeout}s",
                    )
                uow.commit()
            except BaseException as e:
                conn.set_progress_handler(None, 0)
                uow.rollback()
                if isinstance(e, sqlite3.Error):
                    logger.error(f"Transaction rolled back: {e}", exc_info=True)
                    raise TransactionFailedError(cause=str(e)) from e
                raise
