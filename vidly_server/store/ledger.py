"""
Rental ledger.

Append-mostly store of Rental records. A rental is inserted on checkout,
closed once on return, and deleted only when a new checkout of the same
(customer, movie) pair replaces a closed record.

Invariants:
    - At most one open rental per (customer_id, movie_id)
    - A rental is closed at most once
    - Snapshot columns are written on insert and never updated
"""

from __future__ import annotations

import sqlite3

from ..errors import AlreadyReturnedError
from ..models import Rental
from .rows import row_to_rental, to_ms


class RentalLedger:
    """Rental persistence and pair lookup."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def lookup(self, customer_id: str, movie_id: str) -> Rental | None:
        """Find the most recent rental for a customer and movie.

        Open or closed, ordered by date_out. Under the single-open-rental
        invariant and delete-on-recheckout there is normally at most one.

        Returns:
            Rental or None if the pair was never rented
        """
        row = self.conn.execute(
            """
            SELECT * FROM rentals
            WHERE customer_id = ? AND movie_id = ?
            ORDER BY date_out DESC, rowid DESC
            LIMIT 1
            """,
            (customer_id, movie_id),
        ).fetchone()
        return row_to_rental(row) if row else None

    def get(self, rental_id: str) -> Rental | None:
        row = self.conn.execute("SELECT * FROM rentals WHERE id = ?", (rental_id,)).fetchone()
        return row_to_rental(row) if row else None

    def list_all(self) -> list[Rental]:
        """All rentals, newest checkout first."""
        cursor = self.conn.execute("SELECT * FROM rentals ORDER BY date_out DESC, rowid DESC")
        return [row_to_rental(row) for row in cursor.fetchall()]

    def insert(self, rental: Rental) -> None:
        self.conn.execute(
            """
            INSERT INTO rentals (id, customer_id, customer_name, customer_phone,
                                 movie_id, movie_title, movie_daily_rental_rate,
                                 date_out, date_returned, rental_fee)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                rental.id,
                rental.customer.id,
                rental.customer.name,
                rental.customer.phone,
                rental.movie.id,
                rental.movie.title,
                rental.movie.daily_rental_rate,
                to_ms(rental.date_out),
                to_ms(rental.date_returned) if rental.date_returned else None,
                rental.rental_fee,
            ),
        )

    def delete(self, rental_id: str) -> bool:
        """Delete a rental.

        Returns:
            True if deleted, False if not found
        """
        cursor = self.conn.execute("DELETE FROM rentals WHERE id = ?", (rental_id,))
        return cursor.rowcount > 0

    def close(self, rental: Rental) -> None:
        """Persist the return fields of a closed rental.

        Raises:
            AlreadyReturnedError: If the stored rental is no longer open
        """
        if rental.date_returned is None:
            raise ValueError("close() requires a rental with date_returned set")

        cursor = self.conn.execute(
            """
            UPDATE rentals SET date_returned = ?, rental_fee = ?
            WHERE id = ? AND date_returned IS NULL
            """,
            (to_ms(rental.date_returned), rental.rental_fee, rental.id),
        )
        if cursor.rowcount == 0:
            raise AlreadyReturnedError(rental.id)

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM rentals").fetchone()[0]
