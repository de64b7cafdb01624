"""
Unit tests for the SQLite store.

Tests cover:
- Genre, customer and movie CRUD
- Conditional stock adjustment
- Storage-level guards (stock CHECK, single open rental per pair)
- Rental ledger lookup and close
- Transaction rollback and deadline
- Unique user emails
"""

import asyncio
import os
import tempfile
import time
from datetime import datetime, timedelta, timezone

import pytest

from vidly_server.errors import (
    AlreadyReturnedError,
    ConflictError,
    NotFoundError,
    OutOfStockError,
    TransactionFailedError,
)
from vidly_server.models import CustomerSnapshot, MovieSnapshot, Rental
from vidly_server.store import Database

T0 = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db(data_dir):
    """Create an initialized database."""
    database = Database(os.path.join(data_dir, "vidly.db"), wal_mode=False)
    asyncio.run(database.initialize())
    return database


def seed_movie(db, title="Airplane!", stock=3, rate=2.0):
    with db.transaction() as uow:
        genre = uow.genres.create("Comedy")
        return uow.movies.create(title, genre, number_in_stock=stock, daily_rental_rate=rate)


def make_rental(customer_id, movie_id, date_out=T0, rental_id=None):
    return Rental(
        id=rental_id or f"rental-{customer_id}-{movie_id}-{date_out.timestamp()}",
        customer=CustomerSnapshot(id=customer_id, name="Jane Doe", phone="555-0100"),
        movie=MovieSnapshot(id=movie_id, title="Airplane!", daily_rental_rate=2.0),
        date_out=date_out,
    )


class TestCatalog:
    """Tests for GenreRepository and MovieRepository."""

    def test_genres_sorted_by_name(self, db):
        """Genres list in name order."""
        with db.transaction() as uow:
            uow.genres.create("Thriller")
            uow.genres.create("Comedy")
            uow.genres.create("Drama")

        with db.session() as uow:
            names = [g.name for g in uow.genres.list_all()]
        assert names == ["Comedy", "Drama", "Thriller"]

    def test_genre_update_and_delete(self, db):
        """Update renames; delete returns the removed genre."""
        with db.transaction() as uow:
            genre = uow.genres.create("Comedy")
            updated = uow.genres.update(genre.id, "Comedies")
            assert updated.name == "Comedies"

        with db.transaction() as uow:
            deleted = uow.genres.delete(genre.id)
            assert deleted.name == "Comedies"

        with db.session() as uow:
            assert uow.genres.get(genre.id) is None

    def test_missing_genre(self, db):
        """Update and delete of unknown ids return None."""
        with db.transaction() as uow:
            assert uow.genres.update("missing", "Comedy") is None
            assert uow.genres.delete("missing") is None

    def test_movie_embeds_genre(self, db):
        """Movies carry a copy of their genre."""
        movie = seed_movie(db)

        with db.session() as uow:
            fetched = uow.movies.get(movie.id)
        assert fetched.title == "Airplane!"
        assert fetched.genre.name == "Comedy"
        assert fetched.number_in_stock == 3
        assert fetched.daily_rental_rate == 2.0

    def test_movie_update(self, db):
        """Update replaces every movie field."""
        movie = seed_movie(db)

        with db.transaction() as uow:
            drama = uow.genres.create("Drama")
            updated = uow.movies.update(movie.id, "Airplane II", drama, 5, 3.5)

        assert updated.genre.name == "Drama"
        with db.session() as uow:
            fetched = uow.movies.get(movie.id)
        assert fetched.title == "Airplane II"
        assert fetched.genre.id == drama.id
        assert fetched.number_in_stock == 5

    def test_adjust_stock(self, db):
        """Stock moves by delta and reports the new level."""
        movie = seed_movie(db, stock=2)

        with db.transaction() as uow:
            assert uow.movies.adjust_stock(movie.id, -1) == 1
            assert uow.movies.adjust_stock(movie.id, 1) == 2

    def test_adjust_stock_out_of_stock(self, db):
        """Stock never goes below zero."""
        movie = seed_movie(db, stock=0)

        with pytest.raises(OutOfStockError):
            with db.transaction() as uow:
                uow.movies.adjust_stock(movie.id, -1)

        with db.session() as uow:
            assert uow.movies.get(movie.id).number_in_stock == 0

    def test_adjust_stock_unknown_movie(self, db):
        """Adjusting a missing movie raises NotFoundError."""
        with pytest.raises(NotFoundError):
            with db.transaction() as uow:
                uow.movies.adjust_stock("missing", 1)

    def test_stock_check_constraint(self, db):
        """A direct negative write is rejected by the schema."""
        movie = seed_movie(db, stock=0)

        with pytest.raises(TransactionFailedError):
            with db.transaction() as uow:
                uow.conn.execute("UPDATE movies SET number_in_stock = -1 WHERE id = ?", (movie.id,))

        with db.session() as uow:
            assert uow.movies.get(movie.id).number_in_stock == 0


class TestCustomers:
    """Tests for CustomerRepository."""

    def test_create_and_get(self, db):
        """Customers persist their gold flag."""
        with db.transaction() as uow:
            customer = uow.customers.create("Jane Doe", "555-0100", is_gold=True)

        with db.session() as uow:
            fetched = uow.customers.get(customer.id)
        assert fetched.name == "Jane Doe"
        assert fetched.is_gold is True

    def test_update_and_delete(self, db):
        """Update replaces fields; delete removes the customer."""
        with db.transaction() as uow:
            customer = uow.customers.create("Jane Doe", "555-0100")
            uow.customers.update(customer.id, "Jane Smith", "555-0199", True)

        with db.session() as uow:
            fetched = uow.customers.get(customer.id)
        assert fetched.name == "Jane Smith"
        assert fetched.phone == "555-0199"
        assert fetched.is_gold is True

        with db.transaction() as uow:
            assert uow.customers.delete(customer.id) is not None
            assert uow.customers.delete(customer.id) is None


class TestRentalLedger:
    """Tests for RentalLedger."""

    def test_insert_and_get(self, db):
        """Inserted rental round-trips with its snapshots."""
        rental = make_rental("c1", "m1")
        with db.transaction() as uow:
            uow.rentals.insert(rental)

        with db.session() as uow:
            fetched = uow.rentals.get(rental.id)
        assert fetched == rental
        assert fetched.is_open

    def test_lookup_returns_latest(self, db):
        """Lookup returns the most recent rental of the pair."""
        older = make_rental("c1", "m1", date_out=T0).closed(T0 + timedelta(days=1), 2.0)
        newer = make_rental("c1", "m1", date_out=T0 + timedelta(days=2))
        with db.transaction() as uow:
            uow.rentals.insert(older)
            uow.rentals.insert(newer)

        with db.session() as uow:
            assert uow.rentals.lookup("c1", "m1").id == newer.id
            assert uow.rentals.lookup("c1", "m2") is None

    def test_single_open_rental_per_pair(self, db):
        """A second open rental for a pair is rejected by the schema."""
        with db.transaction() as uow:
            uow.rentals.insert(make_rental("c1", "m1", rental_id="r1"))

        with pytest.raises(TransactionFailedError):
            with db.transaction() as uow:
                uow.rentals.insert(make_rental("c1", "m1", rental_id="r2"))

        with db.session() as uow:
            assert uow.rentals.count() == 1

    def test_close_once(self, db):
        """A rental can be closed only once."""
        rental = make_rental("c1", "m1")
        with db.transaction() as uow:
            uow.rentals.insert(rental)

        closed = rental.closed(T0 + timedelta(hours=36), 4.0)
        with db.transaction() as uow:
            uow.rentals.close(closed)

        with pytest.raises(AlreadyReturnedError):
            with db.transaction() as uow:
                uow.rentals.close(closed)

        with db.session() as uow:
            fetched = uow.rentals.get(rental.id)
        assert fetched.date_returned == T0 + timedelta(hours=36)
        assert fetched.rental_fee == 4.0

    def test_close_requires_return_date(self, db):
        """Closing an open rental value is a programming error."""
        rental = make_rental("c1", "m1")
        with pytest.raises(ValueError):
            with db.transaction() as uow:
                uow.rentals.close(rental)

    def test_list_newest_first(self, db):
        """Rentals list by checkout time, newest first."""
        with db.transaction() as uow:
            uow.rentals.insert(make_rental("c1", "m1", date_out=T0))
            uow.rentals.insert(make_rental("c2", "m1", date_out=T0 + timedelta(hours=1)))
            uow.rentals.insert(make_rental("c3", "m1", date_out=T0 - timedelta(hours=1)))

        with db.session() as uow:
            customers = [r.customer.id for r in uow.rentals.list_all()]
        assert customers == ["c2", "c1", "c3"]

    def test_delete(self, db):
        """Delete reports whether a rental was removed."""
        rental = make_rental("c1", "m1")
        with db.transaction() as uow:
            uow.rentals.insert(rental)
            assert uow.rentals.delete(rental.id) is True
            assert uow.rentals.delete(rental.id) is False


class TestTransactions:
    """Tests for Database.transaction()."""

    def test_rollback_on_error(self, db):
        """Non-SQLite errors roll back and propagate unchanged."""
        with pytest.raises(ValueError, match="boom"):
            with db.transaction() as uow:
                uow.genres.create("Comedy")
                raise ValueError("boom")

        with db.session() as uow:
            assert uow.genres.list_all() == []

    def test_sqlite_error_becomes_transaction_failed(self, db):
        """SQLite errors surface as TransactionFailedError."""
        with pytest.raises(TransactionFailedError) as exc_info:
            with db.transaction() as uow:
                uow.genres.create("Comedy")
                uow.conn.execute("INSERT INTO no_such_table VALUES (1)")

        assert exc_info.value.code == "TRANSACTION_FAILED"
        with db.session() as uow:
            assert uow.genres.list_all() == []

    def test_deadline_exceeded(self, db):
        """A transaction past its deadline is aborted."""
        with pytest.raises(TransactionFailedError):
            with db.transaction(timeout_seconds=0.01) as uow:
                time.sleep(0.05)
                uow.genres.create("Comedy")

        with db.session() as uow:
            assert uow.genres.list_all() == []

    def test_commit(self, db):
        """Clean exit commits."""
        with db.transaction() as uow:
            uow.genres.create("Comedy")
            assert uow.in_transaction

        with db.session() as uow:
            assert [g.name for g in uow.genres.list_all()] == ["Comedy"]


class TestUsers:
    """Tests for UserRepository."""

    def test_find_by_email(self, db):
        """Users are found by email."""
        with db.transaction() as uow:
            user = uow.users.create("Alice Smith", "alice@mail.com", "hash", is_admin=True)

        with db.session() as uow:
            fetched = uow.users.find_by_email("alice@mail.com")
        assert fetched.id == user.id
        assert fetched.is_admin is True

    def test_duplicate_email(self, db):
        """Emails are unique."""
        with db.transaction() as uow:
            uow.users.create("Alice Smith", "alice@mail.com", "hash")

        with pytest.raises(ConflictError):
            with db.transaction() as uow:
                uow.users.create("Alice Jones", "alice@mail.com", "hash")
