"""Row helpers shared by the repositories."""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone

from ..models import (
    Customer,
    CustomerSnapshot,
    Genre,
    GenreRef,
    Movie,
    MovieSnapshot,
    Rental,
    User,
)


def new_id() -> str:
    """Generate a record identifier."""
    return str(uuid.uuid4())


def to_ms(value: datetime) -> int:
    """Convert an aware datetime to Unix milliseconds."""
    return int(value.timestamp() * 1000)


def from_ms(value: int) -> datetime:
    """Convert Unix milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def row_to_genre(row: sqlite3.Row) -> Genre:
    return Genre(id=row["id"], name=row["name"])


def row_to_movie(row: sqlite3.Row) -> Movie:
    return Movie(
        id=row["id"],
        title=row["title"],
        genre=GenreRef(id=row["genre_id"], name=row["genre_name"]),
        number_in_stock=row["number_in_stock"],
        daily_rental_rate=row["daily_rental_rate"],
    )


def row_to_customer(row: sqlite3.Row) -> Customer:
    return Customer(
        id=row["id"],
        name=row["name"],
        phone=row["phone"],
        is_gold=bool(row["is_gold"]),
    )


def row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        is_admin=bool(row["is_admin"]),
    )


def row_to_rental(row: sqlite3.Row) -> Rental:
    date_returned = row["date_returned"]
    return Rental(
        id=row["id"],
        customer=CustomerSnapshot(
            id=row["customer_id"],
            name=row["customer_name"],
            phone=row["customer_phone"],
        ),
        movie=MovieSnapshot(
            id=row["movie_id"],
            title=row["movie_title"],
            daily_rental_rate=row["movie_daily_rental_rate"],
        ),
        date_out=from_ms(row["date_out"]),
        date_returned=from_ms(date_returned) if date_returned is not None else None,
        rental_fee=row["rental_fee"],
    )
