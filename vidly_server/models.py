"""
Domain records for the rental store.

Records are plain dataclasses produced by the store layer. Rentals carry
frozen snapshots of the customer and movie taken at checkout time so that
later catalog or customer edits never rewrite rental history.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass
class Genre:
    """A movie genre."""

    id: str
    name: str


@dataclass(frozen=True)
class GenreRef:
    """Denormalized genre reference embedded in a movie."""

    id: str
    name: str


@dataclass
class Movie:
    """A catalog title with its stock level and daily rate.

    Attributes:
        id: Movie identifier
        title: Display title
        genre: Embedded genre reference
        number_in_stock: Copies available to rent (0-255, never negative)
        daily_rental_rate: Price per started day (0-255)
    """

    id: str
    title: str
    genre: GenreRef
    number_in_stock: int
    daily_rental_rate: float


@dataclass
class Customer:
    """A store customer."""

    id: str
    name: str
    phone: str
    is_gold: bool = False


@dataclass
class User:
    """A user account. password_hash never leaves the server."""

    id: str
    name: str
    email: str
    password_hash: str
    is_admin: bool = False


@dataclass(frozen=True)
class CustomerSnapshot:
    """Customer fields copied into a rental at checkout."""

    id: str
    name: str
    phone: str

    @classmethod
    def of(cls, customer: Customer) -> CustomerSnapshot:
        return cls(id=customer.id, name=customer.name, phone=customer.phone)


@dataclass(frozen=True)
class MovieSnapshot:
    """Movie fields copied into a rental at checkout."""

    id: str
    title: str
    daily_rental_rate: float

    @classmethod
    def of(cls, movie: Movie) -> MovieSnapshot:
        return cls(id=movie.id, title=movie.title, daily_rental_rate=movie.daily_rental_rate)


@dataclass(frozen=True)
class Rental:
    """A ledger entry.

    A rental with date_returned set is closed; otherwise it is open.
    Rentals are immutable values: closing one produces a new instance.

    Attributes:
        id: Rental identifier
        customer: Customer snapshot at checkout
        movie: Movie snapshot at checkout
        date_out: Checkout time (UTC)
        date_returned: Return time (UTC) or None while open
        rental_fee: Fee computed on return or None while open
    """

    id: str
    customer: CustomerSnapshot
    movie: MovieSnapshot
    date_out: datetime
    date_returned: datetime | None = None
    rental_fee: float | None = None

    @property
    def is_open(self) -> bool:
        return self.date_returned is None

    def closed(self, date_returned: datetime, rental_fee: float) -> Rental:
        """Return a closed copy of this rental."""
        return replace(self, date_returned=date_returned, rental_fee=rental_fee)
