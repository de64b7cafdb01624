"""
Rental lifecycle manager.

Coordinates checkout and return across the rental ledger and the movie
catalog. Each operation runs entirely inside one Database.transaction(),
so the ledger write and the stock adjustment commit together or not at all.

Invariants:
    - number_in_stock never goes negative
    - At most one open rental per (customer, movie)
    - A closed rental for the pair is replaced on the next checkout
    - Business-rule failures leave the stores untouched

How to change safely:
    - Keep every read that a decision depends on inside the same transaction
    - New steps must raise before the first write or rely on the rollback
    - Test concurrent checkouts on the last copy after any change
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from ..errors import (
    AlreadyRentedError,
    AlreadyReturnedError,
    InvalidReferenceError,
    NotFoundError,
    OutOfStockError,
)
from ..models import CustomerSnapshot, MovieSnapshot, Rental
from ..store import Database
from ..store.rows import from_ms, new_id, to_ms
from .pricing import compute_rental_fee


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RentalLifecycleManager:
    """Checkout and return of rentals.

    Attributes:
        database: Storage backing catalog, customers and ledger
        transaction_timeout_seconds: Deadline for each operation's transaction

    Example:
        >>> manager = RentalLifecycleManager(db)
        >>> rental = await manager.checkout(customer_id, movie_id)
        >>> rental = await manager.return_rental(customer_id, movie_id)
        >>> rental.rental_fee
        2.0
    """

    def __init__(
        self,
        database: Database,
        clock: Callable[[], datetime] = utc_now,
        logger: logging.Logger | None = None,
        transaction_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            database: Storage to operate on
            clock: Returns the current aware datetime
            logger: Logger for lifecycle events (module logger by default)
            transaction_timeout_seconds: Per-operation deadline
                (defaults to the database's own)
        """
        self.database = database
        self.transaction_timeout_seconds = transaction_timeout_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    def _now(self) -> datetime:
        # Storage keeps millisecond precision
        return from_ms(to_ms(self._clock()))

    async def lookup(self, customer_id: str, movie_id: str) -> Rental | None:
        """Most recent rental for the pair, open or closed."""
        with self.database.session() as uow:
            return uow.rentals.lookup(customer_id, movie_id)

    async def checkout(self, customer_id: str, movie_id: str) -> Rental:
        """Rent a movie to a customer.

        Args:
            customer_id: Customer identifier
            movie_id: Movie identifier

        Returns:
            The new open Rental

        Raises:
            InvalidReferenceError: If the customer or movie doesn't exist
            OutOfStockError: If the movie has no copies left
            AlreadyRentedError: If the pair already has an open rental
            TransactionFailedError: If the write could not be applied
        """
        with self.database.transaction(self.transaction_timeout_seconds) as uow:
            customer = uow.customers.get(customer_id)
            if customer is None:
                raise InvalidReferenceError("Invalid customer.", "customerId", customer_id)

            movie = uow.movies.get(movie_id)
            if movie is None:
                raise InvalidReferenceError("Invalid movie.", "movieId", movie_id)

            if movie.number_in_stock == 0:
                raise OutOfStockError(movie_id)

            existing = uow.rentals.lookup(customer_id, movie_id)
            if existing is not None:
                if existing.is_open:
                    raise AlreadyRentedError(customer_id, movie_id, existing.id)
                uow.rentals.delete(existing.id)
                self._logger.debug(
                    "Replaced closed rental",
                    extra={"rental_id": existing.id, "customer_id": customer_id, "movie_id": movie_id},
                )

            rental = Rental(
                id=new_id(),
                customer=CustomerSnapshot.of(customer),
                movie=MovieSnapshot.of(movie),
                date_out=self._now(),
            )
            uow.rentals.insert(rental)
            stock = uow.movies.adjust_stock(movie.id, -1)

        self._logger.info(
            "Rental checked out",
            extra={
                "rental_id": rental.id,
                "customer_id": customer_id,
                "movie_id": movie_id,
                "number_in_stock": stock,
            },
        )
        return rental

    async def return_rental(self, customer_id: str, movie_id: str) -> Rental:
        """Close the open rental for a customer and movie.

        The fee is computed from the movie snapshot's daily rate. Stock is
        returned to the live movie row; if that movie has since been
        deleted the rental is still closed.

        Returns:
            The closed Rental with date_returned and rental_fee set

        Raises:
            NotFoundError: If the pair has no rental
            AlreadyReturnedError: If the rental is already closed
            TransactionFailedError: If the write could not be applied
        """
        with self.database.transaction(self.transaction_timeout_seconds) as uow:
            rental = uow.rentals.lookup(customer_id, movie_id)
            if rental is None:
                raise NotFoundError(
                    "Rental not found.",
                    resource_type="rental",
                    resource_id=f"{customer_id}/{movie_id}",
                )
            if not rental.is_open:
                raise AlreadyReturnedError(rental.id)

            date_returned = self._now()
            fee = compute_rental_fee(rental.date_out, date_returned, rental.movie.daily_rental_rate)
            rental = rental.closed(date_returned, fee)
            uow.rentals.close(rental)

            try:
                uow.movies.adjust_stock(movie_id, 1)
            except NotFoundError:
                self._logger.warning(
                    "Returned movie no longer in catalog",
                    extra={"rental_id": rental.id, "movie_id": movie_id},
                )

        self._logger.info(
            "Rental returned",
            extra={
                "rental_id": rental.id,
                "customer_id": customer_id,
                "movie_id": movie_id,
                "rental_fee": fee,
            },
        )
        return rental
