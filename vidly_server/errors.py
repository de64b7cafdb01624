"""
Error types for the Vidly server.

This module defines the exceptions raised by the store and rental layers:
- VidlyError: Base exception
- NotFoundError: Referenced record is absent
- InvalidReferenceError: A request names a customer/movie/genre that does not exist
- OutOfStockError: Movie has no copies left
- AlreadyRentedError: An open rental exists for the pair
- AlreadyReturnedError: The rental is already closed
- ConflictError: A uniqueness rule was violated
- TransactionFailedError: Infrastructure write failure, nothing was applied

Invariants:
    - All errors inherit from VidlyError
    - Business-rule errors are terminal; only TransactionFailedError is retryable
    - A TransactionFailedError guarantees the stores are unchanged
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class VidlyError(Exception):
    """Base exception for all Vidly errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    code = "VIDLY_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(VidlyError):
    """Resource not found.

    Raised when:
    - Returning a rental that was never checked out
    - Adjusting stock of a movie that doesn't exist
    """

    code = "NOT_FOUND"

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        super().__init__(
            message,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidReferenceError(VidlyError):
    """A request references a record that does not resolve."""

    code = "INVALID_REFERENCE"

    def __init__(self, message: str, field_name: str, value: str) -> None:
        super().__init__(message, details={"field": field_name, "value": value})
        self.field_name = field_name
        self.value = value


class OutOfStockError(VidlyError):
    """Movie has no copies left to rent."""

    code = "OUT_OF_STOCK"

    def __init__(self, movie_id: str) -> None:
        super().__init__("Movie not in stock.", details={"movie_id": movie_id})
        self.movie_id = movie_id


class AlreadyRentedError(VidlyError):
    """An open rental already exists for this customer and movie."""

    code = "ALREADY_RENTED"

    def __init__(self, customer_id: str, movie_id: str, rental_id: str) -> None:
        super().__init__(
            "Rental already processed.",
            details={"customer_id": customer_id, "movie_id": movie_id, "rental_id": rental_id},
        )
        self.rental_id = rental_id


class AlreadyReturnedError(VidlyError):
    """The rental has already been returned."""

    code = "ALREADY_RETURNED"

    def __init__(self, rental_id: str) -> None:
        super().__init__("Return already processed.", details={"rental_id": rental_id})
        self.rental_id = rental_id


class ConflictError(VidlyError):
    """A uniqueness rule was violated (e.g. email already registered)."""

    code = "CONFLICT"


class TransactionFailedError(VidlyError):
    """Transaction failed and was rolled back.

    Raised when:
    - SQLite reports an error inside a unit of work
    - The database stays locked past the busy timeout
    - The transaction exceeds its deadline

    Safe to retry: no write from the failed transaction is visible.
    """

    code = "TRANSACTION_FAILED"

    def __init__(self, message: str = "Something failed.", cause: Optional[str] = None) -> None:
        super().__init__(message, details={"cause": cause})
        self.cause = cause
