"""
Rental and return routes.

POST /rentals and POST /returns delegate to the RentalLifecycleManager;
its errors are mapped to HTTP responses by the app's exception handlers:
- 400: INVALID_REFERENCE, OUT_OF_STOCK, ALREADY_RENTED, ALREADY_RETURNED
- 404: NOT_FOUND
- 500: TRANSACTION_FAILED (nothing was applied; safe to retry)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import Principal, require_user
from ..rentals import RentalLifecycleManager
from ..store import Database
from .deps import get_database, get_lifecycle
from .schemas import ErrorResponse, RentalRequest, RentalResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rentals", tags=["Rentals"])
returns_router = APIRouter(prefix="/returns", tags=["Rentals"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=list[RentalResponse])
async def list_rentals(db: Database = Depends(get_database)):
    """List all rentals, most recent checkout first."""
    with db.session() as uow:
        return uow.rentals.list_all()


@router.post("", response_model=RentalResponse, responses=_ERROR_RESPONSES)
async def checkout(
    request: RentalRequest,
    lifecycle: RentalLifecycleManager = Depends(get_lifecycle),
    principal: Principal = Depends(require_user),
):
    """
    Check out a movie for a customer.

    Creates an open rental and takes one copy out of stock atomically.
    A previous, already returned rental of the same movie by the same
    customer is replaced.
    """
    logger.debug(
        "Checkout requested",
        extra={"customer_id": request.customer_id, "movie_id": request.movie_id, "actor": principal.user_id},
    )
    return await lifecycle.checkout(request.customer_id, request.movie_id)


@router.get("/{rental_id}", response_model=RentalResponse)
async def get_rental(rental_id: str, db: Database = Depends(get_database)):
    with db.session() as uow:
        rental = uow.rentals.get(rental_id)
    if rental is None:
        raise HTTPException(status_code=404, detail="The rental with the given ID was not found.")
    return rental


@returns_router.post(
    "",
    response_model=RentalResponse,
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
async def return_rental(
    request: RentalRequest,
    lifecycle: RentalLifecycleManager = Depends(get_lifecycle),
    principal: Principal = Depends(require_user),
):
    """
    Return a rented movie.

    Closes the open rental, computes the fee and puts the copy back in stock.
    """
    logger.debug(
        "Return requested",
        extra={"customer_id": request.customer_id, "movie_id": request.movie_id, "actor": principal.user_id},
    )
    return await lifecycle.return_rental(request.customer_id, request.movie_id)
