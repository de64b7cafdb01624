"""Customer routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import Principal, require_admin, require_user
from ..store import Database
from .deps import get_database
from .schemas import CustomerRequest, CustomerResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])

NOT_FOUND = "The customer with the given ID was not found."


@router.get("", response_model=list[CustomerResponse])
async def list_customers(db: Database = Depends(get_database)):
    """List all customers sorted by name."""
    with db.session() as uow:
        return uow.customers.list_all()


@router.post("", response_model=CustomerResponse)
async def create_customer(
    request: CustomerRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    with db.transaction() as uow:
        customer = uow.customers.create(request.name, request.phone, request.is_gold)
    logger.info("Created customer", extra={"customer_id": customer.id, "actor": principal.user_id})
    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    request: CustomerRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    """
    Replace a customer's fields.

    Existing rentals keep the name and phone captured at checkout.
    """
    with db.transaction() as uow:
        customer = uow.customers.update(customer_id, request.name, request.phone, request.is_gold)
    if customer is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return customer


@router.delete("/{customer_id}", response_model=CustomerResponse)
async def delete_customer(
    customer_id: str,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_admin),
):
    with db.transaction() as uow:
        customer = uow.customers.delete(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    logger.info("Deleted customer", extra={"customer_id": customer_id, "actor": principal.user_id})
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(customer_id: str, db: Database = Depends(get_database)):
    with db.session() as uow:
        customer = uow.customers.get(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return customer
