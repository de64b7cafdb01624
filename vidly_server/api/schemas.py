"""
Request/response models for the HTTP API.

JSON uses camelCase names (numberInStock, dailyRentalRate, dateOut, ...).
Field bounds mirror the storage rules: names 5-50 characters, titles
5-255, stock and rates 0-255.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Requests
# =============================================================================


class GenreRequest(ApiModel):
    """Create or replace a genre."""

    name: str = Field(..., min_length=5, max_length=50)


class CustomerRequest(ApiModel):
    """Create or replace a customer."""

    name: str = Field(..., min_length=5, max_length=50)
    phone: str = Field(..., min_length=5, max_length=50)
    is_gold: bool = False


class MovieRequest(ApiModel):
    """Create or replace a movie."""

    title: str = Field(..., min_length=5, max_length=255)
    genre_id: str = Field(..., min_length=1, description="Genre ID")
    number_in_stock: int = Field(..., ge=0, le=255)
    daily_rental_rate: float = Field(..., ge=0, le=255)


class RentalRequest(ApiModel):
    """Checkout or return a movie for a customer."""

    customer_id: str = Field(..., min_length=1, description="Customer ID")
    movie_id: str = Field(..., min_length=1, description="Movie ID")


class UserCreateRequest(ApiModel):
    """Register a user."""

    name: str = Field(..., min_length=5, max_length=50)
    email: EmailStr = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=5, max_length=255)


class LoginRequest(ApiModel):
    """Exchange credentials for a token."""

    email: EmailStr = Field(..., min_length=5, max_length=255)
    password: str = Field(..., min_length=5, max_length=255)


# =============================================================================
# Responses
# =============================================================================


class GenreResponse(ApiModel):
    id: str
    name: str


class MovieResponse(ApiModel):
    id: str
    title: str
    genre: GenreResponse
    number_in_stock: int
    daily_rental_rate: float


class CustomerResponse(ApiModel):
    id: str
    name: str
    phone: str
    is_gold: bool


class UserResponse(ApiModel):
    """User without credentials."""

    id: str
    name: str
    email: str
    is_admin: bool


class CustomerSnapshotResponse(ApiModel):
    id: str
    name: str
    phone: str


class MovieSnapshotResponse(ApiModel):
    id: str
    title: str
    daily_rental_rate: float


class RentalResponse(ApiModel):
    id: str
    customer: CustomerSnapshotResponse
    movie: MovieSnapshotResponse
    date_out: datetime
    date_returned: datetime | None = None
    rental_fee: float | None = None


class ErrorResponse(BaseModel):
    detail: str
    code: str
