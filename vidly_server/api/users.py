"""User registration, profile and login routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import PlainTextResponse

from ..auth import (
    TOKEN_HEADER,
    Principal,
    TokenService,
    get_token_service,
    hash_password,
    require_user,
    verify_password,
)
from ..config import Settings
from ..errors import ConflictError
from ..store import Database
from .deps import get_database, get_settings
from .schemas import LoginRequest, UserCreateRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])
auth_router = APIRouter(prefix="/auth", tags=["Users"])

INVALID_CREDENTIALS = "Invalid email or password."


@router.get("/me", response_model=UserResponse)
async def get_me(
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    """Current user's profile."""
    with db.session() as uow:
        user = uow.users.get(principal.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="The user with the given ID was not found.")
    return user


@router.post("", response_model=UserResponse)
async def register(
    request: UserCreateRequest,
    response: Response,
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Register a new user.

    The response carries a ready-to-use token in the x-auth-token header.
    """
    password_hash = hash_password(request.password, rounds=settings.bcrypt_rounds)

    with db.transaction() as uow:
        if uow.users.find_by_email(request.email) is not None:
            raise ConflictError("User already registered.", details={"email": request.email})
        user = uow.users.create(request.name, request.email, password_hash)

    logger.info("Registered user", extra={"user_id": user.id})
    response.headers[TOKEN_HEADER] = tokens.issue(user)
    return user


@auth_router.post("", response_class=PlainTextResponse)
async def login(
    request: LoginRequest,
    db: Database = Depends(get_database),
    tokens: TokenService = Depends(get_token_service),
):
    """Exchange email and password for a token."""
    with db.session() as uow:
        user = uow.users.find_by_email(request.email)

    if user is None or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=400, detail=INVALID_CREDENTIALS)

    return PlainTextResponse(tokens.issue(user))
