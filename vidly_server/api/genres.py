"""Genre routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import Principal, require_admin, require_user
from ..store import Database
from .deps import get_database
from .schemas import GenreRequest, GenreResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/genres", tags=["Genres"])

NOT_FOUND = "The genre with the given ID was not found."


@router.get("", response_model=list[GenreResponse])
async def list_genres(db: Database = Depends(get_database)):
    """List all genres sorted by name."""
    with db.session() as uow:
        return uow.genres.list_all()


@router.post("", response_model=GenreResponse)
async def create_genre(
    request: GenreRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    with db.transaction() as uow:
        genre = uow.genres.create(request.name)
    logger.info("Created genre", extra={"genre_id": genre.id, "actor": principal.user_id})
    return genre


@router.put("/{genre_id}", response_model=GenreResponse)
async def update_genre(
    genre_id: str,
    request: GenreRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    with db.transaction() as uow:
        genre = uow.genres.update(genre_id, request.name)
    if genre is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return genre


@router.delete("/{genre_id}", response_model=GenreResponse)
async def delete_genre(
    genre_id: str,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_admin),
):
    with db.transaction() as uow:
        genre = uow.genres.delete(genre_id)
    if genre is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    logger.info("Deleted genre", extra={"genre_id": genre_id, "actor": principal.user_id})
    return genre


@router.get("/{genre_id}", response_model=GenreResponse)
async def get_genre(genre_id: str, db: Database = Depends(get_database)):
    with db.session() as uow:
        genre = uow.genres.get(genre_id)
    if genre is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return genre
