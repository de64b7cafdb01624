"""Movie routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..auth import Principal, require_admin, require_user
from ..errors import InvalidReferenceError
from ..store import Database, UnitOfWork
from .deps import get_database
from .schemas import MovieRequest, MovieResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/movies", tags=["Movies"])

NOT_FOUND = "The movie with the given ID was not found."


def _resolve_genre(uow: UnitOfWork, genre_id: str):
    genre = uow.genres.get(genre_id)
    if genre is None:
        raise InvalidReferenceError("Invalid genre.", "genreId", genre_id)
    return genre


@router.get("", response_model=list[MovieResponse])
async def list_movies(db: Database = Depends(get_database)):
    """List all movies sorted by title."""
    with db.session() as uow:
        return uow.movies.list_all()


@router.post("", response_model=MovieResponse)
async def create_movie(
    request: MovieRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    """
    Create a movie.

    The genre is embedded by value; an unknown genreId is rejected with 400.
    """
    with db.transaction() as uow:
        genre = _resolve_genre(uow, request.genre_id)
        movie = uow.movies.create(
            title=request.title,
            genre=genre,
            number_in_stock=request.number_in_stock,
            daily_rental_rate=request.daily_rental_rate,
        )
    logger.info("Created movie", extra={"movie_id": movie.id, "actor": principal.user_id})
    return movie


@router.put("/{movie_id}", response_model=MovieResponse)
async def update_movie(
    movie_id: str,
    request: MovieRequest,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_user),
):
    with db.transaction() as uow:
        genre = _resolve_genre(uow, request.genre_id)
        movie = uow.movies.update(
            movie_id,
            title=request.title,
            genre=genre,
            number_in_stock=request.number_in_stock,
            daily_rental_rate=request.daily_rental_rate,
        )
    if movie is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return movie


@router.delete("/{movie_id}", response_model=MovieResponse)
async def delete_movie(
    movie_id: str,
    db: Database = Depends(get_database),
    principal: Principal = Depends(require_admin),
):
    with db.transaction() as uow:
        movie = uow.movies.delete(movie_id)
    if movie is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    logger.info("Deleted movie", extra={"movie_id": movie_id, "actor": principal.user_id})
    return movie


@router.get("/{movie_id}", response_model=MovieResponse)
async def get_movie(movie_id: str, db: Database = Depends(get_database)):
    with db.session() as uow:
        movie = uow.movies.get(movie_id)
    if movie is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return movie
