"""
Catalog repositories: genres and movies.

Movies embed a denormalized copy of their genre (id + name). Stock is
adjusted only through MovieRepository.adjust_stock(), whose conditional
UPDATE keeps number_in_stock from going negative even when two writers
race on the last copy.
"""

from __future__ import annotations

import logging
import sqlite3

from ..errors import NotFoundError, OutOfStockError
from ..models import Genre, GenreRef, Movie
from .rows import new_id, row_to_genre, row_to_movie

logger = logging.getLogger(__name__)


class GenreRepository:
    """Genre CRUD."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_all(self) -> list[Genre]:
        cursor = self.conn.execute("SELECT * FROM genres ORDER BY name")
        return [row_to_genre(row) for row in cursor.fetchall()]

    def get(self, genre_id: str) -> Genre | None:
        row = self.conn.execute("SELECT * FROM genres WHERE id = ?", (genre_id,)).fetchone()
        return row_to_genre(row) if row else None

    def create(self, name: str, genre_id: str | None = None) -> Genre:
        genre = Genre(id=genre_id or new_id(), name=name)
        self.conn.execute("INSERT INTO genres (id, name) VALUES (?, ?)", (genre.id, genre.name))
        return genre

    def update(self, genre_id: str, name: str) -> Genre | None:
        cursor = self.conn.execute("UPDATE genres SET name = ? WHERE id = ?", (name, genre_id))
        if cursor.rowcount == 0:
            return None
        return Genre(id=genre_id, name=name)

    def delete(self, genre_id: str) -> Genre | None:
        genre = self.get(genre_id)
        if genre is None:
            return None
        self.conn.execute("DELETE FROM genres WHERE id = ?", (genre_id,))
        return genre


class MovieRepository:
    """Movie CRUD and stock adjustment."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_all(self) -> list[Movie]:
        cursor = self.conn.execute("SELECT * FROM movies ORDER BY title")
        return [row_to_movie(row) for row in cursor.fetchall()]

    def get(self, movie_id: str) -> Movie | None:
        """Find a movie by ID.

        Returns:
            Movie or None if not found
        """
        row = self.conn.execute("SELECT * FROM movies WHERE id = ?", (movie_id,)).fetchone()
        return row_to_movie(row) if row else None

    def create(
        self,
        title: str,
        genre: Genre | GenreRef,
        number_in_stock: int,
        daily_rental_rate: float,
        movie_id: str | None = None,
    ) -> Movie:
        movie = Movie(
            id=movie_id or new_id(),
            title=title,
            genre=GenreRef(id=genre.id, name=genre.name),
            number_in_stock=number_in_stock,
            daily_rental_rate=daily_rental_rate,
        )
        self.conn.execute(
            """
            INSERT INTO movies (id, title, genre_id, genre_name, number_in_stock, daily_rental_rate)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                movie.id,
                movie.title,
                movie.genre.id,
                movie.genre.name,
                movie.number_in_stock,
                movie.daily_rental_rate,
            ),
        )
        return movie

    def update(
        self,
        movie_id: str,
        title: str,
        genre: Genre | GenreRef,
        number_in_stock: int,
        daily_rental_rate: float,
    ) -> Movie | None:
        """Replace a movie's fields, refreshing the embedded genre.

        Returns:
            Updated Movie or None if not found
        """
        cursor = self.conn.execute(
            """
            UPDATE movies
            SET title = ?, genre_id = ?, genre_name = ?, number_in_stock = ?, daily_rental_rate = ?
            WHERE id = ?
            """,
            (title, genre.id, genre.name, number_in_stock, daily_rental_rate, movie_id),
        )
        if cursor.rowcount == 0:
            return None
        return Movie(
            id=movie_id,
            title=title,
            genre=GenreRef(id=genre.id, name=genre.name),
            number_in_stock=number_in_stock,
            daily_rental_rate=daily_rental_rate,
        )

    def delete(self, movie_id: str) -> Movie | None:
        movie = self.get(movie_id)
        if movie is None:
            return None
        self.conn.execute("DELETE FROM movies WHERE id = ?", (movie_id,))
        return movie

    def adjust_stock(self, movie_id: str, delta: int) -> int:
        """Add delta to a movie's stock.

        The update only applies when the result stays non-negative.

        Args:
            movie_id: Movie identifier
            delta: Signed change in copies

        Returns:
            The new stock level

        Raises:
            NotFoundError: If the movie doesn't exist
            OutOfStockError: If the adjustment would make stock negative
        """
        cursor = self.conn.execute(
            """
            UPDATE movies SET number_in_stock = number_in_stock + ?
            WHERE id = ? AND number_in_stock + ? >= 0
            """,
            (delta, movie_id, delta),
        )
        movie = self.get(movie_id)
        if cursor.rowcount > 0 and movie is not None:
            return movie.number_in_stock

        if movie is None:
            raise NotFoundError(
                f"The movie with the given ID was not found: {movie_id}",
                resource_type="movie",
                resource_id=movie_id,
            )
        raise OutOfStockError(movie_id)
