"""Domain operations for the movie catalog."""

import uuid as uuid_pkg

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.premium import ALL_CATEGORIES
from app.domain.base_operations import BaseOperations
from app.models.movie import Movie


class MovieOperations(BaseOperations[Movie]):
    """CRUD operations for Movie model. Deletion is always soft."""

    def __init__(self) -> None:
        super().__init__(Movie)

    async def list_active(
        self,
        db: AsyncSession,
        category: str | None = None,
    ) -> list[Movie]:
        """Active movies, newest first, optionally restricted to one genre tag."""
        statement = (
            select(Movie)
            .where(Movie.is_active.is_(True))  # type: ignore[attr-defined]
            .order_by(Movie.created_at.desc())  # type: ignore[attr-defined]
        )
        result = await db.execute(statement)
        movies = list(result.scalars().all())

        if not category or category.lower() == ALL_CATEGORIES:
            return movies
        wanted = category.lower()
        return [m for m in movies if wanted in (g.lower() for g in m.genres or [])]

    async def get_active(self, db: AsyncSession, movie_id: uuid_pkg.UUID) -> Movie | None:
        statement = select(Movie).where(
            Movie.id == movie_id,
            Movie.is_active.is_(True),  # type: ignore[attr-defined]
        )
        result = await db.execute(statement)
        return result.scalar_one_or_none()

    async def soft_delete(self, db: AsyncSession, movie_id: uuid_pkg.UUID) -> bool:
        """Hide a movie from listings. Returns False if it does not exist."""
        movie = await self.get(db, movie_id)
        if not movie:
            return False
        movie.is_active = False
        db.add(movie)
        await db.flush()
        return True

    async def increment_views(self, db: AsyncSession, movie_id: uuid_pkg.UUID) -> None:
        """Add one to the view counter in SQL so concurrent watches are not lost."""
        statement = (
            update(Movie)
            .where(Movie.id == movie_id)  # type: ignore[arg-type]
            .values(view_count=Movie.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        await db.execute(statement)

    async def count_active(self, db: AsyncSession) -> int:
        statement = (
            select(func.count())
            .select_from(Movie)
            .where(Movie.is_active.is_(True))  # type: ignore[attr-defined]
        )
        result = await db.execute(statement)
        return int(result.scalar() or 0)


movie_ops = MovieOperations()
