"""Generic async repository with soft-delete and pagination."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from all
    standard reads unless ``include_deleted=True``. Hard-delete is never exposed.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self, include_deleted: bool = False):
        """Return a SELECT excluding soft-deleted rows."""
        q = select(self.model)
        if not include_deleted and hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    async def _first(self, q) -> ModelT | None:
        result = await self._session.execute(q)
        return result.scalars().first()

    async def _all(self, q) -> list[ModelT]:
        result = await self._session.execute(q)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str, *, include_deleted: bool = False) -> ModelT | None:
        return await self._first(
            self._base_query(include_deleted).where(self.model.id == entity_id)
        )

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
        include_deleted: bool = False,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional column filters."""
        q = self._base_query(include_deleted)

        # Apply simple equality filters
        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)

        # Count
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        # Order + paginate
        col = getattr(self.model, order_by, None)
        if col is not None:
            q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.offset(offset).limit(limit)

        return await self._all(q), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        return await self.add(instance)

    async def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        await self._session.flush()  # populate id and defaults
        return instance

    async def save(self, instance: ModelT) -> ModelT:
        """Flush pending attribute changes on an already-loaded instance."""
        if hasattr(instance, "updated_at"):
            instance.updated_at = datetime.now(timezone.utc)
        await self._session.flush()
        return instance
