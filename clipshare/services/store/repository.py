"""
Clipshare Store — generic async repository over one ORM model.

Backs both the Relationship Store (edges) and the Content Store (content
items, playlists, comments, actors). Only equality filters are supported;
business invariants live in the services above this layer.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import Base, is_unique_violation, store_errors
from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def parse_id(raw: Any, label: str = "entity") -> uuid.UUID:
    """Parse an untrusted id, raising ``InvalidInput`` when malformed."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {label} ID")


class Repository(Generic[ModelT]):
    """Create / fetch / delete / equality-query for a single model."""

    def __init__(self, model: Type[ModelT], session: AsyncSession, label: Optional[str] = None):
        self.model = model
        self.session = session
        self.label = label or model.__name__

    # ── Helpers ──────────────────────────────────────────────────────────

    def _column(self, name: str):
        try:
            return self.model.__table__.c[name]
        except KeyError:
            raise InvalidInput(f"Unknown field '{name}' for {self.label}")

    def _where(self, filters: Dict[str, Any]) -> List[Any]:
        return [self._column(name) == value for name, value in filters.items()]

    def _check_required(self, fields: Dict[str, Any]) -> None:
        for column in self.model.__table__.c:
            if column.nullable or column.primary_key or column.default is not None:
                continue
            if fields.get(column.key) is None:
                raise InvalidInput(f"{self.label} requires '{column.key}'")

    # ── Create ───────────────────────────────────────────────────────────

    async def create(self, **fields: Any) -> ModelT:
        """Insert a row.

        Unique-constraint violations become ``InvalidOperation``; any other
        constraint failure (a dangling foreign key) becomes ``InvalidInput``.
        """
        self._check_required(fields)
        entity = self.model(**fields)
        try:
            async with store_errors(f"create {self.label}"):
                async with self.session.begin_nested():
                    self.session.add(entity)
                    await self.session.flush()
        except IntegrityError as e:
            logger.info(f"{self.label} create rejected by constraint: {e.orig}")
            if is_unique_violation(e):
                raise InvalidOperation(f"{self.label} already exists")
            raise InvalidInput(f"{self.label} references a record that does not exist")
        return entity

    # ── Read ─────────────────────────────────────────────────────────────

    async def get(self, entity_id: Any) -> ModelT:
        entity_id = parse_id(entity_id, self.label.lower())
        async with store_errors(f"get {self.label}"):
            entity = await self.session.get(self.model, entity_id)
        if entity is None:
            raise NotFound(f"{self.label} not found")
        return entity

    async def exists(self, entity_id: uuid.UUID) -> bool:
        async with store_errors(f"exists {self.label}"):
            found = await self.session.scalar(
                select(self.model.id).where(self.model.id == entity_id)
            )
        return found is not None

    async def find(self, order_by: Optional[str] = None, **filters: Any) -> Sequence[ModelT]:
        query = select(self.model).where(*self._where(filters))
        if order_by:
            query = query.order_by(self._column(order_by))
        async with store_errors(f"find {self.label}"):
            result = await self.session.execute(query)
        return result.scalars().all()

    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        query = select(self.model).where(*self._where(filters)).limit(1)
        async with store_errors(f"find {self.label}"):
            return await self.session.scalar(query)

    async def count(self, **filters: Any) -> int:
        query = select(func.count()).select_from(self.model).where(*self._where(filters))
        async with store_errors(f"count {self.label}"):
            return await self.session.scalar(query) or 0

    # ── Delete ───────────────────────────────────────────────────────────

    async def delete(self, entity_id: Any) -> bool:
        """Delete by id. Returns False when the row was already gone."""
        entity_id = parse_id(entity_id, self.label.lower())
        return await self.delete_where(id=entity_id) > 0

    async def delete_where(self, **filters: Any) -> int:
        if not filters:
            raise InvalidInput(f"Refusing unfiltered delete on {self.label}")
        stmt = delete(self.model).where(*self._where(filters))
        async with store_errors(f"delete {self.label}"):
            result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def delete_in(self, field: str, values: Sequence[Any], **filters: Any) -> int:
        """Delete rows whose ``field`` is any of ``values`` (cascade helper)."""
        if not values:
            return 0
        stmt = delete(self.model).where(self._column(field).in_(list(values)), *self._where(filters))
        async with store_errors(f"delete {self.label}"):
            result = await self.session.execute(stmt)
        return result.rowcount or 0
