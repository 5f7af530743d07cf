"""
Clipshare Pagination Executor — runs a Pipeline against the SQL store.

Query stages (match / search / sort) compile into a single ``SELECT`` over the
base collection. The executor counts the filtered set once, fetches the
``(page - 1) * limit`` window once, and then applies join stages to that
window only — one batched query per join stage, never one per row.
"""
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from clipshare.core.config import get_settings
from clipshare.core.database import Base, store_errors
from clipshare.core.errors import InvalidInput, NotFound
from clipshare.models.models import (
    Actor,
    Comment,
    ContentItem,
    Edge,
    Playlist,
    PlaylistItem,
)
from clipshare.schemas.schemas import PageResult
from clipshare.services.pipeline.stages import (
    ExpandIdsStage,
    JoinCountStage,
    JoinProfileStage,
    MatchStage,
    Pipeline,
    ProjectStage,
    SearchStage,
    SortStage,
)

logger = logging.getLogger(__name__)
settings = get_settings()

# Reduced actor projection attached by profile joins
PROFILE_FIELDS = ("id", "display_name", "handle", "avatar_url")


# ═══════════════════════════════════════════════════════════════════════
# Collection registry
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ListField:
    """A list-of-ids field materialized from a junction table, in position order."""
    model: Type[Base]
    parent_field: str
    value_field: str
    order_field: str


@dataclass(frozen=True)
class Collection:
    model: Type[Base]
    list_fields: Dict[str, ListField] = field(default_factory=dict)


COLLECTIONS: Dict[str, Collection] = {
    "actors": Collection(Actor),
    "content_items": Collection(ContentItem),
    "comments": Collection(Comment),
    "edges": Collection(Edge),
    "playlists": Collection(
        Playlist,
        list_fields={"video_ids": ListField(PlaylistItem, "playlist_id", "content_id", "position")},
    ),
    "playlist_items": Collection(PlaylistItem),
}


def get_collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise InvalidInput(f"Unknown collection '{name}'")


def _column(model: Type[Base], name: str):
    try:
        return model.__table__.c[name]
    except KeyError:
        raise InvalidInput(f"Unknown field '{name}' for {model.__tablename__}")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def row_to_dict(model: Type[Base], row: Any) -> Dict[str, Any]:
    doc = {}
    for column in model.__table__.c:
        value = getattr(row, column.key)
        doc[column.key] = value.value if isinstance(value, enum.Enum) else value
    return doc


# ═══════════════════════════════════════════════════════════════════════
# Executor
# ═══════════════════════════════════════════════════════════════════════

class PaginationExecutor:
    """Turns a Pipeline plus (page, limit) into a PageResult."""

    def __init__(self, max_limit: Optional[int] = None, default_limit: Optional[int] = None):
        self.max_limit = max_limit or settings.pagination_max_limit
        self.default_limit = default_limit or settings.pagination_default_limit

    # ── Compilation ──────────────────────────────────────────────────────

    def compile(self, pipeline: Pipeline) -> Tuple[Select, List[Any]]:
        """Return the filtered SELECT (unordered) and the ORDER BY clauses."""
        model = get_collection(pipeline.collection).model
        query = select(model)
        order_by: List[Any] = []

        for stage in pipeline.query_stages:
            if isinstance(stage, MatchStage):
                query = query.where(*[_column(model, name) == value for name, value in stage.filters])
            elif isinstance(stage, SearchStage):
                pattern = f"%{_escape_like(stage.query)}%"
                query = query.where(or_(*[
                    _column(model, name).ilike(pattern, escape="\\") for name in stage.fields
                ]))
            elif isinstance(stage, SortStage):
                order_by = self._order_clauses(model, stage)

        if not order_by:
            order_by = self._order_clauses(model, SortStage())
        return query, order_by

    @staticmethod
    def _order_clauses(model: Type[Base], stage: SortStage) -> List[Any]:
        keys = [stage.field]
        # Tiebreakers keep page boundaries deterministic across requests
        for tiebreak in ("created_at", "id"):
            if tiebreak not in keys and tiebreak in model.__table__.c:
                keys.append(tiebreak)
        columns = [_column(model, key) for key in keys]
        return [c.desc() if stage.descending else c.asc() for c in columns]

    def clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_limit
        if limit < 1:
            raise InvalidInput("limit must be at least 1")
        return min(limit, self.max_limit)

    # ── Execution ────────────────────────────────────────────────────────

    async def paginate(
        self,
        pipeline: Pipeline,
        db: AsyncSession,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> PageResult:
        """Run ``pipeline`` and return the requested page plus totals.

        Pages past the end come back empty with correct totals.
        """
        if page is None or page < 1:
            raise InvalidInput("page must be at least 1")
        limit = self.clamp_limit(limit)

        query, order_by = self.compile(pipeline)
        count_query = select(func.count()).select_from(query.subquery())

        async with store_errors(f"count {pipeline.collection}"):
            total = await db.scalar(count_query) or 0

        items: List[Dict[str, Any]] = []
        offset = (page - 1) * limit
        if offset < total:
            items = await self._fetch(pipeline, db, query.order_by(*order_by).offset(offset).limit(limit))

        logger.debug(f"{pipeline.collection} {pipeline.describe()} page={page} limit={limit} total={total}")
        return PageResult(items=items, total_items=total, page=page, limit=limit)

    async def fetch_one(self, pipeline: Pipeline, db: AsyncSession, not_found: str = "Not found") -> Dict[str, Any]:
        """Run a pipeline expected to match a single record (detail views)."""
        query, order_by = self.compile(pipeline)
        docs = await self._fetch(pipeline, db, query.order_by(*order_by).limit(1))
        if not docs:
            raise NotFound(not_found)
        return docs[0]

    async def _fetch(self, pipeline: Pipeline, db: AsyncSession, query: Select) -> List[Dict[str, Any]]:
        collection = get_collection(pipeline.collection)
        # Views must reflect bulk updates (view counts) made earlier in the session
        query = query.execution_options(populate_existing=True)
        async with store_errors(f"fetch {pipeline.collection}"):
            rows = (await db.execute(query)).scalars().all()
        docs = [row_to_dict(collection.model, row) for row in rows]
        await self._materialize_lists(collection, docs, db)
        return await self._apply_post_stages(pipeline.post_stages, docs, db)

    # ── Post-query stages ────────────────────────────────────────────────

    async def _apply_post_stages(self, stages: Sequence[Any], docs: List[Dict[str, Any]], db: AsyncSession) -> List[Dict[str, Any]]:
        if not docs:
            return docs
        for stage in stages:
            if isinstance(stage, JoinProfileStage):
                await self._join_profile(stage, docs, db)
            elif isinstance(stage, JoinCountStage):
                await self._join_count(stage, docs, db)
            elif isinstance(stage, ExpandIdsStage):
                await self._expand_ids(stage, docs, db)
            elif isinstance(stage, ProjectStage):
                for doc in docs:
                    for name in stage.exclude:
                        doc.pop(name, None)
        return docs

    async def _materialize_lists(self, collection: Collection, docs: List[Dict[str, Any]], db: AsyncSession) -> None:
        if not docs:
            return
        ids = [doc["id"] for doc in docs]
        for name, list_field in collection.list_fields.items():
            parent = _column(list_field.model, list_field.parent_field)
            value = _column(list_field.model, list_field.value_field)
            # Concurrent appends can share a position; creation order breaks the tie
            order = [list_field.order_field] + [
                key for key in ("created_at", "id") if key in list_field.model.__table__.c
            ]
            query = (
                select(parent, value)
                .where(parent.in_(ids))
                .order_by(parent, *[_column(list_field.model, key) for key in order])
            )
            async with store_errors(f"load {name}"):
                result = await db.execute(query)
            grouped: Dict[uuid.UUID, List[uuid.UUID]] = {i: [] for i in ids}
            for parent_id, value_id in result:
                grouped[parent_id].append(value_id)
            for doc in docs:
                doc[name] = grouped[doc["id"]]

    async def _join_profile(self, stage: JoinProfileStage, docs: List[Dict[str, Any]], db: AsyncSession) -> None:
        actor_ids = {doc.get(stage.local_field) for doc in docs} - {None}
        profiles: Dict[uuid.UUID, Dict[str, Any]] = {}
        if actor_ids:
            fields = PROFILE_FIELDS + tuple(f for f in stage.extra_fields if f not in PROFILE_FIELDS)
            query = select(*[_column(Actor, f) for f in fields]).where(Actor.id.in_(actor_ids))
            async with store_errors("join actor profiles"):
                result = await db.execute(query)
            for row in result:
                profile = dict(row._mapping)
                profiles[profile["id"]] = profile

        for doc in docs:
            ref = doc.pop(stage.local_field, None)
            doc[stage.as_field] = profiles.get(ref)

    async def _join_count(self, stage: JoinCountStage, docs: List[Dict[str, Any]], db: AsyncSession) -> None:
        model = get_collection(stage.collection).model
        fk = _column(model, stage.foreign_field)
        keys = {doc.get(stage.local_field) for doc in docs} - {None}
        counts: Dict[Any, int] = {}
        if keys:
            query = (
                select(fk, func.count())
                .where(fk.in_(keys), *[_column(model, name) == value for name, value in stage.filters])
                .group_by(fk)
            )
            async with store_errors(f"count {stage.collection}"):
                result = await db.execute(query)
            counts = {key: cnt for key, cnt in result}
        for doc in docs:
            doc[stage.count_as] = counts.get(doc.get(stage.local_field), 0)

    async def _expand_ids(self, stage: ExpandIdsStage, docs: List[Dict[str, Any]], db: AsyncSession) -> None:
        collection = get_collection(stage.collection)
        wanted: List[uuid.UUID] = []
        for doc in docs:
            value = doc.get(stage.field)
            if isinstance(value, list):
                wanted.extend(value)
            elif value is not None:
                wanted.append(value)

        by_id: Dict[uuid.UUID, Dict[str, Any]] = {}
        if wanted:
            model = collection.model
            async with store_errors(f"expand {stage.collection}"):
                rows = (await db.execute(
                    select(model).where(model.id.in_(set(wanted))).execution_options(populate_existing=True)
                )).scalars().all()
            expanded = [row_to_dict(model, row) for row in rows]
            await self._materialize_lists(collection, expanded, db)
            expanded = await self._apply_post_stages(stage.nested, expanded, db)
            by_id = {record["id"]: record for record in expanded}

        for doc in docs:
            value = doc.pop(stage.field, None)
            if isinstance(value, list):
                # Original order preserved; ids that no longer resolve are dropped
                doc[stage.as_field] = [by_id[i] for i in value if i in by_id]
            else:
                doc[stage.as_field] = by_id.get(value)


pagination_executor = PaginationExecutor()
