"""
Clipshare Pipeline Builder — composes read-view options into a Pipeline.

Options may be given in any order; ``build()`` always emits

    base filters → search → sort → joins (request order) → projection

Sorting has to run before joins because a join may replace the field it
would sort on with a scalar summary. Filters and search run first so joins
only ever see the rows that survive them.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from clipshare.core.errors import InvalidInput
from clipshare.schemas.schemas import FeedQuery
from clipshare.services.pipeline.stages import (
    JOIN_STAGES,
    ExpandIdsStage,
    JoinCountStage,
    JoinProfileStage,
    JoinStage,
    MatchStage,
    Pipeline,
    ProjectStage,
    SearchStage,
    SortStage,
)
from clipshare.services.store.repository import parse_id

DEFAULT_SORT_FIELD = "created_at"

# Client-facing sort keys accepted alongside column names
SORT_ALIASES = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "views": "view_count",
    "viewCount": "view_count",
    "duration": "duration_seconds",
}

_ASCENDING = {"asc", "ascending", "1"}
_DESCENDING = {"desc", "descending", "-1"}


def parse_direction(direction: Union[str, int, None]) -> bool:
    """Return True for descending. ``None`` means the default (descending)."""
    if direction is None:
        return True
    value = str(direction).strip().lower()
    if value in _ASCENDING:
        return False
    if value in _DESCENDING:
        return True
    raise InvalidInput(f"Invalid sort direction '{direction}', expected 'asc' or 'desc'")


class PipelineBuilder:
    """Fluent builder over the closed set of read-view options."""

    def __init__(self, collection: str):
        self.collection = collection
        self._filters: Dict[str, Any] = {}
        self._search: Optional[SearchStage] = None
        self._sort: Optional[SortStage] = None
        self._joins: List[JoinStage] = []
        self._exclude: List[str] = []

    # ── Filters ──────────────────────────────────────────────────────────

    def where(self, **filters: Any) -> "PipelineBuilder":
        self._filters.update(filters)
        return self

    def published_only(self, enabled: bool = True) -> "PipelineBuilder":
        if enabled:
            self._filters["published"] = True
        return self

    def owned_by(self, owner_id: Any) -> "PipelineBuilder":
        if owner_id is not None:
            self._filters["owner_id"] = owner_id
        return self

    def search(self, query: Optional[str], fields: Sequence[str] = ("title", "body")) -> "PipelineBuilder":
        if query and query.strip():
            self._search = SearchStage(query=query.strip(), fields=tuple(fields))
        return self

    # ── Ordering ─────────────────────────────────────────────────────────

    def sort_by(self, field: Optional[str] = None, direction: Union[str, int, None] = None) -> "PipelineBuilder":
        field = SORT_ALIASES.get(field, field) if field else DEFAULT_SORT_FIELD
        self._sort = SortStage(field=field, descending=parse_direction(direction))
        return self

    # ── Joins ────────────────────────────────────────────────────────────

    def join_owner_profile(
        self,
        local_field: str = "owner_id",
        as_field: str = "owner",
        extra_fields: Iterable[str] = (),
    ) -> "PipelineBuilder":
        self._joins.append(JoinProfileStage(
            local_field=local_field, as_field=as_field, extra_fields=tuple(extra_fields),
        ))
        return self

    def join_child_count(
        self,
        collection: str,
        foreign_field: str,
        count_as: str,
        local_field: str = "id",
        where: Optional[Dict[str, Any]] = None,
    ) -> "PipelineBuilder":
        self._joins.append(JoinCountStage(
            collection=collection,
            foreign_field=foreign_field,
            count_as=count_as,
            local_field=local_field,
            filters=tuple((where or {}).items()),
        ))
        return self

    def expand_ids(
        self,
        field: str,
        collection: str,
        as_field: Optional[str] = None,
        nested: Union[Pipeline, Sequence[JoinStage], None] = None,
    ) -> "PipelineBuilder":
        if isinstance(nested, Pipeline):
            nested = nested.post_stages
        nested = tuple(nested or ())
        for stage in nested:
            if not isinstance(stage, JOIN_STAGES):
                raise InvalidInput(f"Only join stages can be nested under an id expansion, got '{stage.op}'")
        self._joins.append(ExpandIdsStage(
            field=field, collection=collection, as_field=as_field or field, nested=nested,
        ))
        return self

    # ── Projection ───────────────────────────────────────────────────────

    def exclude(self, *fields: str) -> "PipelineBuilder":
        self._exclude.extend(fields)
        return self

    # ── Output ───────────────────────────────────────────────────────────

    def build(self) -> Pipeline:
        stages: List[Any] = []
        if self._filters:
            stages.append(MatchStage(filters=tuple(self._filters.items())))
        if self._search is not None:
            stages.append(self._search)
        stages.append(self._sort or SortStage(field=DEFAULT_SORT_FIELD, descending=True))
        stages.extend(self._joins)
        if self._exclude:
            stages.append(ProjectStage(exclude=tuple(self._exclude)))
        return Pipeline(collection=self.collection, stages=tuple(stages))

    @classmethod
    def from_feed_query(cls, collection: str, feed: FeedQuery) -> "PipelineBuilder":
        """Map a feed request 1:1 onto builder options; joins are left to the caller."""
        builder = cls(collection).published_only(feed.published_only)
        if feed.owner_id:
            builder.owned_by(parse_id(feed.owner_id, "user"))
        return builder.search(feed.query).sort_by(feed.sort_by, feed.sort_direction)

