"""
Clipshare Pipeline Stages — declarative, storage-agnostic read-view steps.

A pipeline is an ordered tuple of immutable stage records over one named
collection. Stages only describe work; ``executor.PaginationExecutor`` is
the one place that turns them into queries.

  match    → equality filters on base columns
  search   → case-insensitive substring, OR-combined over text fields
  sort     → single key, asc/desc
  join     → owner profile | child count | id expansion
  project  → drop fields from the output
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Tuple, Union


@dataclass(frozen=True)
class MatchStage:
    op: ClassVar[str] = "match"
    filters: Tuple[Tuple[str, Any], ...] = ()


@dataclass(frozen=True)
class SearchStage:
    op: ClassVar[str] = "search"
    query: str = ""
    fields: Tuple[str, ...] = ("title", "body")


@dataclass(frozen=True)
class SortStage:
    op: ClassVar[str] = "sort"
    field: str = "created_at"
    descending: bool = True


@dataclass(frozen=True)
class JoinProfileStage:
    """Replace an actor reference with a reduced actor projection."""
    op: ClassVar[str] = "join_profile"
    local_field: str = "owner_id"
    as_field: str = "owner"
    extra_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class JoinCountStage:
    """Attach the cardinality of child records; the records themselves are never emitted."""
    op: ClassVar[str] = "join_count"
    collection: str = ""
    foreign_field: str = ""
    count_as: str = ""
    local_field: str = "id"
    filters: Tuple[Tuple[str, Any], ...] = ()


@dataclass(frozen=True)
class ExpandIdsStage:
    """Resolve a foreign id (or ordered list of ids) into full records."""
    op: ClassVar[str] = "expand_ids"
    field: str = ""
    collection: str = ""
    as_field: str = ""
    nested: Tuple["JoinStage", ...] = ()


@dataclass(frozen=True)
class ProjectStage:
    op: ClassVar[str] = "project"
    exclude: Tuple[str, ...] = ()


JoinStage = Union[JoinProfileStage, JoinCountStage, ExpandIdsStage]
Stage = Union[MatchStage, SearchStage, SortStage, JoinProfileStage, JoinCountStage, ExpandIdsStage, ProjectStage]

JOIN_STAGES = (JoinProfileStage, JoinCountStage, ExpandIdsStage)
QUERY_STAGES = (MatchStage, SearchStage, SortStage)


@dataclass(frozen=True)
class Pipeline:
    collection: str
    stages: Tuple[Stage, ...] = field(default_factory=tuple)

    @property
    def query_stages(self) -> Tuple[Stage, ...]:
        return tuple(s for s in self.stages if isinstance(s, QUERY_STAGES))

    @property
    def post_stages(self) -> Tuple[Stage, ...]:
        """Stages applied to materialized rows: joins in order, then projection."""
        return tuple(s for s in self.stages if not isinstance(s, QUERY_STAGES))

    def describe(self) -> list:
        return [s.op for s in self.stages]
