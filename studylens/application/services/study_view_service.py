import hashlib
import json
import threading
from collections import OrderedDict
from typing import Iterable, List, Literal, Optional, Sequence

import structlog
from pydantic import BaseModel, Field

from studylens.core.settings import settings
from studylens.domain.schemas.study import AnalysisRecord, Material, TopicGroup
from studylens.domain.study.aggregation import aggregate_by_topic
from studylens.domain.study.filtering import StudyFilter, all_topics, restrict_to_content

logger = structlog.get_logger(__name__)

ViewMode = Literal["topics", "pages"]


class StudyView(BaseModel):
    mode: ViewMode = "topics"
    query: str = ""
    selected_topics: List[str] = Field(default_factory=list)
    all_topics: List[str] = Field(default_factory=list)
    topic_groups: List[TopicGroup] = Field(default_factory=list)
    pages: List[AnalysisRecord] = Field(default_factory=list)
    total_pages: int = 0
    total_topics: int = 0


def _revision(record: AnalysisRecord) -> list:
    # analyzed_at is bumped on every upsert, so (id, analyzed_at) pins a row's content
    if record.analyzedAt is not None:
        return [record.id, record.analyzedAt.isoformat()]
    return [record.id, record.model_dump(mode="json")]


def _fingerprint(
    records: Sequence[AnalysisRecord],
    materials: Optional[Sequence[Material]],
    view_filter: StudyFilter,
    mode: str,
) -> str:
    payload = {
        "records": [_revision(r) for r in records],
        "materials": None
        if materials is None
        else [[m.id, m.materialType.value] for m in materials],
        "query": view_filter.query,
        "topics": sorted(view_filter.selected_topics),
        "mode": mode,
    }
    raw = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class StudyViewService:
    """
    Builds the browsable study view of a collection: topic groups or raw
    pages, narrowed by the current search query and topic chips.

    Views are memoised on a fingerprint of the record revisions and filters,
    so repeated requests skip re-aggregation while a re-analysed page or a
    new filter produces a fresh view.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self._cache: "OrderedDict[str, StudyView]" = OrderedDict()
        self._max_entries = max(1, int(max_entries or settings.STUDY_VIEW_CACHE_MAX_ENTRIES))
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def build(
        self,
        records: Sequence[AnalysisRecord],
        materials: Optional[Sequence[Material]] = None,
        *,
        query: str = "",
        selected_topics: Iterable[str] = (),
        mode: Optional[ViewMode] = None,
    ) -> StudyView:
        view_mode = mode or settings.STUDY_VIEW_DEFAULT_MODE
        view_filter = StudyFilter.from_request(query, selected_topics)
        key = _fingerprint(records, materials, view_filter, view_mode)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self.hits += 1
                return cached

        view = self._compute(records, materials, view_filter, view_mode)

        with self._lock:
            self.misses += 1
            self._cache[key] = view
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)

        logger.debug(
            "study_view_built",
            mode=view_mode,
            pages=view.total_pages,
            topics=view.total_topics,
            filter_active=view_filter.is_active,
        )
        return view

    @staticmethod
    def _compute(
        records: Sequence[AnalysisRecord],
        materials: Optional[Sequence[Material]],
        view_filter: StudyFilter,
        mode: ViewMode,
    ) -> StudyView:
        visible = list(records) if materials is None else restrict_to_content(records, materials)
        groups = aggregate_by_topic(visible)
        topic_groups = view_filter.apply_to_groups(groups) if mode == "topics" else []
        pages = view_filter.apply_to_records(visible) if mode == "pages" else []
        return StudyView(
            mode=mode,
            query=view_filter.query,
            selected_topics=sorted(view_filter.selected_topics),
            all_topics=all_topics(visible),
            topic_groups=topic_groups,
            pages=pages,
            total_pages=len(visible),
            total_topics=len(groups),
        )

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
