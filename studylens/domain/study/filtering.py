from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, Iterable, List, Optional, Sequence

from studylens.domain.schemas.study import AnalysisRecord, Material, MaterialType, TopicGroup
from studylens.domain.study.collation import locale_sorted


def _contains(haystack: str, needle: str) -> bool:
    return needle in (haystack or "").lower()


def _query_hits(needle: str, text: str, names: Iterable[str]) -> bool:
    if _contains(text, needle):
        return True
    return any(_contains(name, needle) for name in names)


def record_matches(record: AnalysisRecord, query: str, selected_topics: AbstractSet[str]) -> bool:
    """Page-view predicate: query match AND topic match."""
    needle = (query or "").lower()
    matches_query = not needle or _query_hits(
        needle, record.extractedText, [*record.majorTopics, *record.keyConcepts]
    )
    matches_topics = not selected_topics or any(
        topic in selected_topics for topic in record.majorTopics
    )
    return matches_query and matches_topics


def group_matches(group: TopicGroup, query: str, selected_topics: AbstractSet[str]) -> bool:
    """Topic-view predicate: query match AND topic match."""
    needle = (query or "").lower()
    matches_query = not needle or _query_hits(
        needle, group.mergedText, [group.topic, *group.keyConcepts]
    )
    matches_topics = not selected_topics or group.topic in selected_topics
    return matches_query and matches_topics


def filter_records(
    records: Sequence[AnalysisRecord], query: str = "", selected_topics: AbstractSet[str] = frozenset()
) -> List[AnalysisRecord]:
    return [record for record in records if record_matches(record, query, selected_topics)]


def filter_topic_groups(
    groups: Sequence[TopicGroup], query: str = "", selected_topics: AbstractSet[str] = frozenset()
) -> List[TopicGroup]:
    return [group for group in groups if group_matches(group, query, selected_topics)]


def toggle_topic(selected: AbstractSet[str], topic: str) -> FrozenSet[str]:
    """Returns a new selection with `topic` flipped; `selected` is left untouched."""
    if topic in selected:
        return frozenset(t for t in selected if t != topic)
    return frozenset(selected) | {topic}


def all_topics(records: Iterable[AnalysisRecord]) -> List[str]:
    """Distinct topic names across the whole collection, for the filter chips."""
    distinct: Dict[str, None] = {}
    for record in records:
        for topic in record.majorTopics:
            distinct.setdefault(topic, None)
    return locale_sorted(distinct)


def restrict_to_content(
    records: Iterable[AnalysisRecord], materials: Iterable[Material]
) -> List[AnalysisRecord]:
    """
    Keeps records whose material is known and holds study content. Learning
    objectives and reference uploads are analysed too but never browsed.
    """
    content_ids = {
        material.id for material in materials if material.materialType == MaterialType.CONTENT
    }
    return [record for record in records if record.materialId in content_ids]


@dataclass(frozen=True)
class StudyFilter:
    query: str = ""
    selected_topics: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_request(cls, query: Optional[str], topics: Optional[Iterable[str]]) -> "StudyFilter":
        cleaned = frozenset(t for t in (topics or []) if t)
        return cls(query=query or "", selected_topics=cleaned)

    @property
    def is_active(self) -> bool:
        return bool(self.query) or bool(self.selected_topics)

    def toggle(self, topic: str) -> "StudyFilter":
        return StudyFilter(query=self.query, selected_topics=toggle_topic(self.selected_topics, topic))

    def with_query(self, query: str) -> "StudyFilter":
        return StudyFilter(query=query or "", selected_topics=self.selected_topics)

    def cleared(self) -> "StudyFilter":
        return StudyFilter()

    def apply_to_records(self, records: Sequence[AnalysisRecord]) -> List[AnalysisRecord]:
        return filter_records(records, self.query, self.selected_topics)

    def apply_to_groups(self, groups: Sequence[TopicGroup]) -> List[TopicGroup]:
        return filter_topic_groups(groups, self.query, self.selected_topics)
