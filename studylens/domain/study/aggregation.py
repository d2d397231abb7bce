from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from studylens.domain.schemas.study import AnalysisRecord, TopicGroup
from studylens.domain.study.collation import collation_key

TEXT_SEPARATOR = "\n\n"


@dataclass
class _TopicAccumulator:
    """Mutable scratch state for one topic while records are being scanned."""

    topic: str
    merged_text: str = ""
    key_concepts: Dict[str, None] = field(default_factory=dict)
    definitions: Dict[str, str] = field(default_factory=dict)
    formulas: Dict[str, None] = field(default_factory=dict)
    visual_elements: List[str] = field(default_factory=list)
    page_references: List[int] = field(default_factory=list)
    material_ids: Dict[str, None] = field(default_factory=dict)
    is_foundational: bool = False

    def absorb(self, record: AnalysisRecord) -> None:
        text = record.extractedText
        if text:
            self.merged_text = f"{self.merged_text}{TEXT_SEPARATOR}{text}" if self.merged_text else text

        for concept in record.keyConcepts:
            self.key_concepts.setdefault(concept, None)

        self.definitions.update(record.definitions)

        for formula in record.formulas:
            self.formulas.setdefault(formula, None)

        if record.visualElements:
            self.visual_elements.extend(record.visualElements)

        if record.materialId is not None:
            self.material_ids.setdefault(record.materialId, None)

        page = record.pageNumber
        if page is not None and page not in self.page_references:
            self.page_references.append(page)

        if record.isFoundational:
            self.is_foundational = True

    def freeze(self) -> TopicGroup:
        return TopicGroup(
            topic=self.topic,
            mergedText=self.merged_text,
            keyConcepts=list(self.key_concepts),
            definitions=dict(self.definitions),
            formulas=list(self.formulas),
            visualElements=list(self.visual_elements),
            pageReferences=list(self.page_references),
            isFoundational=self.is_foundational,
            materialIds=list(self.material_ids),
        )


def topic_group_sort_key(group: TopicGroup):
    return (0 if group.isFoundational else 1, collation_key(group.topic))


def sort_topic_groups(groups: Iterable[TopicGroup]) -> List[TopicGroup]:
    """Foundational groups first, then alphabetical by topic name."""
    return sorted(groups, key=topic_group_sort_key)


def aggregate_by_topic(records: Sequence[AnalysisRecord]) -> List[TopicGroup]:
    """
    Group per-page analysis records into one merged view per topic.

    A record listing N topics contributes to N groups. Records without topics
    contribute to none: they remain reachable only through the page view.
    Input records are never mutated.
    """
    accumulators: Dict[str, _TopicAccumulator] = {}

    for record in records:
        for topic in record.majorTopics:
            accumulator = accumulators.get(topic)
            if accumulator is None:
                accumulator = _TopicAccumulator(topic=topic)
                accumulators[topic] = accumulator
            accumulator.absorb(record)

    return sort_topic_groups(acc.freeze() for acc in accumulators.values())
