from datetime import datetime, timedelta, timezone

from studylens.application.services.study_view_service import StudyViewService
from studylens.domain.schemas.study import AnalysisRecord, Material, MaterialType


def _records() -> list[AnalysisRecord]:
    return [
        AnalysisRecord(id="r1", materialId="m1", majorTopics=["Cells"], extractedText="cell basics", pageNumber=1),
        AnalysisRecord(id="r2", materialId="m2", majorTopics=["Genetics"], extractedText="dna", pageNumber=2),
        AnalysisRecord(id="r3", materialId="m3", majorTopics=["Syllabus"], extractedText="goals", pageNumber=3),
    ]


def test_topics_view_groups_and_lists_all_topics() -> None:
    service = StudyViewService(max_entries=8)

    view = service.build(_records(), mode="topics")

    assert view.mode == "topics"
    assert [g.topic for g in view.topic_groups] == ["Cells", "Genetics", "Syllabus"]
    assert view.pages == []
    assert view.all_topics == ["Cells", "Genetics", "Syllabus"]
    assert view.total_pages == 3
    assert view.total_topics == 3


def test_pages_view_filters_records() -> None:
    service = StudyViewService(max_entries=8)

    view = service.build(_records(), mode="pages", query="DNA")

    assert view.topic_groups == []
    assert [r.id for r in view.pages] == ["r2"]
    assert view.query == "DNA"


def test_materials_restrict_view_to_content() -> None:
    service = StudyViewService(max_entries=8)
    materials = [
        Material(id="m1", materialType=MaterialType.CONTENT),
        Material(id="m2", materialType=MaterialType.CONTENT),
        Material(id="m3", materialType=MaterialType.LEARNING_OBJECTIVES),
    ]

    view = service.build(_records(), materials, mode="topics")

    assert [g.topic for g in view.topic_groups] == ["Cells", "Genetics"]
    assert view.all_topics == ["Cells", "Genetics"]
    assert view.total_pages == 2


def test_identical_inputs_are_served_from_cache() -> None:
    service = StudyViewService(max_entries=8)

    first = service.build(_records(), query="cell", selected_topics=["Cells"], mode="topics")
    second = service.build(_records(), query="cell", selected_topics=["Cells"], mode="topics")

    assert second is first
    assert service.hits == 1
    assert service.misses == 1


def test_topic_selection_order_does_not_change_the_cache_key() -> None:
    service = StudyViewService(max_entries=8)

    first = service.build(_records(), selected_topics=["Cells", "Genetics"], mode="topics")
    second = service.build(_records(), selected_topics=["Genetics", "Cells"], mode="topics")

    assert second is first


def test_changed_inputs_recompute() -> None:
    service = StudyViewService(max_entries=8)
    records = _records()

    first = service.build(records, mode="topics")
    with_query = service.build(records, query="dna", mode="topics")
    changed_records = records + [AnalysisRecord(id="r4", majorTopics=["Ecology"], pageNumber=4)]
    with_new_record = service.build(changed_records, mode="topics")

    assert with_query is not first
    assert [g.topic for g in with_query.topic_groups] == ["Genetics"]
    assert "Ecology" in with_new_record.all_topics
    assert service.misses == 3


def test_cache_is_bounded_and_evicts_least_recently_used() -> None:
    service = StudyViewService(max_entries=2)
    records = _records()

    service.build(records, query="a", mode="topics")
    service.build(records, query="b", mode="topics")
    service.build(records, query="a", mode="topics")
    service.build(records, query="c", mode="topics")

    assert len(service) == 2
    service.build(records, query="a", mode="topics")
    assert service.hits == 2
    service.build(records, query="b", mode="topics")
    assert service.misses == 4


def test_clear_empties_the_cache() -> None:
    service = StudyViewService(max_entries=8)
    service.build(_records(), mode="topics")

    service.clear()

    assert len(service) == 0


def test_analyzed_records_are_keyed_by_revision() -> None:
    service = StudyViewService(max_entries=8)
    analyzed_at = datetime(2024, 5, 1, tzinfo=timezone.utc)
    first_pass = [AnalysisRecord(id="r1", majorTopics=["Cells"], extractedText="v1", analyzedAt=analyzed_at)]
    same_revision = [AnalysisRecord(id="r1", majorTopics=["Cells"], extractedText="v1", analyzedAt=analyzed_at)]
    reanalyzed = [
        AnalysisRecord(
            id="r1", majorTopics=["Genetics"], extractedText="v2", analyzedAt=analyzed_at + timedelta(minutes=5)
        )
    ]

    first = service.build(first_pass, mode="topics")
    again = service.build(same_revision, mode="topics")
    fresh = service.build(reanalyzed, mode="topics")

    assert again is first
    assert [g.topic for g in fresh.topic_groups] == ["Genetics"]
    assert service.hits == 1
    assert service.misses == 2
