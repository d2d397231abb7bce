from studylens.domain.schemas.study import AnalysisRecord, Material, MaterialType
from studylens.domain.study.aggregation import aggregate_by_topic
from studylens.domain.study.filtering import (
    StudyFilter,
    all_topics,
    filter_records,
    filter_topic_groups,
    group_matches,
    record_matches,
    restrict_to_content,
    toggle_topic,
)


def _records() -> list[AnalysisRecord]:
    return [
        AnalysisRecord(
            id="r1",
            materialId="m1",
            majorTopics=["Cells"],
            keyConcepts=["Mitosis"],
            extractedText="The cell is the basic unit of life.",
            pageNumber=1,
        ),
        AnalysisRecord(
            id="r2",
            materialId="m2",
            majorTopics=["Genetics", "Cells"],
            keyConcepts=["Meiosis"],
            extractedText="Chromosomes pair up.",
            pageNumber=2,
        ),
        AnalysisRecord(
            id="r3",
            materialId="m3",
            majorTopics=["Ecology"],
            keyConcepts=["Food web"],
            extractedText="Energy flows through trophic levels.",
            pageNumber=3,
        ),
    ]


def test_empty_filter_selects_every_record_and_group() -> None:
    records = _records()
    groups = aggregate_by_topic(records)

    assert filter_records(records) == records
    assert filter_topic_groups(groups) == groups


def test_query_is_case_insensitive_across_text_topics_and_concepts() -> None:
    records = _records()

    assert [r.id for r in filter_records(records, "MITOSIS")] == ["r1"]
    assert [r.id for r in filter_records(records, "genetics")] == ["r2"]
    assert [r.id for r in filter_records(records, "Trophic")] == ["r3"]
    assert filter_records(records, "photosynthesis") == []


def test_topic_selection_matches_any_listed_topic() -> None:
    records = _records()

    assert [r.id for r in filter_records(records, "", {"Cells"})] == ["r1", "r2"]
    assert [r.id for r in filter_records(records, "", {"Ecology", "Genetics"})] == ["r2", "r3"]


def test_query_and_topics_combine_with_and() -> None:
    record = _records()[0]

    assert record_matches(record, "mitosis", {"Cells"}) is True
    assert record_matches(record, "mitosis", {"Ecology"}) is False
    assert record_matches(record, "meiosis", {"Cells"}) is False


def test_group_predicate_uses_merged_text_topic_and_concepts() -> None:
    groups = {g.topic: g for g in aggregate_by_topic(_records())}
    cells = groups["Cells"]

    assert group_matches(cells, "chromosomes", frozenset()) is True
    assert group_matches(cells, "meiosis", frozenset()) is True
    assert group_matches(cells, "cells", frozenset()) is True
    assert group_matches(cells, "", {"Cells"}) is True
    assert group_matches(cells, "", {"Genetics"}) is False
    assert group_matches(cells, "chromosomes", {"Genetics"}) is False


def test_filtering_preserves_order() -> None:
    groups = aggregate_by_topic(_records())

    filtered = filter_topic_groups(groups, "", {"Genetics", "Cells"})

    assert [g.topic for g in filtered] == [g.topic for g in groups if g.topic in {"Genetics", "Cells"}]


def test_toggle_topic_returns_new_set_and_leaves_input_untouched() -> None:
    selected = frozenset({"Cells"})

    added = toggle_topic(selected, "Genetics")
    removed = toggle_topic(added, "Cells")

    assert selected == frozenset({"Cells"})
    assert added == frozenset({"Cells", "Genetics"})
    assert removed == frozenset({"Genetics"})
    assert toggle_topic(toggle_topic(selected, "Ecology"), "Ecology") == selected


def test_toggle_topic_accepts_mutable_sets_without_mutating_them() -> None:
    selected = {"Cells"}

    result = toggle_topic(selected, "Cells")

    assert result == frozenset()
    assert selected == {"Cells"}


def test_all_topics_are_distinct_and_locale_sorted() -> None:
    records = _records() + [AnalysisRecord(id="r4", majorTopics=["ácidos", "cells"])]

    assert all_topics(records) == ["ácidos", "cells", "Cells", "Ecology", "Genetics"]


def test_restrict_to_content_drops_unknown_and_non_content_materials() -> None:
    records = _records()
    materials = [
        Material(id="m1", materialType=MaterialType.CONTENT),
        Material(id="m2", materialType=MaterialType.LEARNING_OBJECTIVES),
    ]

    assert [r.id for r in restrict_to_content(records, materials)] == ["r1"]


def test_study_filter_value_object() -> None:
    empty = StudyFilter.from_request(None, ["", "Cells"])
    assert empty.query == ""
    assert empty.selected_topics == frozenset({"Cells"})
    assert empty.is_active is True

    toggled = empty.toggle("Cells").with_query("mitosis")
    assert toggled.selected_topics == frozenset()
    assert toggled.query == "mitosis"
    assert empty.selected_topics == frozenset({"Cells"})

    assert toggled.cleared() == StudyFilter()
    assert StudyFilter().is_active is False


def test_study_filter_applies_to_records_and_groups() -> None:
    records = _records()
    view_filter = StudyFilter(query="chromosomes", selected_topics=frozenset({"Cells"}))

    assert [r.id for r in view_filter.apply_to_records(records)] == ["r2"]
    assert [g.topic for g in view_filter.apply_to_groups(aggregate_by_topic(records))] == ["Cells"]
