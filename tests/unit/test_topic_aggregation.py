from studylens.domain.schemas.study import AnalysisRecord
from studylens.domain.study.aggregation import aggregate_by_topic


def _record(record_id: str, **fields) -> AnalysisRecord:
    return AnalysisRecord(id=record_id, **fields)


def test_cells_and_genetics_example() -> None:
    records = [
        _record(
            "r1",
            majorTopics=["Cells"],
            extractedText="Cell intro",
            keyConcepts=["mitosis"],
            isFoundational=True,
            pageNumber=1,
        ),
        _record(
            "r2",
            majorTopics=["Cells", "Genetics"],
            extractedText="Cell division",
            keyConcepts=["mitosis", "meiosis"],
            isFoundational=False,
            pageNumber=2,
        ),
    ]

    groups = aggregate_by_topic(records)

    assert [g.topic for g in groups] == ["Cells", "Genetics"]
    cells, genetics = groups
    assert cells.isFoundational is True
    assert cells.mergedText == "Cell intro\n\nCell division"
    assert cells.keyConcepts == ["mitosis", "meiosis"]
    assert cells.pageReferences == [1, 2]
    assert genetics.isFoundational is False
    assert genetics.mergedText == "Cell division"
    assert genetics.keyConcepts == ["mitosis", "meiosis"]
    assert genetics.pageReferences == [2]


def test_empty_input_returns_empty_list() -> None:
    assert aggregate_by_topic([]) == []


def test_every_distinct_topic_appears_exactly_once() -> None:
    records = [
        _record("r1", majorTopics=["A", "B"]),
        _record("r2", majorTopics=["B", "C"]),
        _record("r3", majorTopics=["C", "A"]),
    ]

    topics = [g.topic for g in aggregate_by_topic(records)]

    assert sorted(topics) == ["A", "B", "C"]
    assert len(topics) == len(set(topics))


def test_records_without_topics_contribute_to_no_group() -> None:
    records = [
        _record("r1", majorTopics=[], extractedText="orphan page", keyConcepts=["lost"], pageNumber=7),
        _record("r2", majorTopics=["Cells"], extractedText="cells", pageNumber=8),
    ]

    groups = aggregate_by_topic(records)

    assert [g.topic for g in groups] == ["Cells"]
    assert "orphan page" not in groups[0].mergedText
    assert 7 not in groups[0].pageReferences


def test_set_fields_are_deduplicated_in_first_seen_order() -> None:
    records = [
        _record("r1", majorTopics=["T"], keyConcepts=["x", "y"], formulas=["E=mc^2"], pageNumber=3),
        _record("r2", majorTopics=["T"], keyConcepts=["y", "z", "x"], formulas=["E=mc^2", "F=ma"], pageNumber=3),
        _record("r3", majorTopics=["T"], pageNumber=1),
    ]

    group = aggregate_by_topic(records)[0]

    assert group.keyConcepts == ["x", "y", "z"]
    assert group.formulas == ["E=mc^2", "F=ma"]
    assert group.pageReferences == [3, 1]
    assert group.sortedPageReferences == [1, 3]
    assert group.pageCount == 2


def test_duplicates_within_a_single_record_collapse() -> None:
    records = [_record("r1", majorTopics=["T"], keyConcepts=["x", "x"], formulas=["f", "f"], pageNumber=2)]

    group = aggregate_by_topic(records)[0]

    assert group.keyConcepts == ["x"]
    assert group.formulas == ["f"]
    assert group.pageReferences == [2]


def test_visual_elements_keep_duplicates() -> None:
    records = [
        _record("r1", majorTopics=["T"], visualElements=["Diagram: cell"]),
        _record("r2", majorTopics=["T"], visualElements=["Diagram: cell", "Chart: growth"]),
    ]

    group = aggregate_by_topic(records)[0]

    assert group.visualElements == ["Diagram: cell", "Diagram: cell", "Chart: growth"]


def test_foundational_flag_is_sticky() -> None:
    records = [
        _record("r1", majorTopics=["T"], isFoundational=False),
        _record("r2", majorTopics=["T"], isFoundational=True),
        _record("r3", majorTopics=["T"], isFoundational=False),
    ]

    assert aggregate_by_topic(records)[0].isFoundational is True


def test_later_definitions_overwrite_earlier_ones() -> None:
    records = [
        _record("r1", majorTopics=["T"], definitions={"Cell": "first", "Gene": "unit of heredity"}),
        _record("r2", majorTopics=["T"], definitions={"Cell": "second"}),
    ]

    group = aggregate_by_topic(records)[0]

    assert group.definitions == {"Cell": "second", "Gene": "unit of heredity"}


def test_empty_text_does_not_add_separators() -> None:
    records = [
        _record("r1", majorTopics=["T"], extractedText=""),
        _record("r2", majorTopics=["T"], extractedText="body"),
        _record("r3", majorTopics=["T"], extractedText=""),
    ]

    assert aggregate_by_topic(records)[0].mergedText == "body"


def test_missing_page_numbers_are_skipped() -> None:
    records = [
        _record("r1", majorTopics=["T"], pageNumber=None),
        _record("r2", majorTopics=["T"], pageNumber=4),
    ]

    assert aggregate_by_topic(records)[0].pageReferences == [4]


def test_material_ids_are_collected_once() -> None:
    records = [
        _record("r1", majorTopics=["T"], materialId="m1"),
        _record("r2", majorTopics=["T"], materialId="m2"),
        _record("r3", majorTopics=["T"], materialId="m1"),
        _record("r4", majorTopics=["T"]),
    ]

    assert aggregate_by_topic(records)[0].materialIds == ["m1", "m2"]


def test_topic_repeated_within_one_record_is_absorbed_per_occurrence() -> None:
    records = [_record("r1", majorTopics=["T", "T"], extractedText="same", pageNumber=1)]

    group = aggregate_by_topic(records)[0]

    assert group.mergedText == "same\n\nsame"
    assert group.pageReferences == [1]


def test_foundational_first_then_locale_alphabetical() -> None:
    records = [
        _record("r1", majorTopics=["Zebra"]),
        _record("r2", majorTopics=["éclair"]),
        _record("r3", majorTopics=["Banana"]),
        _record("r4", majorTopics=["Yeast"], isFoundational=True),
        _record("r5", majorTopics=["apple"], isFoundational=True),
    ]

    topics = [g.topic for g in aggregate_by_topic(records)]

    assert topics == ["apple", "Yeast", "Banana", "éclair", "Zebra"]


def test_order_is_independent_of_input_order() -> None:
    records = [
        _record("r1", majorTopics=["Mitosis"], isFoundational=True),
        _record("r2", majorTopics=["Atoms"]),
        _record("r3", majorTopics=["Bonds", "Mitosis"]),
    ]

    forward = [g.topic for g in aggregate_by_topic(records)]
    backward = [g.topic for g in aggregate_by_topic(list(reversed(records)))]

    assert forward == backward == ["Mitosis", "Atoms", "Bonds"]


def test_input_records_are_not_mutated() -> None:
    records = [
        _record("r1", majorTopics=["T"], keyConcepts=["a"], definitions={"x": "1"}, pageNumber=1),
        _record("r2", majorTopics=["T"], keyConcepts=["b"], definitions={"x": "2"}, pageNumber=2),
    ]
    before = [r.model_dump() for r in records]

    aggregate_by_topic(records)

    assert [r.model_dump() for r in records] == before


def test_letters_without_decomposition_sort_with_their_base_letter() -> None:
    records = [
        _record("r1", majorTopics=["Pasta"]),
        _record("r2", majorTopics=["Ørsted"]),
        _record("r3", majorTopics=["Mars"]),
        _record("r4", majorTopics=["Łódź"]),
    ]

    assert [g.topic for g in aggregate_by_topic(records)] == ["Łódź", "Mars", "Ørsted", "Pasta"]
