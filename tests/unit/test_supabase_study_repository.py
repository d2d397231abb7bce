import asyncio
from typing import Any, Dict, List, Optional

from studylens.infrastructure.supabase.repositories.supabase_study_repository import SupabaseStudyRepository


class _Response:
    def __init__(self, data: Any) -> None:
        self.data = data


class _FakeQuery:
    def __init__(self, table: str, client: "_FakeSupabase") -> None:
        self.table = table
        self.client = client
        self.ops: List[tuple] = []

    def __getattr__(self, name: str):
        if name not in {"select", "eq", "filter", "order", "limit", "maybe_single", "upsert", "insert"}:
            raise AttributeError(name)

        def _chain(*args: Any, **kwargs: Any) -> "_FakeQuery":
            self.ops.append((name, args))
            return self

        return _chain

    async def execute(self) -> Optional[_Response]:
        self.client.executed.append((self.table, self.ops))
        data = self.client.responses.get(self.table)
        if data is None and any(op == "maybe_single" for op, _ in self.ops):
            return None
        return _Response(data)


class _FakeSupabase:
    def __init__(self, responses: Dict[str, Any]) -> None:
        self.responses = responses
        self.executed: List[tuple] = []

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(name, self)


def test_get_collection_handles_missing_row() -> None:
    repo = SupabaseStudyRepository(client=_FakeSupabase({}))

    assert asyncio.run(repo.get_collection("c1")) is None


def test_get_collection_maps_row() -> None:
    client = _FakeSupabase({"collections": {"id": "c1", "user_id": "u1", "title": "Biology", "is_public": True}})

    collection = asyncio.run(SupabaseStudyRepository(client=client).get_collection("c1"))

    assert collection.title == "Biology"
    assert collection.userId == "u1"
    assert collection.isPublic is True


def test_list_analyses_skips_invalid_rows() -> None:
    client = _FakeSupabase(
        {
            "material_analysis": [
                {"id": "r1", "page_number": 1, "major_topics": ["Cells"]},
                {"page_number": 2},
                {"id": "r3", "page_number": 3, "major_topics": None},
            ]
        }
    )

    records = asyncio.run(SupabaseStudyRepository(client=client).list_analyses("c1"))

    assert [r.id for r in records] == ["r1", "r3"]
    table, ops = client.executed[0]
    assert table == "material_analysis"
    assert ("eq", ("collection_id", "c1")) in ops
    assert ("order", ("page_number",)) in ops


def test_list_materials_orders_by_upload_time() -> None:
    client = _FakeSupabase(
        {"materials": [{"id": "m1", "file_name": "a.jpg", "storage_path": "u/c/a.jpg", "material_type": None}]}
    )

    materials = asyncio.run(SupabaseStudyRepository(client=client).list_materials("c1"))

    assert materials[0].fileName == "a.jpg"
    assert ("order", ("created_at",)) in client.executed[0][1]


def test_attempt_scores_are_recent_completed_attempts_for_the_user() -> None:
    client = _FakeSupabase(
        {
            "attempts": [
                {"score": 8, "total_questions": 10},
                {"score": None, "total_questions": 5},
                {"score": 3},
            ]
        }
    )

    scores = asyncio.run(SupabaseStudyRepository(client=client).list_attempt_scores(user_id="u1", limit=5))

    assert [(s.score, s.total_questions) for s in scores] == [(8, 10), (None, 5)]
    table, ops = client.executed[0]
    assert table == "attempts"
    assert ("filter", ("completed_at", "not.is", "null")) in ops
    assert ("eq", ("user_id", "u1")) in ops
    assert ("order", ("completed_at",)) in ops
    assert ("limit", (5,)) in ops


def test_existing_questions_are_flattened_across_quizzes() -> None:
    client = _FakeSupabase(
        {
            "quizzes": [
                {"id": "q1", "questions": [{"question_text": "A?", "topic_category": "Cells"}]},
                {"id": "q2", "questions": [{"question_text": "B?"}, {"question_text": "C?"}]},
                {"id": "q3", "questions": None},
            ]
        }
    )

    count, questions = asyncio.run(SupabaseStudyRepository(client=client).list_existing_questions("c1"))

    assert count == 3
    assert [q.question_text for q in questions] == ["A?", "B?", "C?"]


def test_answer_outcomes_filter_by_user_through_attempts() -> None:
    client = _FakeSupabase(
        {
            "answers": [
                {"is_correct": True, "questions": {"topic_category": "Cells"}},
                {"is_correct": None, "questions": None},
            ]
        }
    )

    outcomes = asyncio.run(SupabaseStudyRepository(client=client).list_answer_outcomes(user_id="u1"))

    assert [(o.is_correct, o.topic_category) for o in outcomes] == [(True, "Cells"), (False, None)]
    assert ("eq", ("attempts.user_id", "u1")) in client.executed[0][1]


def test_insert_questions_is_a_noop_for_empty_rows() -> None:
    client = _FakeSupabase({})

    asyncio.run(SupabaseStudyRepository(client=client).insert_questions([]))

    assert client.executed == []
