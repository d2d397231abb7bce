from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError

from studylens.domain.repositories.study_repository import IStudyRepository
from studylens.domain.schemas.analytics import AnswerOutcome, AttemptScore
from studylens.domain.schemas.quiz import ExistingQuestion
from studylens.domain.schemas.study import AnalysisRecord, Collection, Material
from studylens.infrastructure.supabase.client import get_async_supabase_client

logger = structlog.get_logger(__name__)

MATERIAL_COLUMNS = "id, collection_id, file_name, mime_type, file_size, storage_path, material_type, created_at"


class SupabaseStudyRepository(IStudyRepository):
    def __init__(self, client: Optional[Any] = None):
        self._client = client

    async def get_client(self):
        if self._client is None:
            self._client = await get_async_supabase_client()
        return self._client

    async def get_collection(self, collection_id: str) -> Optional[Collection]:
        client = await self.get_client()
        res = (
            await client.table("collections")
            .select("id, user_id, title, description, is_public")
            .eq("id", collection_id)
            .maybe_single()
            .execute()
        )
        # maybe_single() yields no response object at all when nothing matched
        row = getattr(res, "data", None) if res is not None else None
        if not row:
            return None
        return Collection.model_validate(row)

    async def list_materials(self, collection_id: str) -> List[Material]:
        client = await self.get_client()
        res = (
            await client.table("materials")
            .select(MATERIAL_COLUMNS)
            .eq("collection_id", collection_id)
            .order("created_at")
            .execute()
        )
        return [Material.model_validate(row) for row in (res.data or [])]

    async def list_analyses(self, collection_id: str) -> List[AnalysisRecord]:
        client = await self.get_client()
        res = (
            await client.table("material_analysis")
            .select("*")
            .eq("collection_id", collection_id)
            .order("page_number")
            .execute()
        )
        records: List[AnalysisRecord] = []
        for row in res.data or []:
            try:
                records.append(AnalysisRecord.model_validate(row))
            except ValidationError as exc:
                logger.warning(
                    "analysis_row_skipped",
                    collection_id=collection_id,
                    row_id=(row or {}).get("id") if isinstance(row, dict) else None,
                    error=str(exc),
                )
        return records

    async def upsert_analysis(self, payload: Dict[str, Any]) -> None:
        client = await self.get_client()
        await client.table("material_analysis").upsert(payload).execute()

    async def list_existing_questions(self, collection_id: str) -> tuple[int, List[ExistingQuestion]]:
        client = await self.get_client()
        res = (
            await client.table("quizzes")
            .select("id, title, questions(question_text, topic_category, bloom_level)")
            .eq("collection_id", collection_id)
            .execute()
        )
        quizzes = res.data or []
        questions = [
            ExistingQuestion.model_validate(question)
            for quiz in quizzes
            for question in (quiz.get("questions") or [])
        ]
        return len(quizzes), questions

    async def create_quiz(self, collection_id: str, title: str, description: str) -> Dict[str, Any]:
        client = await self.get_client()
        res = (
            await client.table("quizzes")
            .insert({"collection_id": collection_id, "title": title, "description": description})
            .execute()
        )
        rows = res.data or []
        if not rows:
            raise RuntimeError("Quiz insert returned no rows")
        return rows[0]

    async def insert_questions(self, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        client = await self.get_client()
        await client.table("questions").insert(rows).execute()

    async def list_answer_outcomes(self, user_id: Optional[str] = None) -> List[AnswerOutcome]:
        client = await self.get_client()
        if user_id:
            query = (
                client.table("answers")
                .select("is_correct, questions(topic_category), attempts!inner(user_id)")
                .eq("attempts.user_id", user_id)
            )
        else:
            query = client.table("answers").select("is_correct, questions(topic_category)")
        res = await query.execute()

        outcomes: List[AnswerOutcome] = []
        for row in res.data or []:
            question = row.get("questions") or {}
            outcomes.append(
                AnswerOutcome(
                    is_correct=bool(row.get("is_correct")),
                    topic_category=question.get("topic_category") if isinstance(question, dict) else None,
                )
            )
        return outcomes

    async def list_attempt_scores(self, user_id: Optional[str] = None, limit: int = 20) -> List[AttemptScore]:
        client = await self.get_client()
        query = client.table("attempts").select("score, total_questions").filter("completed_at", "not.is", "null")
        if user_id:
            query = query.eq("user_id", user_id)
        res = await query.order("completed_at", desc=True).limit(limit).execute()

        scores: List[AttemptScore] = []
        for row in res.data or []:
            try:
                scores.append(AttemptScore.model_validate(row))
            except ValidationError:
                logger.warning("attempt_row_skipped", user_id=user_id)
        return scores
