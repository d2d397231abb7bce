from typing import Any, Dict, List, Optional

import structlog

from studylens.core.ai_models import AIModelConfig
from studylens.core.prompts.quiz import build_quiz_system_prompt, build_quiz_user_prompt
from studylens.core.settings import settings
from studylens.core.structured_generation import StrictEngine
from studylens.domain.exceptions import CollectionNotFoundError, MalformedAIResponseError, NoAnalyzedMaterialsError
from studylens.domain.repositories.study_repository import IStudyRepository
from studylens.domain.schemas.quiz import QuestionDraft, QuizDraft, QuizSummary

logger = structlog.get_logger(__name__)


class GenerateQuizUseCase:
    """
    Builds a multiple-choice quiz from a collection's analysed pages, steering
    the model away from questions earlier quizzes already asked.
    """

    def __init__(
        self,
        repository: IStudyRepository,
        engine: StrictEngine,
        temperature: Optional[float] = None,
    ):
        self.repository = repository
        self.engine = engine
        self.temperature = AIModelConfig.DEFAULT_TEMPERATURE_QUIZ if temperature is None else temperature

    async def execute(self, collection_id: str) -> QuizSummary:
        collection = await self.repository.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        records = await self.repository.list_analyses(collection_id)
        if not records:
            raise NoAnalyzedMaterialsError(
                'No analyzed materials found. Please run "Extract Content" first.',
                details={"collection_id": collection_id},
            )

        quiz_count, existing = await self.repository.list_existing_questions(collection_id)
        logger.info(
            "quiz_generation_started",
            collection_id=collection_id,
            pages=len(records),
            existing_quizzes=quiz_count,
            existing_questions=len(existing),
        )

        messages = [
            {"role": "system", "content": build_quiz_system_prompt(quiz_count)},
            {
                "role": "user",
                "content": build_quiz_user_prompt(
                    collection,
                    records,
                    existing,
                    quiz_count,
                    char_limit=settings.QUIZ_PAGE_TEXT_CHAR_LIMIT,
                    existing_preview=settings.QUIZ_EXISTING_QUESTIONS_PREVIEW,
                ),
            },
        ]
        draft = await self.engine.agenerate(messages, QuizDraft, temperature=self.temperature)
        if not draft.questions:
            raise MalformedAIResponseError("AI returned a quiz without questions")

        quiz = await self.repository.create_quiz(
            collection_id,
            title=draft.title or f"{collection.title} Quiz",
            description=draft.description or "AI-generated quiz",
        )
        rows = self.question_rows(str(quiz["id"]), draft.questions)
        await self.repository.insert_questions(rows)

        logger.info("quiz_generated", collection_id=collection_id, quiz_id=quiz["id"], questions=len(rows))
        return QuizSummary(
            id=str(quiz["id"]),
            title=quiz.get("title") or "",
            description=quiz.get("description"),
            questionCount=len(rows),
        )

    @staticmethod
    def question_rows(quiz_id: str, questions: List[QuestionDraft]) -> List[Dict[str, Any]]:
        return [
            {
                "quiz_id": quiz_id,
                "question_text": q.question,
                "correct_answer": q.correct_answer,
                "wrong_answers": q.wrong_answers,
                "explanation": q.explanation,
                "order_index": index,
                "difficulty_level": q.difficulty,
                "bloom_level": q.bloom_level,
                "question_type": q.question_type,
                "topic_category": q.topic_category,
                "exam_likelihood": q.exam_likelihood,
                "exam_tip": q.exam_tip,
                "page_references": q.page_references,
            }
            for index, q in enumerate(questions)
        ]
