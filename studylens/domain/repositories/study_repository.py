from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from studylens.domain.schemas.analytics import AnswerOutcome, AttemptScore
from studylens.domain.schemas.quiz import ExistingQuestion
from studylens.domain.schemas.study import AnalysisRecord, Collection, Material


class IStudyRepository(ABC):
    @abstractmethod
    async def get_collection(self, collection_id: str) -> Optional[Collection]:
        pass

    @abstractmethod
    async def list_materials(self, collection_id: str) -> List[Material]:
        pass

    @abstractmethod
    async def list_analyses(self, collection_id: str) -> List[AnalysisRecord]:
        pass

    @abstractmethod
    async def upsert_analysis(self, payload: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def list_existing_questions(self, collection_id: str) -> tuple[int, List[ExistingQuestion]]:
        """Returns (quiz count, questions across those quizzes)."""

    @abstractmethod
    async def create_quiz(self, collection_id: str, title: str, description: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def insert_questions(self, rows: List[Dict[str, Any]]) -> None:
        pass

    @abstractmethod
    async def list_answer_outcomes(self, user_id: Optional[str] = None) -> List[AnswerOutcome]:
        pass

    @abstractmethod
    async def list_attempt_scores(self, user_id: Optional[str] = None, limit: int = 20) -> List[AttemptScore]:
        """Most recent completed attempts first."""
