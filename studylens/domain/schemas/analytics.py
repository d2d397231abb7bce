from typing import List, Optional

from pydantic import BaseModel, Field


class AnswerOutcome(BaseModel):
    is_correct: bool = False
    topic_category: Optional[str] = None


class AttemptScore(BaseModel):
    score: Optional[int] = None
    total_questions: int


class TopicStats(BaseModel):
    topic: str
    correct: int
    total: int
    percentage: int


class PerformanceSummary(BaseModel):
    total_attempts: int = 0
    average_score: int = 0
    topic_stats: List[TopicStats] = Field(default_factory=list)
