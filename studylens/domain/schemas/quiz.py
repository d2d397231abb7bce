"""
Structured payloads exchanged with the AI provider, plus the quiz summary
returned to API callers.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Difficulty = Literal["easy", "medium", "hard"]
BloomLevel = Literal["remember", "understand", "apply", "analyze", "evaluate", "create"]
QuestionType = Literal["recall", "application", "analysis", "synthesis"]
ExamLikelihood = Literal["low", "medium", "high", "very_high"]


class MaterialAnalysisDraft(BaseModel):
    """What the analyzer model returns for one photographed page."""

    extracted_text: str = ""
    major_topics: List[str] = Field(default_factory=list)
    key_concepts: List[str] = Field(default_factory=list)
    definitions: Dict[str, str] = Field(default_factory=dict)
    formulas: List[str] = Field(default_factory=list)
    visual_elements: List[str] = Field(default_factory=list)
    emphasis_markers: List[str] = Field(default_factory=list)
    is_foundational: bool = False
    learning_objectives: List[str] = Field(default_factory=list)

    @field_validator(
        "major_topics",
        "key_concepts",
        "formulas",
        "visual_elements",
        "emphasis_markers",
        "learning_objectives",
        mode="before",
    )
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value

    @field_validator("definitions", mode="before")
    @classmethod
    def _none_to_dict(cls, value):
        return {} if value is None else value

    @field_validator("extracted_text", mode="before")
    @classmethod
    def _none_to_text(cls, value):
        return "" if value is None else value

    @field_validator("is_foundational", mode="before")
    @classmethod
    def _none_to_false(cls, value):
        return False if value is None else value


class QuestionDraft(BaseModel):
    question: str
    correct_answer: str
    wrong_answers: List[str] = Field(default_factory=list)
    explanation: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    bloom_level: Optional[BloomLevel] = None
    question_type: Optional[QuestionType] = None
    topic_category: Optional[str] = None
    exam_likelihood: Optional[ExamLikelihood] = None
    exam_tip: Optional[str] = None
    page_references: Optional[List[str]] = None


class ContentAnalysis(BaseModel):
    major_topics: List[str] = Field(default_factory=list)
    total_pages_analyzed: Optional[int] = None
    recommended_question_count: Optional[int] = None


class QuizDraft(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    content_analysis: Optional[ContentAnalysis] = None
    questions: List[QuestionDraft] = Field(default_factory=list)


class ExistingQuestion(BaseModel):
    question_text: str
    topic_category: Optional[str] = None
    bloom_level: Optional[str] = None


class QuizSummary(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    questionCount: int = Field(alias="question_count")

    model_config = ConfigDict(populate_by_name=True)
