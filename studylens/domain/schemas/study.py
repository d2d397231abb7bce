"""
Domain schemas for study collections, materials and per-page analysis.

Naming follows the persistence boundary:
- camelCase attributes on the domain entities.
- snake_case aliases mapping to the Supabase columns.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


class MaterialType(str, Enum):
    CONTENT = "content"
    LEARNING_OBJECTIVES = "learning_objectives"
    REFERENCE = "reference"


class Collection(BaseModel):
    id: str
    userId: Optional[str] = Field(default=None, alias="user_id")
    title: str = ""
    description: Optional[str] = None
    isPublic: bool = Field(default=False, alias="is_public")

    model_config = ConfigDict(populate_by_name=True)


class Material(BaseModel):
    """
    An uploaded file (one photographed page) inside a collection.
    """
    id: str
    collectionId: Optional[str] = Field(default=None, alias="collection_id")
    fileName: str = Field(default="", alias="file_name")
    mimeType: Optional[str] = Field(default=None, alias="mime_type")
    fileSize: Optional[int] = Field(default=None, alias="file_size")
    storagePath: str = Field(default="", alias="storage_path")
    materialType: MaterialType = Field(default=MaterialType.CONTENT, alias="material_type")
    createdAt: Optional[datetime] = Field(default=None, alias="created_at")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("materialType", mode="before")
    @classmethod
    def _default_material_type(cls, value: Any) -> Any:
        return value or MaterialType.CONTENT


class AnalysisRecord(BaseModel):
    """
    One page of AI-analysed study material.

    Rows coming from storage are loosely typed; every optional collection
    field defaults to an empty value so the aggregation code never has to
    guard against nulls.
    """
    id: str
    materialId: Optional[str] = Field(default=None, alias="material_id")
    collectionId: Optional[str] = Field(default=None, alias="collection_id")
    pageNumber: Optional[int] = Field(default=None, alias="page_number")
    extractedText: str = Field(default="", alias="extracted_text")
    majorTopics: List[str] = Field(default_factory=list, alias="major_topics")
    keyConcepts: List[str] = Field(default_factory=list, alias="key_concepts")
    definitions: Dict[str, str] = Field(default_factory=dict)
    formulas: List[str] = Field(default_factory=list)
    visualElements: List[str] = Field(default_factory=list, alias="visual_elements")
    emphasisMarkers: List[str] = Field(default_factory=list, alias="emphasis_markers")
    isFoundational: bool = Field(default=False, alias="is_foundational")
    learningObjectives: List[str] = Field(default_factory=list, alias="learning_objectives")
    tokenCount: Optional[int] = Field(default=None, alias="token_count")
    analyzedAt: Optional[datetime] = Field(default=None, alias="analyzed_at")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("id", "materialId", "collectionId", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        if value is None:
            return None
        return str(value)

    @field_validator("extractedText", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator(
        "majorTopics",
        "keyConcepts",
        "formulas",
        "visualElements",
        "emphasisMarkers",
        "learningObjectives",
        mode="before",
    )
    @classmethod
    def _default_lists(cls, value: Any) -> List[str]:
        return _as_string_list(value)

    @field_validator("definitions", mode="before")
    @classmethod
    def _default_definitions(cls, value: Any) -> Dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(term): "" if text is None else str(text) for term, text in value.items()}

    @field_validator("isFoundational", mode="before")
    @classmethod
    def _default_flag(cls, value: Any) -> bool:
        return bool(value) if value is not None else False


class TopicGroup(BaseModel):
    """
    All analysis records sharing one topic name, merged into a single view.
    Derived on every aggregation call; it has no identity of its own.
    """
    topic: str
    mergedText: str = Field(default="", alias="merged_text")
    keyConcepts: List[str] = Field(default_factory=list, alias="key_concepts")
    definitions: Dict[str, str] = Field(default_factory=dict)
    formulas: List[str] = Field(default_factory=list)
    visualElements: List[str] = Field(default_factory=list, alias="visual_elements")
    pageReferences: List[int] = Field(default_factory=list, alias="page_references")
    isFoundational: bool = Field(default=False, alias="is_foundational")
    materialIds: List[str] = Field(default_factory=list, alias="material_ids")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def sortedPageReferences(self) -> List[int]:
        return sorted(self.pageReferences)

    @property
    def pageCount(self) -> int:
        return len(self.pageReferences)


class AnalyzedMaterial(BaseModel):
    material_id: str
    file_name: str
    page_number: int
    topics: List[str] = Field(default_factory=list)


class AnalysisRunReport(BaseModel):
    success: bool = True
    analyzed_count: int = 0
    total_materials: int = 0
    results: List[AnalyzedMaterial] = Field(default_factory=list)
