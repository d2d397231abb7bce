from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from studylens.core.ai_models import AIModelConfig
from studylens.core.prompts.analysis import analysis_prompt_for
from studylens.core.structured_generation import StrictEngine
from studylens.domain.exceptions import (
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    CollectionNotFoundError,
    NoMaterialsError,
)
from studylens.domain.repositories.study_repository import IStudyRepository
from studylens.domain.schemas.quiz import MaterialAnalysisDraft
from studylens.domain.schemas.study import AnalysisRunReport, AnalyzedMaterial, Material
from studylens.domain.study.text import estimate_token_count, normalize_extracted_text
from studylens.infrastructure.services.storage_service import StorageService

logger = structlog.get_logger(__name__)


class AnalyzeMaterialsUseCase:
    """
    Runs every material of a collection through the vision model and stores
    one analysis row per page.

    Signed URLs for all images are resolved up front, concurrently. Pages are
    numbered in upload order. Materials whose image cannot be fetched or whose
    analysis comes back unusable are skipped; rate-limit and depleted-credit
    errors abort the whole run so the caller can back off.
    """

    def __init__(
        self,
        repository: IStudyRepository,
        storage: StorageService,
        engine: StrictEngine,
        temperature: Optional[float] = None,
    ):
        self.repository = repository
        self.storage = storage
        self.engine = engine
        self.temperature = (
            AIModelConfig.DEFAULT_TEMPERATURE_ANALYSIS if temperature is None else temperature
        )

    async def execute(self, collection_id: str) -> AnalysisRunReport:
        logger.info("material_analysis_started", collection_id=collection_id)

        collection = await self.repository.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        materials = await self.repository.list_materials(collection_id)
        if not materials:
            raise NoMaterialsError("No materials found", details={"collection_id": collection_id})

        image_urls = await self.storage.get_multiple_signed_urls(m.storagePath for m in materials)
        report = AnalysisRunReport(total_materials=len(materials))
        page_number = 1

        for material in materials:
            draft = await self._analyze(material, image_urls.get(material.storagePath))
            if draft is None:
                continue

            payload = self._build_row(collection_id, material, draft, page_number)
            try:
                await self.repository.upsert_analysis(payload)
            except Exception as e:
                logger.error(
                    "material_analysis_persist_failed",
                    collection_id=collection_id,
                    material_id=material.id,
                    error=str(e),
                )
            else:
                report.results.append(
                    AnalyzedMaterial(
                        material_id=material.id,
                        file_name=material.fileName,
                        page_number=page_number,
                        topics=list(draft.major_topics),
                    )
                )
                logger.info(
                    "material_analyzed",
                    material_id=material.id,
                    file_name=material.fileName,
                    page_number=page_number,
                )

            page_number += 1

        report.analyzed_count = len(report.results)
        logger.info(
            "material_analysis_completed",
            collection_id=collection_id,
            analyzed=report.analyzed_count,
            total=report.total_materials,
        )
        return report

    async def _analyze(self, material: Material, image_url: Optional[str]) -> Optional[MaterialAnalysisDraft]:
        if not image_url:
            logger.error("material_signed_url_missing", material_id=material.id, file_name=material.fileName)
            return None

        messages = StrictEngine.build_messages(
            analysis_prompt_for(material.materialType), image_url=image_url
        )
        try:
            return await self.engine.agenerate(messages, MaterialAnalysisDraft, temperature=self.temperature)
        except AIServiceError as e:
            if isinstance(e, (AIRateLimitError, AIQuotaExceededError)):
                raise
            logger.error(
                "material_analysis_failed",
                material_id=material.id,
                file_name=material.fileName,
                code=e.code,
                error=e.message,
            )
            return None

    @staticmethod
    def _build_row(
        collection_id: str, material: Material, draft: MaterialAnalysisDraft, page_number: int
    ) -> Dict[str, Any]:
        return {
            "material_id": material.id,
            "collection_id": collection_id,
            "extracted_text": normalize_extracted_text(draft.extracted_text),
            "major_topics": draft.major_topics,
            "key_concepts": draft.key_concepts,
            "definitions": draft.definitions,
            "formulas": draft.formulas,
            "visual_elements": draft.visual_elements,
            "emphasis_markers": draft.emphasis_markers,
            "is_foundational": draft.is_foundational,
            "learning_objectives": draft.learning_objectives,
            "page_number": page_number,
            "token_count": estimate_token_count(draft.extracted_text),
            "analyzed_at": datetime.now(timezone.utc).isoformat(),
        }
