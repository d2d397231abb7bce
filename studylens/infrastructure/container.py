"""
Study Container - StudyLens Infrastructure Layer

Centralizes service instantiation and dependency injection.
"""

from studylens.application.services.study_view_service import StudyViewService
from studylens.application.use_cases.analyze_materials_use_case import AnalyzeMaterialsUseCase
from studylens.application.use_cases.generate_quiz_use_case import GenerateQuizUseCase
from studylens.application.use_cases.topic_performance_use_case import TopicPerformanceUseCase
from studylens.core.structured_generation import StrictEngine
from studylens.infrastructure.caching.signed_url_cache import SignedUrlCache
from studylens.infrastructure.services.storage_service import StorageService
from studylens.infrastructure.supabase.repositories.supabase_study_repository import (
    SupabaseStudyRepository,
)


class StudyContainer:
    """
    IoC Container for study services.
    """

    def __init__(self):
        # Lazy initialization of services
        self._study_repository = None
        self._signed_url_cache = None
        self._storage_service = None
        self._engine = None
        self._study_view_service = None

    @property
    def study_repository(self) -> SupabaseStudyRepository:
        if self._study_repository is None:
            self._study_repository = SupabaseStudyRepository()
        return self._study_repository

    @property
    def signed_url_cache(self) -> SignedUrlCache:
        if self._signed_url_cache is None:
            self._signed_url_cache = SignedUrlCache()
        return self._signed_url_cache

    @property
    def storage_service(self) -> StorageService:
        if self._storage_service is None:
            self._storage_service = StorageService(url_cache=self.signed_url_cache)
        return self._storage_service

    @property
    def engine(self) -> StrictEngine:
        if self._engine is None:
            self._engine = StrictEngine()
        return self._engine

    @property
    def study_view_service(self) -> StudyViewService:
        if self._study_view_service is None:
            self._study_view_service = StudyViewService()
        return self._study_view_service

    @property
    def analyze_materials_use_case(self) -> AnalyzeMaterialsUseCase:
        return AnalyzeMaterialsUseCase(
            repository=self.study_repository,
            storage=self.storage_service,
            engine=self.engine,
        )

    @property
    def generate_quiz_use_case(self) -> GenerateQuizUseCase:
        return GenerateQuizUseCase(repository=self.study_repository, engine=self.engine)

    @property
    def topic_performance_use_case(self) -> TopicPerformanceUseCase:
        return TopicPerformanceUseCase(repository=self.study_repository)

    async def shutdown(self) -> None:
        self.storage_service.clear_cache()
        if self._study_view_service is not None:
            self._study_view_service.clear()
