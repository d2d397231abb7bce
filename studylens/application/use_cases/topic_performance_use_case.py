from typing import List, Optional

import structlog

from studylens.core.settings import settings
from studylens.domain.repositories.study_repository import IStudyRepository
from studylens.domain.schemas.analytics import PerformanceSummary, TopicStats
from studylens.domain.study.performance import average_score, topic_performance

logger = structlog.get_logger(__name__)


class TopicPerformanceUseCase:
    def __init__(self, repository: IStudyRepository):
        self.repository = repository

    async def execute(self, user_id: Optional[str] = None, limit: Optional[int] = None) -> List[TopicStats]:
        outcomes = await self.repository.list_answer_outcomes(user_id=user_id)
        stats = topic_performance(outcomes, limit=settings.TOPIC_STATS_LIMIT if limit is None else limit)
        logger.info("topic_performance_computed", user_id=user_id, answers=len(outcomes), topics=len(stats))
        return stats

    async def summarize(self, user_id: Optional[str] = None, limit: Optional[int] = None) -> PerformanceSummary:
        """Dashboard numbers: average over the recent completed attempts plus per-topic accuracy."""
        attempts = await self.repository.list_attempt_scores(
            user_id=user_id, limit=settings.RECENT_ATTEMPTS_LIMIT
        )
        stats = await self.execute(user_id=user_id, limit=limit)
        return PerformanceSummary(
            total_attempts=len(attempts),
            average_score=average_score(attempts),
            topic_stats=stats,
        )
