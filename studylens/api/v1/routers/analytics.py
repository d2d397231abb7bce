from typing import Annotated, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from studylens.api.v1.auth import require_service_auth
from studylens.api.v1.errors import ERROR_RESPONSES, ApiError, to_api_error
from studylens.application.use_cases.topic_performance_use_case import TopicPerformanceUseCase
from studylens.core.dependencies import get_topic_performance_use_case
from studylens.core.observability.context_vars import bind_context
from studylens.domain.exceptions import StudyLensError
from studylens.domain.schemas.analytics import PerformanceSummary, TopicStats

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/analytics", tags=["analytics"], dependencies=[Depends(require_service_auth)])


@router.get(
    "/topics",
    operation_id="getTopicPerformance",
    summary="Answer accuracy per topic",
    description="Most-practised topics first. Answers without a topic count towards `General`.",
    response_model=List[TopicStats],
    responses={
        200: {
            "description": "Per-topic accuracy",
            "content": {
                "application/json": {
                    "example": [
                        {"topic": "Cells", "correct": 7, "total": 9, "percentage": 78},
                        {"topic": "General", "correct": 2, "total": 4, "percentage": 50},
                    ]
                }
            },
        },
        401: ERROR_RESPONSES[401],
        500: ERROR_RESPONSES[500],
    },
)
async def get_topic_performance(
    use_case: Annotated[TopicPerformanceUseCase, Depends(get_topic_performance_use_case)],
    user_id: Optional[str] = None,
    limit: Annotated[Optional[int], Query(ge=0, le=100)] = None,
) -> List[TopicStats]:
    bind_context(user_id=user_id)
    try:
        return await use_case.execute(user_id=user_id, limit=limit)
    except StudyLensError as e:
        raise to_api_error(e) from e
    except Exception as e:
        logger.error("topic_performance_failed", user_id=user_id, error=str(e))
        raise ApiError(status_code=500, code="TOPIC_PERFORMANCE_FAILED", message="Topic performance failed")


@router.get(
    "/summary",
    operation_id="getPerformanceSummary",
    summary="Average quiz score and per-topic accuracy",
    description="Average score over the most recent completed attempts, plus the `/topics` breakdown.",
    response_model=PerformanceSummary,
    responses={
        200: {
            "description": "Dashboard summary",
            "content": {
                "application/json": {
                    "example": {
                        "total_attempts": 3,
                        "average_score": 72,
                        "topic_stats": [{"topic": "Cells", "correct": 7, "total": 9, "percentage": 78}],
                    }
                }
            },
        },
        401: ERROR_RESPONSES[401],
        500: ERROR_RESPONSES[500],
    },
)
async def get_performance_summary(
    use_case: Annotated[TopicPerformanceUseCase, Depends(get_topic_performance_use_case)],
    user_id: Optional[str] = None,
    limit: Annotated[Optional[int], Query(ge=0, le=100)] = None,
) -> PerformanceSummary:
    bind_context(user_id=user_id)
    try:
        return await use_case.summarize(user_id=user_id, limit=limit)
    except StudyLensError as e:
        raise to_api_error(e) from e
    except Exception as e:
        logger.error("performance_summary_failed", user_id=user_id, error=str(e))
        raise ApiError(status_code=500, code="PERFORMANCE_SUMMARY_FAILED", message="Performance summary failed")
