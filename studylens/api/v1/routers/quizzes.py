from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from studylens.api.v1.auth import require_service_auth
from studylens.api.v1.errors import ERROR_RESPONSES, ApiError, to_api_error
from studylens.application.use_cases.generate_quiz_use_case import GenerateQuizUseCase
from studylens.core.dependencies import get_generate_quiz_use_case
from studylens.core.observability.context_vars import bind_context
from studylens.domain.exceptions import StudyLensError
from studylens.domain.schemas.quiz import QuizSummary

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/collections", tags=["quizzes"], dependencies=[Depends(require_service_auth)])


@router.post(
    "/{collection_id}/quizzes",
    operation_id="generateQuiz",
    summary="Generate a quiz from analysed material",
    response_model=QuizSummary,
    responses={
        200: {
            "description": "Quiz created",
            "content": {
                "application/json": {
                    "example": {
                        "id": "4a8a7d2c-9f0b-4a52-8f1e-2d1c6c9b7e01",
                        "title": "Cell Biology Quiz",
                        "description": "Mitosis, meiosis and cell structure",
                        "question_count": 12,
                    }
                }
            },
        },
        401: ERROR_RESPONSES[401],
        402: ERROR_RESPONSES[402],
        404: ERROR_RESPONSES[404],
        409: ERROR_RESPONSES[409],
        429: ERROR_RESPONSES[429],
        500: ERROR_RESPONSES[500],
        502: ERROR_RESPONSES[502],
    },
)
async def generate_quiz(
    collection_id: str,
    use_case: Annotated[GenerateQuizUseCase, Depends(get_generate_quiz_use_case)],
) -> QuizSummary:
    bind_context(collection_id=collection_id)
    try:
        return await use_case.execute(collection_id)
    except StudyLensError as e:
        raise to_api_error(e) from e
    except ApiError:
        raise
    except Exception as e:
        logger.error("quiz_generation_request_failed", collection_id=collection_id, error=str(e))
        raise ApiError(status_code=500, code="QUIZ_GENERATION_FAILED", message="Quiz generation failed")
