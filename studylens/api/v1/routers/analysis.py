from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from studylens.api.v1.auth import require_service_auth
from studylens.api.v1.errors import ERROR_RESPONSES, ApiError, to_api_error
from studylens.application.use_cases.analyze_materials_use_case import AnalyzeMaterialsUseCase
from studylens.core.dependencies import get_analyze_materials_use_case
from studylens.core.observability.context_vars import bind_context
from studylens.domain.exceptions import StudyLensError
from studylens.domain.schemas.study import AnalysisRunReport

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/collections", tags=["analysis"], dependencies=[Depends(require_service_auth)])


@router.post(
    "/{collection_id}/analysis",
    operation_id="analyzeCollectionMaterials",
    summary="Extract content from every material in a collection",
    description=(
        "Runs each uploaded page through the vision model and stores one analysis per page. "
        "Pages that cannot be read are skipped and reported through `analyzed_count`."
    ),
    response_model=AnalysisRunReport,
    responses={
        200: {
            "description": "Analysis run finished",
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "analyzed_count": 2,
                        "total_materials": 3,
                        "results": [
                            {
                                "material_id": "0f0c1c1e-3c85-4d7e-9a0a-1f3f5c8b2a11",
                                "file_name": "page-1.jpg",
                                "page_number": 1,
                                "topics": ["Cells"],
                            }
                        ],
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
    },
)
async def analyze_collection(
    collection_id: str,
    use_case: Annotated[AnalyzeMaterialsUseCase, Depends(get_analyze_materials_use_case)],
) -> AnalysisRunReport:
    bind_context(collection_id=collection_id)
    try:
        return await use_case.execute(collection_id)
    except StudyLensError as e:
        raise to_api_error(e) from e
    except ApiError:
        raise
    except Exception as e:
        logger.error("material_analysis_request_failed", collection_id=collection_id, error=str(e))
        raise ApiError(status_code=500, code="ANALYSIS_FAILED", message="Material analysis failed")
