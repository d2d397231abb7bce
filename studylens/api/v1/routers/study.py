from typing import Annotated, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from studylens.api.v1.auth import require_service_auth
from studylens.api.v1.errors import ERROR_RESPONSES, ApiError, to_api_error
from studylens.application.services.study_view_service import StudyView, StudyViewService, ViewMode
from studylens.core.dependencies import get_study_repository, get_study_view_service
from studylens.core.observability.context_vars import bind_context
from studylens.domain.exceptions import CollectionNotFoundError, StudyLensError
from studylens.domain.repositories.study_repository import IStudyRepository

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/collections", tags=["study"], dependencies=[Depends(require_service_auth)])


@router.get(
    "/{collection_id}/study",
    operation_id="getStudyView",
    summary="Browse a collection's analysed material",
    description=(
        "Returns the collection's analysed pages either merged per topic (`view=topics`) "
        "or as individual pages (`view=pages`), narrowed by a free-text query and "
        "any number of selected topics. Only materials of type `content` are shown."
    ),
    response_model=StudyView,
    responses={
        401: ERROR_RESPONSES[401],
        404: ERROR_RESPONSES[404],
        422: ERROR_RESPONSES[422],
        500: ERROR_RESPONSES[500],
    },
)
async def get_study_view(
    collection_id: str,
    repository: Annotated[IStudyRepository, Depends(get_study_repository)],
    view_service: Annotated[StudyViewService, Depends(get_study_view_service)],
    view: Optional[ViewMode] = None,
    q: str = "",
    topic: Annotated[List[str], Query()] = [],
) -> StudyView:
    bind_context(collection_id=collection_id)
    try:
        collection = await repository.get_collection(collection_id)
        if collection is None:
            raise CollectionNotFoundError(collection_id)

        records = await repository.list_analyses(collection_id)
        materials = await repository.list_materials(collection_id)
        return view_service.build(records, materials, query=q, selected_topics=topic, mode=view)
    except StudyLensError as e:
        raise to_api_error(e) from e
    except ApiError:
        raise
    except Exception as e:
        logger.error("study_view_failed", collection_id=collection_id, error=str(e))
        raise ApiError(status_code=500, code="STUDY_VIEW_FAILED", message="Study view failed")
