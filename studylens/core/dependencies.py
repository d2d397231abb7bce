from typing import Annotated

from fastapi import Depends, Request

from studylens.infrastructure.container import StudyContainer


def get_container(request: Request) -> StudyContainer:
    """
    Dependency injection for the StudyContainer.
    Pulls the singleton instance from the app state (initialized in lifespan).
    """
    return request.app.state.container


def get_study_repository(container: Annotated[StudyContainer, Depends(get_container)]):
    return container.study_repository


def get_study_view_service(container: Annotated[StudyContainer, Depends(get_container)]):
    return container.study_view_service


def get_analyze_materials_use_case(container: Annotated[StudyContainer, Depends(get_container)]):
    return container.analyze_materials_use_case


def get_generate_quiz_use_case(container: Annotated[StudyContainer, Depends(get_container)]):
    return container.generate_quiz_use_case


def get_topic_performance_use_case(container: Annotated[StudyContainer, Depends(get_container)]):
    return container.topic_performance_use_case
