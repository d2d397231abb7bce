from fastapi import APIRouter

from studylens.api.v1.routers.analysis import router as analysis_router
from studylens.api.v1.routers.analytics import router as analytics_router
from studylens.api.v1.routers.quizzes import router as quizzes_router
from studylens.api.v1.routers.study import router as study_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(study_router)
v1_router.include_router(analysis_router)
v1_router.include_router(quizzes_router)
v1_router.include_router(analytics_router)
