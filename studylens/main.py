from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, ResponseValidationError

from studylens.api.v1.api_router import v1_router
from studylens.api.v1.errors import (
    ApiError,
    api_error_exception_handler,
    domain_error_exception_handler,
    error_response,
)
from studylens.core.observability.correlation import CorrelationMiddleware
from studylens.core.settings import settings
from studylens.domain.exceptions import StudyLensError
from studylens.infrastructure.container import StudyContainer
from studylens.infrastructure.observability.logger_config import configure_structlog

configure_structlog()
logger = structlog.get_logger(__name__)
logger.info(
    "studylens_starting",
    auth_mode="deployed" if settings.is_deployed_environment else "local_bypass",
    app_env=settings.APP_ENV,
    environment=settings.ENVIRONMENT,
    storage_bucket=settings.STUDY_STORAGE_BUCKET,
    ai_model=settings.AI_MODEL,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.container = StudyContainer()
    try:
        yield
    finally:
        await app.state.container.shutdown()


app = FastAPI(
    title="StudyLens Study Material API",
    description="Analyses photographed study material, groups it by topic and generates quizzes.",
    version="1.0.0",
    lifespan=lifespan,
)

# Outermost: every request, including rejected ones, gets a correlation id
app.add_middleware(CorrelationMiddleware)


@app.exception_handler(RequestValidationError)
async def request_contract_breach(request: Request, exc: RequestValidationError):
    """The caller sent parameters the API does not accept."""
    errors = jsonable_encoder(exc.errors())
    logger.warning("frontend_contract_breach", endpoint=str(request.url), validation_errors=errors)
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "FRONTEND_CONTRACT_BREACH", "Request validation failed", errors
    )


@app.exception_handler(ResponseValidationError)
async def response_contract_breach(request: Request, exc: ResponseValidationError):
    """A handler produced a payload that does not fit its response_model."""
    errors = jsonable_encoder(exc.errors())
    logger.error("backend_contract_breach", endpoint=str(request.url), validation_errors=errors)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "BACKEND_CONTRACT_BREACH",
        "Internal Server Error: Data Contract Breach",
        errors,
    )


app.add_exception_handler(ApiError, api_error_exception_handler)
app.add_exception_handler(StudyLensError, domain_error_exception_handler)

app.include_router(v1_router)


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok", "service": "studylens", "api_v1": "available"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.API_PORT)
