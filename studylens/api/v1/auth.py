from __future__ import annotations

import structlog
from fastapi import Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from studylens.api.v1.errors import ApiError
from studylens.core.settings import settings

logger = structlog.get_logger(__name__)

DEVELOPMENT_SECRET = "development-secret"

bearer_auth = HTTPBearer(
    auto_error=False,
    scheme_name="BearerAuth",
    description="Authorization Bearer token carrying SERVICE_SECRET.",
)
service_secret_auth = APIKeyHeader(
    name="X-Service-Secret",
    auto_error=False,
    scheme_name="ServiceSecretAuth",
    description="SERVICE_SECRET for service-to-service calls.",
)


def presented_secret(
    bearer_credentials: HTTPAuthorizationCredentials | None, header_value: str | None
) -> tuple[str | None, str]:
    """Returns (secret, source); a Bearer token wins over the header."""
    if bearer_credentials and str(bearer_credentials.scheme or "").lower() == "bearer":
        token = (bearer_credentials.credentials or "").strip()
        if token:
            return token, "bearer"
    header_secret = (header_value or "").strip()
    if header_secret:
        return header_secret, "x_service_secret"
    return None, "missing"


async def require_service_auth(
    bearer_credentials: HTTPAuthorizationCredentials | None = Security(bearer_auth),
    x_service_secret: str | None = Security(service_secret_auth),
) -> None:
    """
    Local runs are open. Deployed environments (see Settings.is_deployed_environment)
    require SERVICE_SECRET, and refuse to start serving with the development default.
    """
    if not settings.is_deployed_environment:
        return

    expected = str(settings.SERVICE_SECRET or "").strip()
    if not expected or expected == DEVELOPMENT_SECRET:
        logger.critical("service_auth_misconfigured", app_env=settings.APP_ENV, environment=settings.ENVIRONMENT)
        raise ApiError(
            status_code=500,
            code="AUTH_MISCONFIGURED",
            message="Service secret must be configured in deployed environments",
        )

    secret, source = presented_secret(bearer_credentials, x_service_secret)
    if secret != expected:
        logger.warning("service_auth_failed", caller_auth_mode=source)
        raise ApiError(
            status_code=401,
            code="UNAUTHORIZED",
            message="Unauthorized",
            details="Missing or invalid service token",
        )
