from typing import Any, Optional


class StudyLensError(Exception):
    """Base error for study-material operations."""

    code = "STUDYLENS_ERROR"
    retryable = False

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(StudyLensError):
    code = "NOT_FOUND"


class CollectionNotFoundError(NotFoundError):
    code = "COLLECTION_NOT_FOUND"

    def __init__(self, collection_id: str):
        super().__init__("Collection not found", details={"collection_id": collection_id})
        self.collection_id = collection_id


class NoMaterialsError(StudyLensError):
    code = "NO_MATERIALS"


class NoAnalyzedMaterialsError(StudyLensError):
    code = "NO_ANALYZED_MATERIALS"


class SignedUrlError(StudyLensError):
    code = "SIGNED_URL_FAILED"


class AIServiceError(StudyLensError):
    """
    Failure reported by the content-analysis / quiz-generation provider.
    `retryable` tells callers whether backing off and retrying makes sense.
    """

    code = "AI_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code
        if retryable is not None:
            self.retryable = retryable


class AIRateLimitError(AIServiceError):
    code = "AI_RATE_LIMITED"
    retryable = True


class AIQuotaExceededError(AIServiceError):
    code = "AI_CREDITS_DEPLETED"
    retryable = True


class MalformedAIResponseError(AIServiceError):
    code = "AI_MALFORMED_RESPONSE"
