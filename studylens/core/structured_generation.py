"""
Structured Generation Engine - schema-constrained LLM outputs.

StrictEngine wraps an instructor client so every response is validated
against a Pydantic model. Provider failures are translated into the domain
error taxonomy: rate limits and depleted credits are retryable and retried
with exponential backoff, malformed responses are fatal for the call.
"""

import json
import logging
from typing import Any, List, Optional, Type, TypeVar

from openai import APIConnectionError, APIStatusError
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from studylens.core.settings import settings
from studylens.domain.exceptions import (
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    MalformedAIResponseError,
)
from studylens.infrastructure.ai.instructor_factory import create_async_instructor_client

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_MALFORMED_MARKERS = ("InstructorRetryException", "IncompleteOutputException")


def _compact_error(err: Exception, limit: int = 320) -> str:
    text = str(err or "").replace("\n", " ").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def _exception_chain(err: BaseException):
    seen = set()
    current: Optional[BaseException] = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def classify_provider_error(err: Exception) -> AIServiceError:
    """Map a raw provider/instructor exception onto the domain taxonomy."""
    if isinstance(err, AIServiceError):
        return err

    for link in _exception_chain(err):
        status = getattr(link, "status_code", None)
        if isinstance(link, APIStatusError) or isinstance(status, int):
            if status == 429:
                return AIRateLimitError(
                    "Rate limit exceeded. Please try again later.", status_code=429
                )
            if status == 402:
                return AIQuotaExceededError(
                    "AI credits depleted. Please add credits to continue.", status_code=402
                )
            return AIServiceError(
                f"AI generation failed: {status}",
                details=_compact_error(link),
                status_code=status if isinstance(status, int) else None,
            )
        if isinstance(link, APIConnectionError):
            return AIServiceError(
                "AI provider unreachable", details=_compact_error(link), retryable=True
            )

    for link in _exception_chain(err):
        if isinstance(link, (ValidationError, json.JSONDecodeError)) or type(link).__name__ in _MALFORMED_MARKERS:
            return MalformedAIResponseError(
                "AI response did not match the expected structure",
                details=_compact_error(link),
            )

    return AIServiceError("AI generation failed", details=_compact_error(err))


def _is_retryable(err: BaseException) -> bool:
    return isinstance(err, AIServiceError) and err.retryable


class StrictEngine:
    """
    Structured generation engine with constrained decoding.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        max_validation_retries: int = 2,
        max_attempts: Optional[int] = None,
        wait: Optional[wait_base] = None,
    ):
        self._client = client
        self._model = model
        self.max_validation_retries = max_validation_retries
        self.max_attempts = max_attempts or settings.AI_RETRY_MAX_ATTEMPTS
        self.max_tokens = settings.AI_MAX_TOKENS
        self._wait = wait or wait_exponential(
            multiplier=settings.AI_RETRY_BASE_DELAY_SECONDS,
            min=settings.AI_RETRY_BASE_DELAY_SECONDS,
            max=settings.AI_RETRY_MAX_DELAY_SECONDS,
        )

    def _ensure_client(self) -> None:
        if self._client is None or self._model is None:
            client, model = create_async_instructor_client()
            self._client = self._client or client
            self._model = self._model or model

    @staticmethod
    def build_messages(
        prompt: str,
        system_prompt: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> List[dict]:
        messages: List[dict] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if image_url:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            )
        else:
            messages.append({"role": "user", "content": prompt})
        return messages

    async def agenerate(
        self,
        messages: List[dict],
        schema: Type[T],
        temperature: float = 0.1,
    ) -> T:
        """
        Generate a response validated against `schema`.

        Raises:
            AIRateLimitError / AIQuotaExceededError: after the retry budget is spent.
            MalformedAIResponseError: the output never validated.
            AIServiceError: any other provider failure.
        """
        self._ensure_client()
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._call(messages, schema, temperature)
        raise AIServiceError("AI generation failed")  # pragma: no cover

    async def _call(self, messages: List[dict], schema: Type[T], temperature: float) -> T:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                response_model=schema,
                temperature=temperature,
                max_tokens=self.max_tokens,
                max_retries=self.max_validation_retries,
            )
        except Exception as e:
            translated = classify_provider_error(e)
            logger.error(
                "StrictEngine generation failed: %s (%s, retryable=%s)",
                _compact_error(e),
                translated.code,
                translated.retryable,
            )
            if translated is e:
                raise
            raise translated from e

        logger.debug(f"StrictEngine generated: {type(response).__name__}")
        return response
