import logging
from typing import Any, Tuple

import instructor
from openai import AsyncOpenAI

from studylens.core.ai_models import AIModelConfig

logger = logging.getLogger(__name__)


def create_async_instructor_client() -> Tuple[Any, str]:
    """
    Create an async instructor client and the model name to call it with.

    The AI gateway is preferred; a plain OpenAI key is the fallback.
    """
    if AIModelConfig.AI_API_KEY:
        client = instructor.from_openai(
            AsyncOpenAI(api_key=AIModelConfig.AI_API_KEY, base_url=AIModelConfig.AI_BASE_URL),
            mode=instructor.Mode.JSON,
        )
        logger.debug(f"Instructor client using AI gateway: {AIModelConfig.VISION_MODEL}")
        return client, AIModelConfig.VISION_MODEL

    if AIModelConfig.OPENAI_API_KEY:
        client = instructor.from_openai(
            AsyncOpenAI(api_key=AIModelConfig.OPENAI_API_KEY),
            mode=instructor.Mode.JSON,
        )
        logger.debug(f"Instructor client using OpenAI: {AIModelConfig.OPENAI_FALLBACK_MODEL}")
        return client, AIModelConfig.OPENAI_FALLBACK_MODEL

    raise ValueError(
        "No valid AI provider found for instructor client. Set AI_API_KEY (or LOVABLE_API_KEY) or OPENAI_API_KEY."
    )
