"""
Centralized AI model configuration for analysis and quiz generation.
"""

from studylens.core.settings import settings


class AIModelConfig:
    # OpenAI-compatible gateway (serves Gemini models)
    AI_API_KEY = settings.AI_API_KEY
    AI_BASE_URL = settings.AI_BASE_URL
    VISION_MODEL = settings.AI_MODEL
    QUIZ_MODEL = settings.AI_MODEL

    # Direct OpenAI fallback
    OPENAI_API_KEY = settings.OPENAI_API_KEY
    OPENAI_FALLBACK_MODEL = settings.OPENAI_FALLBACK_MODEL

    DEFAULT_TEMPERATURE_ANALYSIS = settings.ANALYSIS_TEMPERATURE
    DEFAULT_TEMPERATURE_QUIZ = settings.QUIZ_TEMPERATURE
