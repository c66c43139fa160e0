"""Google Gemini client singleton for identity-locked generation."""

from functools import lru_cache

from google import genai

from src.core.config import get_settings


@lru_cache
def get_gemini_client() -> genai.Client:
    """Get cached Gemini client singleton.

    Returns:
        genai.Client: Client bound to the configured API key.
    """
    settings = get_settings()
    return genai.Client(api_key=settings.google_ai_api_key)
