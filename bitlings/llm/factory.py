import logging
from typing import Optional

from bitlings.config import Settings
from bitlings.llm.llm_connector import LLMConnector

logger = logging.getLogger(__name__)

PROVIDERS = ("openai", "gemini", "none")


def build_connector(settings: Settings) -> Optional[LLMConnector]:
    """
    Returns the configured connector, or None when generation is disabled.
    Raises ValueError for an unknown provider or missing credentials.
    """
    provider = settings.llm_provider
    if provider == "none":
        logger.info("LLM_PROVIDER=none, stats and image generation are disabled.")
        return None
    if provider == "openai":
        from bitlings.llm.openai_connector import OpenAIConnector

        return OpenAIConnector()
    if provider == "gemini":
        from bitlings.llm.gemini_connector import GeminiConnector

        return GeminiConnector()
    raise ValueError(f"Unknown LLM_PROVIDER {provider!r}, expected one of {PROVIDERS}")
