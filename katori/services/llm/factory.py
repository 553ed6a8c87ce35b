from katori.core.config import settings
from katori.services.llm.anthropic_service import AnthropicService
from katori.services.llm.base import BaseLLMService
from katori.services.llm.gemini_service import GeminiService
from katori.services.llm.openai_service import OpenAIService


def get_llm_service() -> BaseLLMService:
    """Factory function to get the appropriate LLM service based on configuration."""
    if settings.LLM_PROVIDER == "gemini":
        return GeminiService()
    elif settings.LLM_PROVIDER == "openai":
        return OpenAIService()
    elif settings.LLM_PROVIDER == "anthropic":
        return AnthropicService()
    else:
        raise ValueError(f"Unknown LLM provider: {settings.LLM_PROVIDER}")
