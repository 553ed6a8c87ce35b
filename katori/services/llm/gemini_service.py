from google import genai
from google.genai import types as genai_types

from katori.core.config import settings
from katori.core.exceptions import ConfigurationError, OracleError
from katori.services.llm.base import BaseLLMService
from katori.services.llm.prompts import SYSTEM_PROMPT, build_ingredients_prompt


class GeminiService(BaseLLMService):
    def __init__(self):
        if not settings.GEMINI_API_KEY:
            raise ConfigurationError("GEMINI_API_KEY environment variable is not set")
        self.client = genai.Client(api_key=settings.GEMINI_API_KEY)
        self.model = settings.LLM_MODEL

    async def extract_ingredients(self, dish_name: str) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=build_ingredients_prompt(dish_name),
                config=genai_types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    temperature=settings.LLM_TEMPERATURE,
                    max_output_tokens=settings.LLM_MAX_TOKENS,
                ),
            )
            return response.text or ""

        except Exception as e:
            raise OracleError(f"Failed to extract ingredients: {str(e)}") from e
