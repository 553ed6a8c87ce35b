from openai import AsyncOpenAI

from katori.core.config import settings
from katori.core.exceptions import ConfigurationError, OracleError
from katori.services.llm.base import BaseLLMService
from katori.services.llm.prompts import SYSTEM_PROMPT, build_ingredients_prompt


class OpenAIService(BaseLLMService):
    def __init__(self):
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY environment variable is not set")
        self.client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = settings.LLM_MODEL

    async def extract_ingredients(self, dish_name: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_ingredients_prompt(dish_name)}
                ],
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_TOKENS
            )
            return response.choices[0].message.content or ""

        except Exception as e:
            raise OracleError(f"Failed to extract ingredients: {str(e)}") from e
