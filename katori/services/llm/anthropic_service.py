import anthropic

from katori.core.config import settings
from katori.core.exceptions import ConfigurationError, OracleError
from katori.services.llm.base import BaseLLMService
from katori.services.llm.prompts import SYSTEM_PROMPT, build_ingredients_prompt


class AnthropicService(BaseLLMService):
    def __init__(self):
        if not settings.ANTHROPIC_API_KEY:
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")
        self.client = anthropic.AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        self.model = settings.LLM_MODEL
        self.thinking_enabled = settings.LLM_THINKING_ENABLED
        self.thinking_budget = settings.LLM_THINKING_BUDGET

    async def extract_ingredients(self, dish_name: str) -> str:
        create_params = {
            "model": self.model,
            "max_tokens": settings.LLM_MAX_TOKENS + (self.thinking_budget if self.thinking_enabled else 0),
            "temperature": 1 if self.thinking_enabled else settings.LLM_TEMPERATURE,
            "system": SYSTEM_PROMPT,
            "messages": [
                {"role": "user", "content": build_ingredients_prompt(dish_name)}
            ]
        }
        if self.thinking_enabled:
            create_params["thinking"] = {"type": "enabled", "budget_tokens": self.thinking_budget}

        try:
            message = await self.client.messages.create(**create_params)
        except anthropic.APIError as e:
            raise OracleError(f"Failed to extract ingredients: {str(e)}") from e

        # Thinking blocks come first when enabled; keep only the answer text
        return "".join(block.text for block in message.content if block.type == "text")
