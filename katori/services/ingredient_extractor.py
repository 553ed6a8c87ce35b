import logging

from katori.services.llm.base import BaseLLMService
from katori.services.response_parser import ExtractionResult, parse_ingredient_response

logger = logging.getLogger(__name__)


class IngredientExtractor:
    """Asks the configured model for a dish's ingredients and parses the answer."""

    def __init__(self, llm_service: BaseLLMService):
        self.llm_service = llm_service

    async def extract_ingredients(self, dish_name: str) -> ExtractionResult:
        # OracleError from the provider propagates to the caller
        response_text = await self.llm_service.extract_ingredients(dish_name)
        parsed = parse_ingredient_response(response_text)
        logger.info(f"Extracted {len(parsed.entries)} ingredients for {dish_name!r}")
        return parsed
