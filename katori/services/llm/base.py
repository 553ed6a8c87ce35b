from abc import ABC, abstractmethod


class BaseLLMService(ABC):
    @abstractmethod
    async def extract_ingredients(self, dish_name: str) -> str:
        """Return the model's raw answer listing ingredients for a dish."""
        pass
