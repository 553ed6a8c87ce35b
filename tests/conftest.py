import json

import pytest

from katori.core.exceptions import OracleError
from katori.services.estimation_service import EstimationService
from katori.services.ingredient_extractor import IngredientExtractor
from katori.services.llm.base import BaseLLMService
from katori.services.reference_store import ReferenceStore

POTATO = {"energy_kcal": 74, "carb_g": 15.89, "protein_g": 1.52, "fat_g": 0.22, "free_sugar_g": 0.55, "fibre_g": 1.72}
CUMIN = {"energy_kcal": 356, "carb_g": 26.09, "protein_g": 13.91, "fat_g": 16.63, "free_sugar_g": 0, "fibre_g": 30.35}
RICE = {"energy_kcal": 356, "carb_g": 78.24, "protein_g": 7.94, "fat_g": 0.52, "free_sugar_g": 0, "fibre_g": 2.81}
POHA = {"energy_kcal": 354, "carb_g": 76.74, "protein_g": 7.44, "fat_g": 1.14, "free_sugar_g": 0, "fibre_g": 3.46}
ONION = {"energy_kcal": 49, "carb_g": 8.96, "protein_g": 1.5, "fat_g": 0.24, "free_sugar_g": 0, "fibre_g": 2.45}
OIL = {"energy_kcal": 900, "carb_g": 0, "protein_g": 0, "fat_g": 100, "free_sugar_g": 0, "fibre_g": 0}


@pytest.fixture
def reference_tables():
    """Small reference tables covering each lookup path."""
    return {
        "nutrition_db": [
            {"food_code": "A001", "food_name": "Potato, brown skin, big", "nutrition": {**POTATO, "energy_kj": 309.6}},
            {"food_code": "C001", "food_name": "Rice, raw, milled", "nutrition": RICE},
            {"food_code": "C002", "food_name": "Rice flakes (poha)", "nutrition": POHA},
            {"food_code": "A003", "food_name": "Onion, big", "nutrition": ONION},
            {"food_code": "F001", "food_name": "Cumin seeds", "nutrition": CUMIN},
        ],
        "unit_mapping": {
            "weight": {"g": 1, "kg": 1000},
            "volume": {
                "cup": {"default": 240, "density_adjustments": {"rice": 185}},
                "teaspoon": {"default": 5, "density_adjustments": {"cumin seeds": 2.1}},
                "tablespoon": {"default": 15, "density_adjustments": {}},
            },
            "count": {
                "medium": {"default": 150},
                "piece": {"default": 50},
            },
        },
        "ingredient_mapping": {
            "vegetables": {"potato": ["aloo", "Alu"], "onion": ["pyaaz", "kanda"]},
            "spices": {"cumin": ["jeera"]},
            "grains": {"rice": ["chawal", "basmati rice"], "quinoa": ["kinwa"]},
        },
        "common_ingredients": {
            "vegetables": {"potato": POTATO},
            "spices": {"cumin seeds": CUMIN},
            "fats": {"oil": OIL},
        },
    }


@pytest.fixture
def reference_store(reference_tables) -> ReferenceStore:
    return ReferenceStore.from_tables(**reference_tables)


class StubLLMService(BaseLLMService):
    """Returns a canned response instead of calling a model."""

    def __init__(self, response: str = "[]"):
        self.response = response
        self.calls = []

    async def extract_ingredients(self, dish_name: str) -> str:
        self.calls.append(dish_name)
        return self.response


class FailingLLMService(BaseLLMService):
    async def extract_ingredients(self, dish_name: str) -> str:
        raise OracleError("Failed to extract ingredients: 401 Unauthorized")


@pytest.fixture
def jeera_aloo_response():
    return json.dumps([
        {"ingredient": "potato", "quantity": 2, "unit": "medium"},
        {"ingredient": "cumin seeds", "quantity": 0.5, "unit": "teaspoon"},
    ])


@pytest.fixture
def make_service(reference_store):
    """Build an EstimationService whose model returns ``response``."""
    def _make(response: str = "[]") -> EstimationService:
        return EstimationService(reference_store, IngredientExtractor(StubLLMService(response)))
    return _make
