import json

import pytest

from conftest import FailingLLMService, StubLLMService
from katori.core.exceptions import EstimationError
from katori.core.schemas.nutrition import NUTRIENT_FIELDS, DishType, RawIngredientEntry
from katori.services.estimation_service import NO_INGREDIENTS_ASSUMPTION, EstimationService
from katori.services.ingredient_extractor import IngredientExtractor
from katori.services.response_parser import NO_ARRAY_ASSUMPTION, ExtractionResult


@pytest.mark.asyncio
async def test_jeera_aloo_end_to_end(make_service, jeera_aloo_response):
    """Test the full estimate with a stubbed model response."""
    service = make_service(jeera_aloo_response)

    result = await service.estimate("Jeera Aloo (mild fried)")

    assert result.dish_name == "Jeera Aloo (mild fried)"
    assert result.dish_type == DishType.DRY_SABZI
    assert len(result.ingredients) == 2
    assert result.assumptions == []
    # 2 medium potatoes + 0.5 tsp cumin at 2.1 g/tsp
    assert result.nutrition.total_weight == pytest.approx(301.05)
    for nutrient in NUTRIENT_FIELDS:
        assert getattr(result.nutrition.nutrition_per_100g, nutrient) >= 0
        assert getattr(result.nutrition.nutrition_per_serving, nutrient) >= 0
    expected_kcal = (74 * 300 + 356 * 1.05) / 301.05
    assert result.nutrition.nutrition_per_100g.energy_kcal == pytest.approx(expected_kcal)
    assert result.nutrition.nutrition_per_serving.energy_kcal == pytest.approx(expected_kcal * 1.8)


@pytest.mark.asyncio
async def test_result_serializes_with_camel_case(make_service, jeera_aloo_response):
    result = await make_service(jeera_aloo_response).estimate("Jeera Aloo")

    data = result.model_dump(mode="json", by_alias=True)

    assert data["dishName"] == "Jeera Aloo"
    assert data["dishType"] == "Dry Sabzi"
    assert set(data["nutrition"]) == {"totalWeight", "nutritionPer100g", "nutritionPerServing"}
    assert data["ingredients"][0] == {"ingredient": "potato", "quantity": 2.0, "unit": "medium"}


@pytest.mark.asyncio
async def test_deterministic(make_service, jeera_aloo_response):
    first = await make_service(jeera_aloo_response).estimate("Jeera Aloo")
    second = await make_service(jeera_aloo_response).estimate("Jeera Aloo")

    assert first == second


@pytest.mark.asyncio
async def test_no_ingredients(make_service):
    result = await make_service("[]").estimate("Mystery Curry")

    assert result.assumptions == [NO_INGREDIENTS_ASSUMPTION]
    assert result.ingredients == []
    assert result.nutrition.total_weight == 0
    assert result.nutrition.nutrition_per_100g.energy_kcal == 0
    assert result.nutrition.nutrition_per_serving.energy_kcal == 0


@pytest.mark.asyncio
async def test_unparseable_response_is_absorbed(make_service):
    result = await make_service("Sorry, I cannot help with that.").estimate("Aloo Gobi")

    assert result.assumptions == [NO_ARRAY_ASSUMPTION, NO_INGREDIENTS_ASSUMPTION]
    assert result.nutrition.total_weight == 0
    assert result.dish_type == DishType.DRY_SABZI


@pytest.mark.asyncio
async def test_extractor_returns_extraction_result(jeera_aloo_response):
    extractor = IngredientExtractor(StubLLMService(jeera_aloo_response))

    result = await extractor.extract_ingredients("Jeera Aloo")

    assert isinstance(result, ExtractionResult)
    assert [e.ingredient for e in result.entries] == ["potato", "cumin seeds"]
    assert result.assumptions == []


@pytest.mark.asyncio
async def test_oracle_failure_raises_estimation_error(reference_store):
    service = EstimationService(reference_store, IngredientExtractor(FailingLLMService()))

    with pytest.raises(EstimationError) as exc_info:
        await service.estimate("Jeera Aloo")

    assert "401" in str(exc_info.value.__cause__)


def test_unknown_ingredient_adds_exactly_one_assumption(make_service):
    service = make_service()
    entries = [
        RawIngredientEntry(ingredient="potato", quantity=2, unit="medium"),
        RawIngredientEntry(ingredient="dragon fruit", quantity=1, unit="bowl"),
    ]

    result = service.estimate_from_ingredients("Fusion Sabzi", entries)

    assert len(result.assumptions) == 1
    assert "dragon fruit" in result.assumptions[0]
    assert result.nutrition.total_weight == 300


def test_alias_match_is_noted(make_service):
    entries = [RawIngredientEntry(ingredient="chawal", quantity=1, unit="cup")]

    result = make_service().estimate_from_ingredients("Jeera Rice", entries)

    assert result.assumptions == ['Ingredient "chawal" matched to "Rice, raw, milled" via alias "rice"']
    # "chawal" has no density override, so the cup default applies
    assert result.nutrition.total_weight == 240
    assert result.dish_type == DishType.RICE


def test_missing_quantity_and_unknown_unit_are_noted(make_service):
    entries = [
        RawIngredientEntry(ingredient="potato", quantity=None, unit="medium"),
        RawIngredientEntry(ingredient="cumin seeds", quantity=1, unit=None),
        RawIngredientEntry(ingredient="oil", quantity=2, unit="ladle"),
    ]

    result = make_service().estimate_from_ingredients("Aloo Fry", entries)

    assert result.assumptions == [
        'Missing quantity/unit for "potato", excluded from totals',
        'Missing quantity/unit for "cumin seeds", excluded from totals',
        'Unit "ladle" for "oil" not recognised, excluded from totals',
    ]
    assert result.nutrition.total_weight == 0
    assert len(result.ingredients) == 3


def test_parser_notes_come_first(make_service):
    result = make_service().estimate_from_ingredients(
        "Aloo Tamatar",
        [RawIngredientEntry(ingredient="tomato", quantity=2, unit="medium")],
        ["earlier note"],
    )

    assert result.assumptions[0] == "earlier note"
    assert result.dish_type == DishType.WET_SABZI


@pytest.mark.asyncio
async def test_fenced_response_with_fractions(make_service):
    response = "```json\n" + json.dumps([
        {"ingredient": "Potato", "quantity": "1 1/2", "unit": "Medium"},
        {"ingredient": "oil", "quantity": 1, "unit": "tablespoon"},
    ]) + "\n```"

    result = await make_service(response).estimate("Aloo Bhaji")

    assert result.assumptions == []
    assert result.ingredients[0].quantity == 1.5
    assert result.nutrition.total_weight == pytest.approx(225 + 15)


@pytest.mark.asyncio
async def test_overflowing_quantity_is_absorbed(make_service):
    response = '[{"ingredient": "potato", "quantity": "1e400", "unit": "g"}]'

    result = await make_service(response).estimate("Aloo")

    assert result.assumptions == [
        'Invalid quantity "1e400" for "potato" ignored',
        'Missing quantity/unit for "potato", excluded from totals',
    ]
    assert result.nutrition.total_weight == 0


@pytest.mark.asyncio
async def test_quantity_too_large_to_convert_is_absorbed(make_service):
    response = json.dumps([
        {"ingredient": "potato", "quantity": 1e308, "unit": "kg"},
        {"ingredient": "cumin seeds", "quantity": 1, "unit": "teaspoon"},
    ])

    result = await make_service(response).estimate("Aloo")

    assert result.assumptions == [
        'Quantity 1e+308 kg for "potato" is too large, excluded from totals'
    ]
    assert result.nutrition.total_weight == pytest.approx(2.1)
    assert result.nutrition.nutrition_per_100g.energy_kcal == pytest.approx(356)
