from typing import Iterable

from katori.core.schemas.nutrition import DishType, RawIngredientEntry

# Ingredients that indicate the sabzi is cooked in a gravy
GRAVY_INDICATORS = frozenset({"tomato", "tamatar", "onion", "pyaaz"})


def classify_dish(dish_name: str, ingredients: Iterable[RawIngredientEntry]) -> DishType:
    """Rule-based dish type from name keywords, then gravy ingredients.

    Curry, Snack, Dessert, Soup and Mixed Dish are valid labels but no rule
    produces them yet.
    """
    name = dish_name.lower()

    if "dal" in name:
        return DishType.DAL
    if "rice" in name:
        return DishType.RICE
    if "roti" in name or "chapati" in name:
        return DishType.ROTI

    has_gravy = any(
        entry.ingredient.strip().lower() in GRAVY_INDICATORS for entry in ingredients
    )
    return DishType.WET_SABZI if has_gravy else DishType.DRY_SABZI
