import math
from dataclasses import dataclass
from typing import Iterable

from katori.core.schemas.nutrition import (
    NUTRIENT_FIELDS,
    NutrientVector,
    NutritionRecord,
    NutritionSummary,
)

# Standard katori (serving bowl) mass in grams
SERVING_MASS_G = 180.0


@dataclass(frozen=True)
class WeighedIngredient:
    record: NutritionRecord | None
    mass_grams: float


def scale_to_serving(per_100g: NutrientVector) -> NutrientVector:
    return per_100g.scaled(SERVING_MASS_G / 100)


def aggregate(ingredients: Iterable[WeighedIngredient]) -> NutritionSummary:
    """Combine ingredient contributions into per-100g and per-serving profiles.

    Each record holds nutrients per 100 g, so an ingredient contributes
    ``value * mass / 100`` and the dish total is renormalized to 100 g.
    That equals the mass-weighted average of the per-100g values, which is
    computed from mass shares so very large masses cannot overflow.
    Entries without a record or with no finite positive mass are ignored.
    """
    kept = [
        item for item in ingredients
        if item.record is not None and item.mass_grams > 0 and math.isfinite(item.mass_grams)
    ]
    total_weight = sum(item.mass_grams for item in kept)

    if not kept:
        per_100g = NutrientVector()
    else:
        largest = max(item.mass_grams for item in kept)
        shares = [item.mass_grams / largest for item in kept]
        share_total = sum(shares)
        per_100g = NutrientVector(**{
            nutrient: sum(
                getattr(item.record.nutrients, nutrient) * share
                for item, share in zip(kept, shares)
            ) / share_total
            for nutrient in NUTRIENT_FIELDS
        })

    return NutritionSummary(
        total_weight=total_weight,
        nutrition_per_100g=per_100g,
        nutrition_per_serving=scale_to_serving(per_100g),
    )
