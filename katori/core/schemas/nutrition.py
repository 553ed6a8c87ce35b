from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NUTRIENT_FIELDS = (
    "energy_kcal",
    "carb_g",
    "protein_g",
    "fat_g",
    "free_sugar_g",
    "fibre_g",
)


class DishType(str, Enum):
    WET_SABZI = "Wet Sabzi"
    DRY_SABZI = "Dry Sabzi"
    DAL = "Dal"
    RICE = "Rice"
    ROTI = "Roti"
    CURRY = "Curry"
    SNACK = "Snack"
    DESSERT = "Dessert"
    SOUP = "Soup"
    MIXED_DISH = "Mixed Dish"


class NutrientVector(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    energy_kcal: float = Field(0.0, ge=0)
    carb_g: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)
    free_sugar_g: float = Field(0.0, ge=0)
    fibre_g: float = Field(0.0, ge=0)

    def scaled(self, factor: float) -> "NutrientVector":
        """Return a copy with every nutrient multiplied by ``factor``."""
        return NutrientVector(
            **{name: getattr(self, name) * factor for name in NUTRIENT_FIELDS}
        )


class NutritionRecord(BaseModel):
    """Nutrient content of 100 g of one food item."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    nutrients: NutrientVector
    food_code: str | None = None
    food_group: str | None = None


class RawIngredientEntry(BaseModel):
    """One ingredient line as returned by the extraction model, after validation."""

    model_config = ConfigDict(frozen=True)

    ingredient: str
    quantity: float | None = None
    unit: str | None = None


class NutritionSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_weight: float = Field(0.0, ge=0, alias="totalWeight")
    nutrition_per_100g: NutrientVector = Field(
        default_factory=NutrientVector, alias="nutritionPer100g"
    )
    nutrition_per_serving: NutrientVector = Field(
        default_factory=NutrientVector, alias="nutritionPerServing"
    )


class EstimationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dish_name: str = Field(..., alias="dishName")
    dish_type: DishType = Field(..., alias="dishType")
    assumptions: list[str] = Field(default_factory=list)
    ingredients: list[RawIngredientEntry] = Field(default_factory=list)
    nutrition: NutritionSummary


class EstimateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dish_name: str | None = Field(None, alias="dishName")
