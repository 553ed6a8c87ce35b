import logging

from katori.core.exceptions import EstimationError, OracleError
from katori.core.schemas.nutrition import EstimationResult, RawIngredientEntry
from katori.services.dish_classifier import classify_dish
from katori.services.ingredient_extractor import IngredientExtractor
from katori.services.ingredient_resolver import IngredientResolver
from katori.services.nutrition_aggregator import WeighedIngredient, aggregate
from katori.services.reference_store import ReferenceStore
from katori.services.unit_converter import ConversionStatus, UnitConverter

logger = logging.getLogger(__name__)

NO_INGREDIENTS_ASSUMPTION = "No ingredients found, using default recipe"


class EstimationService:
    def __init__(self, store: ReferenceStore, extractor: IngredientExtractor):
        self.store = store
        self.extractor = extractor
        self.resolver = IngredientResolver(store)
        self.converter = UnitConverter(store)

    async def estimate(self, dish_name: str) -> EstimationResult:
        """Estimate the nutrition profile of a dish from its name."""
        try:
            parsed = await self.extractor.extract_ingredients(dish_name)
        except OracleError as e:
            logger.error(f"Ingredient extraction failed for {dish_name!r}: {e}")
            raise EstimationError(f"Failed to estimate nutrition for {dish_name!r}") from e

        return self.estimate_from_ingredients(dish_name, parsed.entries, parsed.assumptions)

    def estimate_from_ingredients(
        self,
        dish_name: str,
        ingredients: list[RawIngredientEntry],
        assumptions: list[str] | None = None,
    ) -> EstimationResult:
        """Run resolution, conversion, aggregation and classification."""
        assumptions = list(assumptions or [])

        if not ingredients:
            assumptions.append(NO_INGREDIENTS_ASSUMPTION)

        weighed = []
        for entry in ingredients:
            resolution = self.resolver.resolve(entry.ingredient)
            note = resolution.assumption()
            if note:
                assumptions.append(note)
            if not resolution.found:
                continue

            if not entry.quantity or not entry.unit:
                assumptions.append(
                    f'Missing quantity/unit for "{entry.ingredient}", excluded from totals'
                )
                continue

            conversion = self.converter.convert(entry.quantity, entry.unit, entry.ingredient)
            if conversion.status == ConversionStatus.UNKNOWN_UNIT:
                assumptions.append(
                    f'Unit "{entry.unit}" for "{entry.ingredient}" not recognised, '
                    f"excluded from totals"
                )
                continue
            if conversion.status == ConversionStatus.OUT_OF_RANGE:
                assumptions.append(
                    f'Quantity {entry.quantity} {entry.unit} for "{entry.ingredient}" is too large, '
                    f"excluded from totals"
                )
                continue

            weighed.append(WeighedIngredient(resolution.record, conversion.grams))

        for note in assumptions:
            logger.debug(f"{dish_name}: {note}")

        return EstimationResult(
            dish_name=dish_name,
            dish_type=classify_dish(dish_name, ingredients),
            assumptions=assumptions,
            ingredients=list(ingredients),
            nutrition=aggregate(weighed),
        )
