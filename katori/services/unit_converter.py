import logging
import math
from dataclasses import dataclass
from enum import Enum

from katori.services.reference_store import ReferenceStore

logger = logging.getLogger(__name__)


class ConversionStatus(str, Enum):
    CONVERTED = "converted"
    MISSING_QUANTITY = "missing_quantity"
    MISSING_UNIT = "missing_unit"
    UNKNOWN_UNIT = "unknown_unit"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class Conversion:
    grams: float
    status: ConversionStatus
    category: str | None = None
    density_adjusted: bool = False

    @property
    def usable(self) -> bool:
        return self.status == ConversionStatus.CONVERTED


class UnitConverter:
    """Converts (quantity, unit, ingredient) triples into grams."""

    def __init__(self, store: ReferenceStore):
        self.store = store

    def convert(self, quantity: float | None, unit: str | None, ingredient: str) -> Conversion:
        if quantity is None:
            return Conversion(0.0, ConversionStatus.MISSING_QUANTITY)
        if not unit:
            return Conversion(0.0, ConversionStatus.MISSING_UNIT)

        found = self.store.find_unit(unit)
        if found is None:
            logger.debug(f"Unknown unit {unit!r} for {ingredient!r}")
            return Conversion(0.0, ConversionStatus.UNKNOWN_UNIT)

        category, unit_data = found
        density_adjusted = False
        if category == "weight":
            grams_per_unit = unit_data
        elif category == "volume":
            grams_per_unit = unit_data.density_adjustments.get(ingredient)
            if grams_per_unit is None:
                grams_per_unit = unit_data.density_adjustments.get(ingredient.lower())
            density_adjusted = grams_per_unit is not None
            if not density_adjusted:
                grams_per_unit = unit_data.default
        else:
            grams_per_unit = unit_data.default

        grams = quantity * grams_per_unit
        if not math.isfinite(grams):
            logger.warning(f"{quantity} {unit} of {ingredient!r} is too large to convert")
            return Conversion(0.0, ConversionStatus.OUT_OF_RANGE, category)
        return Conversion(grams, ConversionStatus.CONVERTED, category, density_adjusted)

    def to_grams(self, quantity: float | None, unit: str | None, ingredient: str) -> float:
        return self.convert(quantity, unit, ingredient).grams
