import logging
from dataclasses import dataclass
from enum import Enum

from katori.core.schemas.nutrition import NutritionRecord
from katori.services.reference_store import ReferenceStore

logger = logging.getLogger(__name__)


class MatchType(str, Enum):
    SHORTCUT = "shortcut"
    ALIAS = "alias"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Resolution:
    """Outcome of mapping one free-text ingredient name to a nutrition record."""

    ingredient: str
    match_type: MatchType
    record: NutritionRecord | None = None
    canonical_key: str | None = None

    @property
    def found(self) -> bool:
        return self.record is not None

    def assumption(self) -> str | None:
        """Human-readable note for any match that was not a direct shortcut hit."""
        if self.match_type == MatchType.ALIAS:
            return (
                f'Ingredient "{self.ingredient}" matched to "{self.record.name}" '
                f'via alias "{self.canonical_key}"'
            )
        if self.match_type == MatchType.NOT_FOUND:
            return f'Ingredient "{self.ingredient}" not found in nutrition DB, excluded from totals'
        return None


def normalize_ingredient_name(name: str) -> str:
    return " ".join(name.lower().split())


class IngredientResolver:
    """Maps ingredient names to reference records.

    Lookup order: common-ingredient shortcuts, then the alias table followed
    by a substring search of the nutrition DB. Anything else is reported as
    not found rather than raised.
    """

    def __init__(self, store: ReferenceStore):
        self.store = store

    def resolve(self, ingredient: str) -> Resolution:
        normalized = normalize_ingredient_name(ingredient)

        shortcut = self.store.common_ingredients.get(normalized)
        if shortcut is not None:
            return Resolution(ingredient, MatchType.SHORTCUT, shortcut, normalized)

        canonical = self.store.alias_index.get(normalized)
        if canonical is None:
            logger.debug(f"No alias for ingredient {ingredient!r}")
            return Resolution(ingredient, MatchType.NOT_FOUND)

        needle = canonical.lower()
        for record in self.store.records:
            if needle in record.name.lower():
                logger.debug(f"Resolved {ingredient!r} to {record.name!r} via {canonical!r}")
                return Resolution(ingredient, MatchType.ALIAS, record, canonical)

        logger.debug(f"Alias {canonical!r} for {ingredient!r} has no nutrition record")
        return Resolution(ingredient, MatchType.NOT_FOUND, canonical_key=canonical)
