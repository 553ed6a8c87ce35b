"""
Immutable in-memory reference tables used by every estimate.

The store is built once per process (see ``load_reference_store``) and then
shared read-only between requests.
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from katori.core.exceptions import ReferenceDataError
from katori.core.schemas.nutrition import NutrientVector, NutritionRecord

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"

NUTRITION_DB_FILE = "nutrition-db.json"
UNIT_MAPPING_FILE = "unit-mapping.json"
INGREDIENT_MAPPING_FILE = "ingredient-mapping.json"
COMMON_INGREDIENTS_FILE = "common-indian-ingredients.json"

# Lookup order when a unit name appears in more than one category
UNIT_CATEGORY_ORDER = ("weight", "volume", "count")


class NutritionDBEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    food_code: str | None = None
    food_name: str = Field(..., min_length=1)
    food_group: str | None = None
    nutrition: NutrientVector

    def to_record(self) -> NutritionRecord:
        return NutritionRecord(
            name=self.food_name,
            nutrients=self.nutrition,
            food_code=self.food_code,
            food_group=self.food_group,
        )


class VolumeUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    default: float = Field(..., gt=0)
    density_adjustments: Mapping[str, float] = Field(default_factory=dict, validate_default=True)

    @field_validator("density_adjustments")
    @classmethod
    def read_only(cls, v):
        return MappingProxyType(dict(v))


class CountUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    default: float = Field(..., gt=0)


class UnitMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: Mapping[str, float] = Field(default_factory=dict, validate_default=True)
    volume: Mapping[str, VolumeUnit] = Field(default_factory=dict, validate_default=True)
    count: Mapping[str, CountUnit] = Field(default_factory=dict, validate_default=True)

    @field_validator("weight", "volume", "count")
    @classmethod
    def read_only(cls, v):
        return MappingProxyType(dict(v))


_nutrition_db_adapter = TypeAdapter(list[NutritionDBEntry])
_ingredient_mapping_adapter = TypeAdapter(dict[str, dict[str, list[str]]])
_common_ingredients_adapter = TypeAdapter(dict[str, dict[str, NutrientVector]])


def _normalize(name: str) -> str:
    return " ".join(name.lower().split())


@dataclass(frozen=True)
class ReferenceStore:
    """Read-only view over the four reference tables."""

    records: tuple[NutritionRecord, ...]
    units: UnitMapping
    ingredient_aliases: Mapping[str, Mapping[str, tuple[str, ...]]]
    common_ingredients: Mapping[str, NutritionRecord]
    alias_index: Mapping[str, str] = field(repr=False)

    @classmethod
    def from_tables(
        cls,
        nutrition_db: list[dict[str, Any]],
        unit_mapping: dict[str, Any],
        ingredient_mapping: dict[str, dict[str, list[str]]],
        common_ingredients: dict[str, dict[str, dict[str, float]]],
    ) -> "ReferenceStore":
        """Build a store from already-decoded tables, validating their shape."""
        entries = _nutrition_db_adapter.validate_python(nutrition_db)
        units = UnitMapping.model_validate(unit_mapping)
        aliases = _ingredient_mapping_adapter.validate_python(ingredient_mapping)
        common = _common_ingredients_adapter.validate_python(common_ingredients)
        return cls._build(entries, units, aliases, common)

    @classmethod
    def _build(cls, entries, units, aliases, common) -> "ReferenceStore":
        # Shortcut names are unique across categories; the first category wins.
        shortcuts: dict[str, NutritionRecord] = {}
        for category, items in common.items():
            for name, nutrients in items.items():
                key = _normalize(name)
                if key in shortcuts:
                    logger.debug(f"Duplicate common ingredient {key!r} in {category}, keeping first")
                    continue
                shortcuts[key] = NutritionRecord(name=key, nutrients=nutrients)

        alias_index: dict[str, str] = {}
        for items in aliases.values():
            for canonical, names in items.items():
                alias_index.setdefault(_normalize(canonical), canonical)
                for alias in names:
                    alias_index.setdefault(_normalize(alias), canonical)

        return cls(
            records=tuple(entry.to_record() for entry in entries),
            units=units,
            ingredient_aliases=MappingProxyType(
                {
                    category: MappingProxyType(
                        {canonical: tuple(names) for canonical, names in items.items()}
                    )
                    for category, items in aliases.items()
                }
            ),
            common_ingredients=MappingProxyType(shortcuts),
            alias_index=MappingProxyType(alias_index),
        )

    def find_unit(self, unit: str) -> tuple[str, Any] | None:
        """Return ``(category, unit_data)`` for the first category defining ``unit``."""
        for category in UNIT_CATEGORY_ORDER:
            table = getattr(self.units, category)
            if unit in table:
                return category, table[unit]
        return None


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ReferenceDataError(path, f"cannot read file ({e})") from e
    except json.JSONDecodeError as e:
        raise ReferenceDataError(path, f"invalid JSON ({e})") from e


def _validate(path: Path, validate):
    try:
        return validate(_read_json(path))
    except ValidationError as e:
        raise ReferenceDataError(path, str(e)) from e


def load_reference_store(data_dir: str | Path | None = None) -> ReferenceStore:
    """Load and validate all reference tables from ``data_dir``.

    Falls back to the tables packaged with katori when no directory is given.
    Raises ``ReferenceDataError`` if any file is missing or malformed.
    """
    data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
    logger.info(f"Loading reference data from {data_dir}")

    entries = _validate(data_dir / NUTRITION_DB_FILE, _nutrition_db_adapter.validate_python)
    units = _validate(data_dir / UNIT_MAPPING_FILE, UnitMapping.model_validate)
    aliases = _validate(
        data_dir / INGREDIENT_MAPPING_FILE, _ingredient_mapping_adapter.validate_python
    )
    common = _validate(
        data_dir / COMMON_INGREDIENTS_FILE, _common_ingredients_adapter.validate_python
    )

    store = ReferenceStore._build(entries, units, aliases, common)
    logger.info(
        f"Loaded {len(store.records)} nutrition records, "
        f"{len(store.common_ingredients)} common ingredients, "
        f"{len(store.alias_index)} ingredient aliases"
    )
    return store
