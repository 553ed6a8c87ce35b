"""
Tolerant parsing of the ingredient list returned by the extraction model.

Models are asked for a bare JSON array but regularly wrap it in markdown
fences or prose. Parsing walks a fixed ladder: strict JSON, fence-stripped
JSON, the outermost ``[...]`` substring, and finally an empty list.
"""
import json
import logging
import math
import re
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any

from katori.core.schemas.nutrition import RawIngredientEntry

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)

NO_ARRAY_ASSUMPTION = "Could not read an ingredient list from the model response"


@dataclass
class ExtractionResult:
    entries: list[RawIngredientEntry] = field(default_factory=list)
    assumptions: list[str] = field(default_factory=list)


def _load_array(text: str) -> list[Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"JSON decode failed: {e}")
        return None
    if not isinstance(data, list):
        logger.debug(f"Expected a JSON array, got {type(data).__name__}")
        return None
    return data


def extract_json_array(text: str | None) -> list[Any] | None:
    """Return the first JSON array recoverable from ``text``, or None."""
    if not text or not text.strip():
        logger.warning("Empty response from ingredient extraction model")
        return None

    data = _load_array(text.strip())
    if data is not None:
        return data

    cleaned = _FENCE_RE.sub("", text).strip()
    data = _load_array(cleaned)
    if data is not None:
        logger.debug("Parsed ingredient list after stripping code fences")
        return data

    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start != -1 and end > start:
        data = _load_array(cleaned[start:end + 1])
        if data is not None:
            logger.debug("Parsed ingredient list from array substring")
            return data

    logger.warning(f"No JSON array found in model response: {text[:200]!r}")
    return None


def parse_quantity(value: Any) -> float | None:
    """Coerce a model-supplied quantity to a non-negative float.

    Accepts numbers and numeric strings, including fractions like "1/2"
    and mixed numbers like "1 1/2". Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            quantity = float(value)
        elif isinstance(value, str):
            parts = value.strip().split()
            if not parts:
                return None
            quantity = float(sum(Fraction(part) for part in parts))
        else:
            return None
    except (ValueError, ZeroDivisionError, OverflowError):
        return None

    if not math.isfinite(quantity) or quantity < 0:
        return None
    return quantity


def validate_entries(items: list[Any]) -> ExtractionResult:
    """Turn raw array items into ``RawIngredientEntry`` objects.

    Items without a usable ingredient name are dropped; unusable quantities
    and units are cleared. Every such correction is noted as an assumption.
    """
    result = ExtractionResult()

    for item in items:
        name = item.get("ingredient") if isinstance(item, dict) else None
        if not isinstance(name, str) or not name.strip():
            logger.warning(f"Dropping ingredient entry without a name: {item!r}")
            result.assumptions.append(f"Ignored ingredient entry without a name: {item!r}")
            continue
        name = name.strip()

        raw_quantity = item.get("quantity")
        quantity = parse_quantity(raw_quantity)
        if raw_quantity is not None and quantity is None:
            result.assumptions.append(f'Invalid quantity "{raw_quantity}" for "{name}" ignored')

        raw_unit = item.get("unit")
        unit = None
        if isinstance(raw_unit, str):
            unit = raw_unit.strip().lower() or None
        elif raw_unit is not None:
            result.assumptions.append(f'Invalid unit "{raw_unit}" for "{name}" ignored')

        result.entries.append(RawIngredientEntry(ingredient=name, quantity=quantity, unit=unit))

    return result


def parse_ingredient_response(text: str | None) -> ExtractionResult:
    items = extract_json_array(text)
    if items is None:
        return ExtractionResult(assumptions=[NO_ARRAY_ASSUMPTION])
    return validate_entries(items)
